"""
Persistent logging service for busk-cats.
Stores structured log entries in the app_logs table next to the subscribers,
so operator-relevant events survive container rebuilds.
"""

import json
import logging
import traceback
from datetime import datetime

from flask import current_app, has_app_context, has_request_context, request

from .database import Database

logger = logging.getLogger(__name__)


class LoggingService:
    """Writes log entries to the app_logs table of the subscribers database"""

    def __init__(self, db_path=None):
        self.db_path = db_path
        self._ready_paths = set()

    def _resolve_db_path(self):
        if self.db_path:
            return self.db_path
        if has_app_context():
            ext = current_app.extensions.get('buskcats')
            if ext is not None:
                return ext.settings.db_path
        return None

    def _ensure_logs_table(self, conn, db_path):
        if db_path in self._ready_paths:
            return
        conn.execute("""
            CREATE TABLE IF NOT EXISTS app_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp TEXT NOT NULL,
                level TEXT NOT NULL,
                source TEXT NOT NULL,
                message TEXT NOT NULL,
                details TEXT,
                ip_address TEXT,
                user_agent TEXT,
                request_path TEXT
            )
        """)
        conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_logs_timestamp
            ON app_logs(timestamp DESC)
        """)
        self._ready_paths.add(db_path)

    @staticmethod
    def _get_request_context():
        """Extract request context information"""
        if not has_request_context():
            return None, None, None

        ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
        if ip_address and ',' in ip_address:
            ip_address = ip_address.split(',')[0].strip()

        return ip_address, request.headers.get('User-Agent', '')[:500], request.path

    def log(self, level, source, message, details=None):
        """
        Log a message to the database

        Args:
            level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            source (str): Source component (subscribers, broadcast, security, ...)
            message (str): Main log message
            details (str/dict): Additional details (JSON-encoded if dict)
        """
        db_path = self._resolve_db_path()
        if isinstance(details, dict):
            details = json.dumps(details)

        if not db_path:
            logger.log(getattr(logging, level.upper(), logging.INFO), f"[{source}] {message} {details or ''}")
            return

        ip_address, user_agent, request_path = self._get_request_context()
        try:
            with Database.connect(db_path) as conn:
                self._ensure_logs_table(conn, db_path)
                conn.execute("""
                    INSERT INTO app_logs
                    (timestamp, level, source, message, details, ip_address, user_agent, request_path)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    datetime.now().isoformat(), level.upper(), source, message, details,
                    ip_address, user_agent, request_path
                ))
        except Exception as e:
            # Fallback to the process logger if the database is unavailable
            logger.error(f"Logging service error: {e}")
            logger.log(getattr(logging, level.upper(), logging.INFO), f"[{source}] {message} {details or ''}")

    def info(self, source, message, details=None):
        self.log('INFO', source, message, details)

    def warning(self, source, message, details=None):
        self.log('WARNING', source, message, details)

    def error(self, source, message, details=None):
        self.log('ERROR', source, message, details)

    def log_error_with_traceback(self, source, error, details=None):
        """Log error with full traceback"""
        error_details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': traceback.format_exc()
        }
        if details:
            error_details['additional_details'] = details

        self.error(source, f"Exception occurred: {type(error).__name__}", error_details)

    def log_security_event(self, message, details=None):
        """Log security-related events"""
        self.warning('security', message, details)

    def recent(self, limit=50, source=None):
        """Most recent log entries, newest first"""
        db_path = self._resolve_db_path()
        if not db_path:
            return []
        with Database.connect(db_path) as conn:
            self._ensure_logs_table(conn, db_path)
            if source:
                rows = conn.execute(
                    'SELECT * FROM app_logs WHERE source = ? ORDER BY id DESC LIMIT ?',
                    (source, limit)
                ).fetchall()
            else:
                rows = conn.execute(
                    'SELECT * FROM app_logs ORDER BY id DESC LIMIT ?', (limit,)
                ).fetchall()
        return [dict(row) for row in rows]


# Convenience instance; resolves its database from the current app
db_logger = LoggingService()


def db_log(level, source, message, details=None):
    """Log to the persistent DB logger (used by modules)"""
    db_logger.log(level, source, message, details)
