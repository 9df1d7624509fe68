import os
import sqlite3

# Seconds a writer waits on a locked database before giving up
BUSY_TIMEOUT = 10


class Database:

    @staticmethod
    def connect(path):
        conn = sqlite3.connect(path, timeout=BUSY_TIMEOUT)
        conn.row_factory = sqlite3.Row
        return conn

    @staticmethod
    def ensure_dir(path):
        """Create the directory holding a database file, if it has one"""
        db_dir = os.path.dirname(path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)
