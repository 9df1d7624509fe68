"""
busk-cats - Double Opt-In Mailing Lists
=======================================

A small Flask service for email list subscriptions:
- Public subscribe endpoint with emailed confirmation link
- Token confirm/unsubscribe pages
- Admin broadcast, add, list and delete endpoints (bearer secret)

Usage:
    from buskcats import create_app

    app = create_app({'ADMIN_SECRET': '...', 'ALLOWED_ORIGINS': 'https://example.com'})

Or as an extension on an existing app:
    from buskcats import BuskCats

    buskcats = BuskCats(app)
"""

import logging

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from .core.config import Config, Settings
from .core.errors import AppError, TransportError
from .core.logging_service import db_log, db_logger
from .modules.broadcast import broadcast_bp
from .modules.broadcast.engine import Broadcaster
from .modules.email.email_service import EmailService
from .modules.subscribers import subscribers_bp
from .modules.subscribers.service import SubscriptionService
from .modules.subscribers.store import SubscriberStore

__version__ = '0.1.0'

logger = logging.getLogger(__name__)

BLUEPRINTS = (subscribers_bp, broadcast_bp)


class BuskCats:
    """
    Flask extension wiring the store, email transport, state machine and
    broadcast engine onto an app. Components receive the frozen Settings;
    handlers reach them through ``app.extensions['buskcats']``.
    """

    def __init__(self, app=None, config=None):
        self.settings = None
        self.store = None
        self.email_service = None
        self.subscriptions = None
        self.broadcaster = None
        self._registered = []

        if app is not None:
            self.init_app(app, config)

    def init_app(self, app, config=None):
        if config:
            app.config.update(config)
        self.settings = Settings.from_mapping(app.config)
        self.store = SubscriberStore(self.settings.db_path)
        self.store.init_schema()
        self.email_service = EmailService(self.settings)
        self.subscriptions = SubscriptionService(self.store, self.email_service, self.settings)
        self.broadcaster = Broadcaster(
            self.store, self.email_service, self.subscriptions,
            send_interval=self.settings.send_interval,
        )

        app.extensions['buskcats'] = self

        for bp in BLUEPRINTS:
            app.register_blueprint(bp)
            self._registered.append(bp.name)

        self._setup_cors(app)
        self._setup_error_handlers(app)
        logger.info(f"busk-cats initialised (db: {self.settings.db_path}, "
                    f"origins: {', '.join(self.settings.allowed_origins) or 'none'})")

    def get_registered_modules(self):
        return list(self._registered)

    def _setup_cors(self, app):
        # Preflights short-circuit here; Flask-CORS adds the headers afterwards
        @app.before_request
        def _preflight():
            if request.method == 'OPTIONS':
                return '', 204

        # Registered before CORS() so it runs after it; origins must match exactly, case included
        @app.after_request
        def _exact_origin(response):
            if request.headers.get('Origin') not in self.settings.allowed_origins:
                for header in [h for h in response.headers.keys() if h.startswith('Access-Control-')]:
                    del response.headers[header]
            return response

        CORS(
            app,
            origins=list(self.settings.allowed_origins),
            methods=['GET', 'POST', 'OPTIONS'],
            allow_headers=['Content-Type'],
            always_send=False,
        )

    def _setup_error_handlers(self, app):
        @app.errorhandler(AppError)
        def _handle_app_error(e):
            if isinstance(e, TransportError):
                logger.error(f"Email transport failure on {request.path}: {e.detail}")
                db_log('error', 'email', 'Email transport failure', {'path': request.path, 'error': e.detail})
            return jsonify({'error': e.message}), e.status_code

        @app.errorhandler(HTTPException)
        def _handle_http_error(e):
            # Unknown paths and unsupported methods are both "not found"
            if e.code in (404, 405):
                return jsonify({'error': 'Not found'}), 404
            return jsonify({'error': e.name}), e.code

        @app.errorhandler(Exception)
        def _handle_unexpected(e):
            logger.exception(f"Unhandled error on {request.method} {request.path}")
            db_logger.log_error_with_traceback('app', e, {'path': request.path})
            return jsonify({'error': 'Internal server error'}), 500


def create_app(config=None):
    """Application factory"""
    app = Flask(__name__)
    BuskCats(app, config)
    return app


__all__ = ['BuskCats', 'create_app', 'Config', 'Settings']
