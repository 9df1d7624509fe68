"""
Authorization gate.

Every route is tagged with one access class:

    PUBLIC  - no check
    TOKEN   - carries a ?token= parameter; the operation itself validates it
    ADMIN   - must send ``Authorization: Bearer <ADMIN_SECRET>``; rejected
              with 401 before the handler (or body parsing) runs
"""

import hmac
from enum import Enum
from functools import wraps

from flask import current_app, request

from buskcats.core.errors import UnauthorizedError
from buskcats.core.logging_service import db_logger


class AccessClass(Enum):
    PUBLIC = 'public'
    TOKEN = 'token'
    ADMIN = 'admin'


def is_admin_request(req, admin_secret):
    """Exact match of the bearer credential; an unset secret never matches"""
    if not admin_secret:
        return False
    supplied = req.headers.get('Authorization', '')
    return hmac.compare_digest(supplied.encode(), f'Bearer {admin_secret}'.encode())


def access(access_class):
    """Decorator tagging a view with its access class and enforcing ADMIN"""
    def decorator(f):
        if access_class is not AccessClass.ADMIN:
            f.access_class = access_class
            return f

        @wraps(f)
        def decorated_function(*args, **kwargs):
            settings = current_app.extensions['buskcats'].settings
            if not is_admin_request(request, settings.admin_secret):
                db_logger.log_security_event('Rejected admin request',
                                             {'path': request.path, 'method': request.method})
                raise UnauthorizedError()
            return f(*args, **kwargs)

        decorated_function.access_class = access_class
        return decorated_function
    return decorator


def access_class_of(view):
    return getattr(view, 'access_class', None)
