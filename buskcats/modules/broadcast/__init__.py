"""
Broadcast Module
================

Provides:
- POST /send -- email every confirmed subscriber of a list (admin)
"""

from flask import Blueprint

broadcast_bp = Blueprint('broadcast', __name__)

from . import routes
