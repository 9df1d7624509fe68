"""
Subscribers Module
==================

Provides:
- Public subscribe API and token confirm/unsubscribe pages
- Admin add/list/delete API (bearer auth)
- SubscriberStore and SubscriptionService used by the broadcast module
"""

from flask import Blueprint

subscribers_bp = Blueprint(
    'subscribers',
    __name__,
    template_folder='templates',
)

from . import routes
