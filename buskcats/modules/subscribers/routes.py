"""
Subscribers Routes
==================

Provides:
- POST /subscribe -- public, creates a pending subscription
- GET /confirm?token= -- confirms a subscription (HTML)
- GET /unsubscribe?token= -- removes a subscription (HTML)
- POST /admin/add -- add a confirmed subscriber (admin)
- GET /admin/list -- list subscribers, optionally ?list= (admin)
- POST /admin/delete -- delete by email and optional list (admin)
"""

from flask import current_app, jsonify, render_template, request

from buskcats.core.errors import NotFoundError

from . import subscribers_bp
from .auth import AccessClass, access
from .payloads import parse_delete, parse_subscription


def _get_service():
    return current_app.extensions['buskcats'].subscriptions


def _page(message, heading=None, status=200):
    return render_template('subscribers/message.html', heading=heading, message=message), status


# ===================
# PUBLIC API ROUTES
# ===================

@subscribers_bp.route('/subscribe', methods=['POST'])
@access(AccessClass.PUBLIC)
def subscribe():
    """Handle new subscription requests"""
    payload = parse_subscription(request.get_json(silent=True))
    _get_service().subscribe(payload.email, payload.list)
    return jsonify({'ok': True}), 200


@subscribers_bp.route('/confirm', methods=['GET'])
@access(AccessClass.TOKEN)
def confirm():
    token = request.args.get('token', '').strip()
    if not token:
        return _page('Invalid link.', status=400)
    try:
        _get_service().confirm(token)
    except NotFoundError:
        return _page('Token not found.', status=404)
    return _page("You'll receive emails when new posts are published.", heading="You're subscribed!")


@subscribers_bp.route('/unsubscribe', methods=['GET'])
@access(AccessClass.TOKEN)
def unsubscribe():
    token = request.args.get('token', '').strip()
    if not token:
        return _page('Invalid link.', status=400)
    try:
        _get_service().unsubscribe(token)
    except NotFoundError:
        return _page('Token not found.', status=404)
    return _page("You won't receive any more emails.", heading="You've been unsubscribed.")


# ===================
# ADMIN ROUTES
# ===================

@subscribers_bp.route('/admin/add', methods=['POST'])
@access(AccessClass.ADMIN)
def admin_add():
    """Add a subscriber directly, skipping the confirmation email"""
    payload = parse_subscription(request.get_json(silent=True))
    _get_service().admin_add(payload.email, payload.list)
    return jsonify({'ok': True}), 200


@subscribers_bp.route('/admin/list', methods=['GET'])
@access(AccessClass.ADMIN)
def admin_list():
    records = _get_service().admin_list(request.args.get('list'))
    return jsonify([record.to_public_dict() for record in records]), 200


@subscribers_bp.route('/admin/delete', methods=['POST'])
@access(AccessClass.ADMIN)
def admin_delete():
    payload = parse_delete(request.get_json(silent=True))
    deleted = _get_service().admin_delete(payload.email, payload.list)
    return jsonify({'ok': True, 'deleted': deleted}), 200
