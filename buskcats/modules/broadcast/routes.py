from flask import current_app, jsonify, request

from buskcats.modules.subscribers.auth import AccessClass, access
from buskcats.modules.subscribers.payloads import parse_send

from . import broadcast_bp


@broadcast_bp.route('/send', methods=['POST'])
@access(AccessClass.ADMIN)
def send():
    """Send an HTML email to all confirmed subscribers on a list"""
    payload = parse_send(request.get_json(silent=True))
    result = current_app.extensions['buskcats'].broadcaster.broadcast(
        payload.list, payload.subject, payload.html
    )
    return jsonify(result.to_dict()), 200
