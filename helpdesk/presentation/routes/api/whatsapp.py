"""
WhatsApp API
Incoming messages from the Fonnte webhook drive the chat menu; /send lets
other internal services push a message
"""

from dataclasses import asdict

from flask import Blueprint, current_app, jsonify, request

from helpdesk import csrf, limiter
from helpdesk.business.notifications.conversation import ConversationHandler, WebhookPayload, conversation_store
from helpdesk.business.notifications.notifier import get_notifier
from helpdesk.business.notifications.phone import format_phone_number
from helpdesk.logger import get_logger
from helpdesk.utils.logging_sanitizer import sanitize_dict

bp = Blueprint('whatsapp', __name__)
logger = get_logger("helpdesk.routes.api.whatsapp")


@bp.route('/webhook', methods=['GET'])
def webhook_status():
    return jsonify({'status': 'Webhook active'})


@bp.route('/webhook', methods=['POST'])
@csrf.exempt
@limiter.limit("60 per minute")
def webhook():
    body = request.get_json(silent=True)
    payload = WebhookPayload.parse(body)
    if payload is None:
        logger.warning(f"Invalid webhook payload: {sanitize_dict(body) if isinstance(body, dict) else body!r}")
        return jsonify({'error': 'Invalid payload'}), 400

    handler = ConversationHandler(conversation_store, current_app.config.get('WHATSAPP_COUNTRY_CODE'))
    return jsonify(handler.handle(payload))


def _authorized() -> bool:
    """Bearer check against INTERNAL_API_KEY; open when no key is configured"""
    api_key = current_app.config.get('INTERNAL_API_KEY')
    if not api_key:
        return True
    return request.headers.get('Authorization') == f"Bearer {api_key}"


@bp.route('/send', methods=['POST'])
@csrf.exempt
@limiter.limit("30 per minute")
def send():
    if not _authorized():
        logger.warning(f"Unauthorized WhatsApp send attempt from {request.remote_addr}")
        return jsonify({'error': 'Unauthorized'}), 401

    body = request.get_json(silent=True) or {}
    phone = (body.get('phone') or '').strip() if isinstance(body.get('phone'), str) else ''
    message = body.get('message') if isinstance(body.get('message'), str) else ''
    if not phone or not message:
        return jsonify({'error': 'Phone and message are required'}), 400

    notifier = get_notifier()
    target = format_phone_number(phone, notifier.client.country_code)
    result = notifier.client.send_message(target, message)
    return jsonify(asdict(result))
