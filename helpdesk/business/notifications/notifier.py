"""
Notifier: renders message templates for domain events and sends them to
the people involved over WhatsApp.

Every public method swallows and logs delivery errors; the caller's
operation has already been committed when a notification is sent.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from flask import current_app

from helpdesk.business.notifications import messages
from helpdesk.business.notifications.phone import format_phone_number
from helpdesk.business.notifications.whatsapp_client import SendResult, WhatsAppClient
from helpdesk.logger import get_logger

logger = get_logger("helpdesk.business.notifications.notifier")


class Notifier:

    def __init__(self, client: WhatsAppClient, enabled: bool = True):
        self.client = client
        self.enabled = enabled

    def send(self, phone: Optional[str], message: str) -> Optional[SendResult]:
        """Send one message to a raw phone number; None when skipped or failed"""
        if not self.enabled:
            logger.debug("Notifications disabled, message dropped")
            return None
        if not phone:
            return None

        target = format_phone_number(phone, self.client.country_code)
        try:
            return self.client.send_message(target, message)
        except Exception as e:
            logger.error(f"WhatsApp notification to {target} failed: {e}", exc_info=True)
            return None

    def notify_user(self, user, message: str) -> Optional[SendResult]:
        if user is None or not user.whatsapp_phone:
            logger.debug(f"No WhatsApp number for {user!r}, notification skipped")
            return None
        return self.send(user.whatsapp_phone, message)

    def notify_users(self, users: Iterable, message: str) -> List[SendResult]:
        results = []
        for user in users:
            result = self.notify_user(user, message)
            if result is not None:
                results.append(result)
        return results

    # Domain events

    def borrowing_approved(self, borrowing) -> Optional[SendResult]:
        borrower = borrowing.borrower
        if borrower is None:
            return None
        return self.notify_user(borrower, messages.borrowing_approved(
            borrower.display_name, borrowing.asset.name if borrowing.asset else '-'))

    def borrowing_rejected(self, borrowing, reason: Optional[str] = None) -> Optional[SendResult]:
        borrower = borrowing.borrower
        if borrower is None:
            return None
        return self.notify_user(borrower, messages.borrowing_rejected(
            borrower.display_name, borrowing.asset.name if borrowing.asset else '-', reason))

    def borrowing_requested(self, borrowing, staff: Iterable) -> List[SendResult]:
        borrower_name = borrowing.borrower.display_name if borrowing.borrower else '-'
        asset_name = borrowing.asset.name if borrowing.asset else '-'
        return self.notify_users(staff, messages.borrowing_requested(
            borrower_name, asset_name, borrowing.purpose or '-'))

    def atk_request_approved(self, atk_request) -> Optional[SendResult]:
        requester = atk_request.requester
        if requester is None:
            return None
        return self.notify_user(requester, messages.atk_request_approved(requester.display_name))

    def atk_request_rejected(self, atk_request, reason: Optional[str] = None) -> Optional[SendResult]:
        requester = atk_request.requester
        if requester is None:
            return None
        return self.notify_user(requester, messages.atk_request_rejected(requester.display_name, reason))

    def ticket_assigned(self, ticket, reporter_name: Optional[str] = None) -> Optional[SendResult]:
        assignee = ticket.assigned_to
        if assignee is None:
            return None
        if reporter_name is None:
            reporter_name = ticket.created_by.display_name if ticket.created_by else '-'
        return self.notify_user(assignee, messages.ticket_assigned(
            ticket.title, ticket.category, ticket.priority, reporter_name))

    def low_stock_alert(self, admins: Iterable, items: List[dict], lead_time_days: int) -> List[SendResult]:
        if not items:
            return []
        return self.notify_users(admins, messages.low_stock_alert(items, lead_time_days))


def get_notifier() -> Notifier:
    return current_app.extensions['helpdesk_notifier']
