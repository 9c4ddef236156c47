"""
WhatsApp chat bot: menu-driven ticket creation, ticket status and asset
borrowing over incoming webhook messages.

Conversation state is kept in process memory per phone number and expires
after five minutes of silence. It is not shared between worker processes.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from flask import current_app

from helpdesk import db
from helpdesk.business.assets.borrowing_manager import (BorrowingInput, BorrowingManager,
                                                        has_active_borrowing)
from helpdesk.business.core.state_machine import BorrowingStateMachine
from helpdesk.business.notifications import messages
from helpdesk.business.notifications.notifier import get_notifier
from helpdesk.business.notifications.phone import format_phone_number, phone_variants
from helpdesk.business.tickets.ticket_manager import TicketInput, TicketManager
from helpdesk.data.assets.asset import Asset
from helpdesk.data.assets.asset_borrowing import AssetBorrowing
from helpdesk.data.core.user_info.user import User
from helpdesk.data.tickets.ticket import Ticket
from helpdesk.logger import get_logger

logger = get_logger("helpdesk.business.notifications.conversation")

CONVERSATION_TTL_SECONDS = 5 * 60
ASSET_SEARCH_LIMIT = 5
STATUS_TICKET_LIMIT = 5
TITLE_PREVIEW_LENGTH = 50
PHONE_SUFFIX_DIGITS = 9

STEP_SELECT_CATEGORY = 'select_category'
STEP_SELECT_PRIORITY = 'select_priority'
STEP_ENTER_DESCRIPTION = 'enter_description'
STEP_BORROWING_SEARCH = 'borrowing_search'
STEP_BORROWING_SELECT = 'borrowing_select'
STEP_BORROWING_CONFIRM = 'borrowing_confirm'

CANCEL_COMMANDS = ('batal', 'cancel')
TICKET_COMMANDS = ('1', 'ticket', '/ticket')
STATUS_COMMANDS = ('2', 'status', '/status')
BORROW_COMMANDS = ('3', 'pinjam', '/pinjam')
HELP_COMMANDS = ('4', 'help', '/help')


@dataclass(frozen=True)
class WebhookPayload:
    sender: str
    message: str
    device: str = ''
    member: str = ''
    name: str = ''
    url: Optional[str] = None

    @classmethod
    def parse(cls, body: Any) -> Optional['WebhookPayload']:
        """Build a payload from the webhook JSON body; None when sender or message is missing"""
        if not isinstance(body, dict):
            return None
        if not isinstance(body.get('sender'), str) or not isinstance(body.get('message'), str):
            return None
        return cls(
            sender=body['sender'],
            message=body['message'],
            device=str(body.get('device') or ''),
            member=str(body.get('member') or ''),
            name=str(body.get('name') or ''),
            url=str(body['url']) if body.get('url') else None,
        )


@dataclass
class ConversationState:
    step: str
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = 0.0


class ConversationStore:
    """Thread-safe in-memory conversation state keyed by normalised phone number"""

    def __init__(self, ttl_seconds: float = CONVERSATION_TTL_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._states: Dict[str, ConversationState] = {}
        self._lock = threading.Lock()

    def cleanup(self) -> None:
        now = self.clock()
        with self._lock:
            expired = [phone for phone, state in self._states.items()
                       if now - state.timestamp > self.ttl_seconds]
            for phone in expired:
                del self._states[phone]

    def get(self, phone: str) -> Optional[ConversationState]:
        with self._lock:
            return self._states.get(phone)

    def set(self, phone: str, step: str, data: Optional[Dict[str, Any]] = None) -> None:
        with self._lock:
            self._states[phone] = ConversationState(step=step, data=dict(data or {}), timestamp=self.clock())

    def clear(self, phone: str) -> None:
        with self._lock:
            self._states.pop(phone, None)

    def clear_all(self) -> None:
        with self._lock:
            self._states.clear()


conversation_store = ConversationStore()


def find_profile_by_phone(sender: str, country_code: str) -> Optional[User]:
    """
    Match a sender to an active user by stored WhatsApp number: exact match on
    the usual spellings first, then the last nine digits. The suffix match only
    counts when it is unambiguous; otherwise the sender is unregistered.
    """
    for variant in phone_variants(sender, country_code):
        user = User.query.filter_by(whatsapp_phone=variant, is_active=True).first()
        if user is not None:
            return user

    normalized = format_phone_number(sender, country_code)
    if len(normalized) < PHONE_SUFFIX_DIGITS:
        return None

    candidates = (
        User.query
        .filter(User.whatsapp_phone.like(f"%{normalized[-PHONE_SUFFIX_DIGITS:]}"),
                User.is_active.is_(True))
        .limit(2)
        .all()
    )
    if len(candidates) != 1:
        if candidates:
            logger.warning(f"WhatsApp sender {normalized} matches several profiles; treated as unregistered")
        return None
    return candidates[0]


def _choice_index(text: str, count: int) -> Optional[int]:
    """'2' -> 1 when 1 <= 2 <= count, else None"""
    try:
        index = int(text.strip()) - 1
    except ValueError:
        return None
    return index if 0 <= index < count else None


class ConversationHandler:
    """
    Handles one incoming message and replies over WhatsApp.

    handle() returns the small status dict the webhook answers with, e.g.
    {"status": "ticket_created", "ticketId": 12}.
    """

    def __init__(self, store: ConversationStore = conversation_store, country_code: Optional[str] = None):
        self.store = store
        self.country_code = country_code or current_app.config.get('WHATSAPP_COUNTRY_CODE', '62')
        self.notifier = get_notifier()

    def _reply(self, phone: str, text: str) -> None:
        self.notifier.send(phone, text)

    def handle(self, payload: WebhookPayload) -> Dict[str, Any]:
        self.store.cleanup()
        phone = format_phone_number(payload.sender, self.country_code)

        profile = find_profile_by_phone(payload.sender, self.country_code)
        if profile is None:
            logger.info(f"WhatsApp message from unregistered number {phone}")
            self._reply(phone, messages.UNREGISTERED)
            return {'status': 'unregistered'}

        text = payload.message.strip()
        command = text.lower()

        if command in CANCEL_COMMANDS:
            self.store.clear(phone)
            self._reply(phone, messages.CANCELLED + messages.main_menu(profile.display_name))
            return {'status': 'cancelled'}

        state = self.store.get(phone)
        if state is not None:
            return self._continue(phone, profile, text, state)

        if command in TICKET_COMMANDS:
            self.store.set(phone, STEP_SELECT_CATEGORY)
            self._reply(phone, messages.category_menu())
            return {'status': 'category_menu'}

        if command in STATUS_COMMANDS:
            return self._send_ticket_status(phone, profile)

        if command in BORROW_COMMANDS:
            self.store.set(phone, STEP_BORROWING_SEARCH)
            self._reply(phone, messages.BORROW_SEARCH_PROMPT)
            return {'status': 'borrowing_search_prompt'}

        if command in HELP_COMMANDS:
            self._reply(phone, messages.help_message())
            return {'status': 'help_sent'}

        self._reply(phone, messages.main_menu(profile.display_name))
        return {'status': 'menu_sent'}

    def _continue(self, phone: str, profile: User, text: str, state: ConversationState) -> Dict[str, Any]:
        handlers = {
            STEP_SELECT_CATEGORY: self._select_category,
            STEP_SELECT_PRIORITY: self._select_priority,
            STEP_ENTER_DESCRIPTION: self._enter_description,
            STEP_BORROWING_SEARCH: self._borrowing_search,
            STEP_BORROWING_SELECT: self._borrowing_select,
            STEP_BORROWING_CONFIRM: self._borrowing_confirm,
        }
        handler = handlers.get(state.step)
        if handler is None:
            self.store.clear(phone)
            self._reply(phone, messages.main_menu(profile.display_name))
            return {'status': 'menu_sent'}
        return handler(phone, profile, text, state.data)

    # Ticket flow

    def _send_ticket_status(self, phone: str, profile: User) -> Dict[str, Any]:
        tickets = (
            Ticket.query
            .filter_by(created_by_id=profile.id)
            .order_by(Ticket.created_at.desc(), Ticket.id.desc())
            .limit(STATUS_TICKET_LIMIT)
            .all()
        )
        if tickets:
            lines = [
                messages.ticket_status_line(
                    ticket.title, ticket.status,
                    ticket.created_at.strftime('%d/%m/%Y') if ticket.created_at else '-')
                for ticket in tickets
            ]
            self._reply(phone, messages.ticket_list(lines))
        else:
            self._reply(phone, messages.NO_TICKETS)
        return {'status': 'status_sent'}

    def _select_category(self, phone, profile, text, data) -> Dict[str, Any]:
        index = _choice_index(text, len(Ticket.CATEGORIES))
        if index is None:
            self._reply(phone, messages.INVALID_CHOICE + messages.category_menu())
            return {'status': 'invalid_category'}

        data['category'] = Ticket.CATEGORIES[index]
        self.store.set(phone, STEP_SELECT_PRIORITY, data)
        self._reply(phone, messages.category_selected(data['category']))
        return {'status': 'priority_menu'}

    def _select_priority(self, phone, profile, text, data) -> Dict[str, Any]:
        index = _choice_index(text, len(Ticket.PRIORITIES))
        if index is None:
            self._reply(phone, messages.INVALID_CHOICE + messages.priority_menu())
            return {'status': 'invalid_priority'}

        data['priority'] = Ticket.PRIORITIES[index]
        self.store.set(phone, STEP_ENTER_DESCRIPTION, data)
        self._reply(phone, messages.priority_selected(data['priority']))
        return {'status': 'description_prompt'}

    def _enter_description(self, phone, profile, text, data) -> Dict[str, Any]:
        description = text
        self.store.clear(phone)

        result = TicketManager(profile.id).create_ticket(
            TicketInput(
                title=f"[WA] {description[:TITLE_PREVIEW_LENGTH]}...",
                description=description,
                category=data['category'],
                priority=data['priority'],
            ),
            auto_assign=True,
        )
        if not result.success:
            logger.error(f"WhatsApp ticket for user {profile.id} failed: {result.error}")
            self._reply(phone, messages.TICKET_FAILED)
            return {'status': 'error', 'error': result.error}

        ticket = db.session.get(Ticket, result.id)
        self._reply(phone, messages.ticket_created(
            ticket.id, ticket.category, ticket.priority, description,
            assigned=ticket.assigned_to_id is not None))
        return {'status': 'ticket_created', 'ticketId': ticket.id}

    # Borrowing flow

    def _borrowing_search(self, phone, profile, text, data) -> Dict[str, Any]:
        active_asset_ids = db.select(AssetBorrowing.asset_id).where(
            AssetBorrowing.status.in_(BorrowingStateMachine.ACTIVE_STATES))
        assets = (
            Asset.query
            .filter(
                Asset.is_borrowable.is_(True),
                Asset.status == Asset.STATUS_ACTIVE,
                Asset.name.icontains(text, autoescape=True),
                Asset.id.notin_(active_asset_ids),
            )
            .order_by(Asset.name.asc())
            .limit(ASSET_SEARCH_LIMIT)
            .all()
        )
        if not assets:
            self._reply(phone, messages.no_assets_found(text))
            return {'status': 'no_assets_found'}

        data['borrowing_search'] = text
        data['borrowing_assets'] = [
            {
                'id': asset.id,
                'name': asset.name,
                'asset_code': asset.asset_code,
                'location': asset.location.name if asset.location else '-',
            }
            for asset in assets
        ]
        self.store.set(phone, STEP_BORROWING_SELECT, data)

        lines: List[str] = [
            messages.asset_line(index + 1, item['name'], item['location'], item['asset_code'])
            for index, item in enumerate(data['borrowing_assets'])
        ]
        self._reply(phone, messages.asset_list(lines, len(lines)))
        return {'status': 'borrowing_assets_listed'}

    def _borrowing_select(self, phone, profile, text, data) -> Dict[str, Any]:
        choices = data.get('borrowing_assets') or []
        index = _choice_index(text, len(choices))
        if index is None:
            self._reply(phone, messages.invalid_asset_choice(len(choices)))
            return {'status': 'invalid_asset_selection'}

        selected = choices[index]
        data['selected_asset_id'] = selected['id']
        self.store.set(phone, STEP_BORROWING_CONFIRM, data)
        self._reply(phone, messages.asset_selected(selected['name'], selected['location']))
        return {'status': 'borrowing_purpose_prompt'}

    def _borrowing_confirm(self, phone, profile, text, data) -> Dict[str, Any]:
        purpose = text.strip()
        if not purpose:
            self._reply(phone, messages.EMPTY_PURPOSE)
            return {'status': 'empty_purpose'}

        self.store.clear(phone)
        asset = db.session.get(Asset, data.get('selected_asset_id'))
        if asset is None or not asset.is_borrowable or has_active_borrowing(asset.id):
            self._reply(phone, messages.ASSET_UNAVAILABLE)
            return {'status': 'asset_unavailable'}

        result = BorrowingManager(profile.id).create_borrowing_request(
            BorrowingInput(
                asset_id=asset.id,
                borrower_location_id=None,
                borrow_date=date.today(),
                purpose=purpose,
            ),
            notify_staff=True,
        )
        if not result.success:
            logger.error(f"WhatsApp borrowing for user {profile.id} failed: {result.error}")
            self._reply(phone, messages.BORROWING_FAILED)
            return {'status': 'borrowing_error', 'error': result.error}

        self._reply(phone, messages.borrowing_created(asset.name, profile.display_name, purpose))
        return {'status': 'borrowing_created', 'borrowingId': result.id}
