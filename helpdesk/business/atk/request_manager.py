from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Sequence

from helpdesk import db
from helpdesk.business.atk.stock_manager import StockManager
from helpdesk.business.core.action_result import ActionResult, action
from helpdesk.business.core.errors import StatusError, ValidationError
from helpdesk.business.core.file_storage import get_file_store
from helpdesk.business.core.records import assign_document_number, get_or_raise
from helpdesk.business.core.state_machine import AtkRequestStateMachine
from helpdesk.business.notifications.notifier import get_notifier
from helpdesk.data.atk.atk_item import AtkItem
from helpdesk.data.atk.atk_request import AtkRequest, AtkRequestItem
from helpdesk.data.core.user_info.user import User
from helpdesk.logger import get_logger

logger = get_logger("helpdesk.business.atk.request_manager")

SPB_DOCUMENT_TYPE = 'SPB'


@dataclass(frozen=True)
class RequestLine:
    item_id: int
    quantity: int


class RequestManager:
    """
    ATK item requests from staff.

    Lifecycle: pending -> approved/rejected, approved -> completed.
    Completing a request takes the approved quantities out of stock,
    floored at zero, and stores the receiver's signature.
    """

    def __init__(self, actor_id: int | None):
        self.actor_id = actor_id

    @action("create_request")
    def create_request(self, lines: Sequence[RequestLine], notes: str | None = None) -> AtkRequest:
        requester = get_or_raise(User, self.actor_id, 'Requester')
        if not lines:
            raise ValidationError("A request needs at least one item")
        for line in lines:
            get_or_raise(AtkItem, line.item_id, 'Item')
            if line.quantity <= 0:
                raise ValidationError("Quantity must be greater than zero")

        atk_request = AtkRequest(
            requester_id=requester.id,
            department_id=requester.department_id,
            notes=notes or None,
            status=AtkRequestStateMachine.PENDING,
            created_by_id=self.actor_id,
            updated_by_id=self.actor_id,
        )
        atk_request.items = [AtkRequestItem(item_id=line.item_id, quantity=line.quantity) for line in lines]
        db.session.add(atk_request)
        db.session.commit()

        logger.info(f"Created ATK request {atk_request.id} ({len(lines)} lines) by user {self.actor_id}")
        return atk_request

    @action("approve_request")
    def approve_request(self, request_id: int, approved_quantities: Mapping[int, int]) -> AtkRequest:
        """
        Approve a pending request.

        Args:
            request_id: ATK request id
            approved_quantities: item_id -> approved quantity; lines not listed
                are approved with the requested quantity
        """
        atk_request = get_or_raise(AtkRequest, request_id, 'Request')
        AtkRequestStateMachine.validate_transition(atk_request.status, AtkRequestStateMachine.APPROVED)

        for line in atk_request.items:
            approved = approved_quantities.get(line.item_id, line.quantity)
            if approved is None or approved < 0:
                raise ValidationError("Approved quantity cannot be negative")
            line.approved_quantity = approved

        atk_request.status = AtkRequestStateMachine.APPROVED
        atk_request.approved_by_id = self.actor_id
        atk_request.approved_at = datetime.utcnow()
        atk_request.updated_by_id = self.actor_id
        db.session.commit()

        logger.info(f"ATK request {atk_request.id} approved by user {self.actor_id}")
        get_notifier().atk_request_approved(atk_request)
        return atk_request

    @action("reject_request")
    def reject_request(self, request_id: int, reason: str | None = None) -> AtkRequest:
        atk_request = get_or_raise(AtkRequest, request_id, 'Request')
        AtkRequestStateMachine.validate_transition(atk_request.status, AtkRequestStateMachine.REJECTED)

        atk_request.status = AtkRequestStateMachine.REJECTED
        atk_request.approved_by_id = self.actor_id
        atk_request.approved_at = datetime.utcnow()
        atk_request.notes = reason or None
        atk_request.updated_by_id = self.actor_id
        db.session.commit()

        logger.info(f"ATK request {atk_request.id} rejected by user {self.actor_id}")
        get_notifier().atk_request_rejected(atk_request, reason)
        return atk_request

    @action("complete_request")
    def complete_request(self, request_id: int, signature_data: str) -> ActionResult:
        atk_request = get_or_raise(AtkRequest, request_id, 'Request')
        AtkRequestStateMachine.validate_transition(atk_request.status, AtkRequestStateMachine.COMPLETED)
        if not atk_request.items:
            raise ValidationError("No items found")

        store = get_file_store()
        signature_url = store.save_data_url(signature_data, 'signatures', f"request_{atk_request.id}")

        stock = StockManager(self.actor_id)
        for line in atk_request.items:
            if line.approved_quantity and line.approved_quantity > 0:
                stock.issue(
                    item_id=line.item_id,
                    quantity=line.approved_quantity,
                    reference_id=atk_request.id,
                    notes="Request fulfilled",
                    floor_at_zero=True,
                )

        atk_request.status = AtkRequestStateMachine.COMPLETED
        atk_request.approval_signature_url = signature_url
        atk_request.updated_by_id = self.actor_id
        try:
            db.session.commit()
        except Exception:
            store.delete(signature_url)
            raise

        logger.info(f"ATK request {atk_request.id} completed by user {self.actor_id}")
        return ActionResult.ok(id=atk_request.id, url=signature_url)

    @action("delete_request")
    def delete_request(self, request_id: int) -> ActionResult:
        atk_request = get_or_raise(AtkRequest, request_id, 'Request')
        if not AtkRequestStateMachine.is_initial(atk_request.status):
            raise StatusError("Only pending requests can be deleted")

        db.session.delete(atk_request)
        db.session.commit()

        logger.info(f"Deleted ATK request {request_id} by user {self.actor_id}")
        return ActionResult.ok(id=request_id)

    @action("generate_request_document_number")
    def generate_document_number_for_print(self, request_id: int) -> ActionResult:
        atk_request = get_or_raise(AtkRequest, request_id, 'Request')
        number = assign_document_number(atk_request, SPB_DOCUMENT_TYPE)
        db.session.commit()
        return ActionResult.ok(id=atk_request.id, document_number=number)
