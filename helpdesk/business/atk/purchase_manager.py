from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from helpdesk import db
from helpdesk.business.atk.stock_manager import StockManager
from helpdesk.business.core.action_result import ActionResult, action
from helpdesk.business.core.errors import StatusError, ValidationError
from helpdesk.business.core.file_storage import get_file_store
from helpdesk.business.core.records import get_or_raise
from helpdesk.business.core.state_machine import PurchaseStateMachine
from helpdesk.data.atk.atk_item import AtkItem
from helpdesk.data.atk.atk_purchase import AtkPurchaseItem, AtkPurchaseRequest
from helpdesk.logger import get_logger

logger = get_logger("helpdesk.business.atk.purchase_manager")


@dataclass(frozen=True)
class PurchaseLine:
    item_id: int
    quantity: int
    unit_price: float

    @property
    def subtotal(self) -> float:
        return self.quantity * self.unit_price


class PurchaseManager:
    """
    Purchase requests for ATK stock.

    Lifecycle: draft -> process -> success. Only drafts can be edited or
    deleted. Marking a request successful books every line into stock.
    """

    def __init__(self, actor_id: int | None):
        self.actor_id = actor_id

    @staticmethod
    def _validate_lines(lines: Sequence[PurchaseLine]) -> None:
        if not lines:
            raise ValidationError("A purchase request needs at least one item")
        for line in lines:
            get_or_raise(AtkItem, line.item_id, 'Item')
            if line.quantity <= 0:
                raise ValidationError("Quantity must be greater than zero")
            if line.unit_price < 0:
                raise ValidationError("Unit price cannot be negative")

    @staticmethod
    def _build_items(lines: Sequence[PurchaseLine]) -> list[AtkPurchaseItem]:
        return [
            AtkPurchaseItem(
                item_id=line.item_id,
                quantity=line.quantity,
                price=line.unit_price,
                subtotal=line.subtotal,
            )
            for line in lines
        ]

    @staticmethod
    def _require_draft(purchase: AtkPurchaseRequest, verb: str) -> None:
        if not PurchaseStateMachine.is_initial(purchase.status):
            raise StatusError(f"Only draft requests can be {verb}")

    @action("create_purchase_request")
    def create_purchase_request(self, title: str, lines: Sequence[PurchaseLine],
                                notes: str | None = None) -> AtkPurchaseRequest:
        title = (title or '').strip()
        if not title:
            raise ValidationError("Title is required")
        self._validate_lines(lines)

        purchase = AtkPurchaseRequest(
            title=title,
            notes=notes or None,
            total_amount=sum(line.subtotal for line in lines),
            status=PurchaseStateMachine.DRAFT,
            created_by_id=self.actor_id,
            updated_by_id=self.actor_id,
        )
        purchase.items = self._build_items(lines)
        db.session.add(purchase)
        db.session.commit()

        logger.info(f"Created purchase request {purchase.id} ({len(lines)} lines, "
                    f"total {purchase.total_amount}) by user {self.actor_id}")
        return purchase

    @action("update_purchase_request")
    def update_purchase_request(self, purchase_id: int, title: str, lines: Sequence[PurchaseLine],
                                notes: str | None = None) -> AtkPurchaseRequest:
        purchase = get_or_raise(AtkPurchaseRequest, purchase_id, 'Purchase request')
        self._require_draft(purchase, 'edited')

        title = (title or '').strip()
        if not title:
            raise ValidationError("Title is required")
        self._validate_lines(lines)

        purchase.title = title
        purchase.notes = notes or None
        purchase.total_amount = sum(line.subtotal for line in lines)
        purchase.updated_by_id = self.actor_id
        # Old lines are removed by delete-orphan
        purchase.items = self._build_items(lines)
        db.session.commit()

        logger.info(f"Updated purchase request {purchase.id} by user {self.actor_id}")
        return purchase

    @action("submit_purchase_request")
    def submit_purchase_request(self, purchase_id: int) -> AtkPurchaseRequest:
        purchase = get_or_raise(AtkPurchaseRequest, purchase_id, 'Purchase request')
        PurchaseStateMachine.validate_transition(purchase.status, PurchaseStateMachine.PROCESS)

        purchase.status = PurchaseStateMachine.PROCESS
        purchase.updated_by_id = self.actor_id
        db.session.commit()

        logger.info(f"Purchase request {purchase.id} submitted by user {self.actor_id}")
        return purchase

    @action("mark_purchase_success")
    def mark_purchase_success(self, purchase_id: int, photo_data: str) -> ActionResult:
        """
        Close a purchase with a photo of the received goods (a base64 data URL)
        and add every line's quantity to stock.
        """
        purchase = get_or_raise(AtkPurchaseRequest, purchase_id, 'Purchase request')
        PurchaseStateMachine.validate_transition(purchase.status, PurchaseStateMachine.SUCCESS)
        if not purchase.items:
            raise ValidationError("No items found")

        store = get_file_store()
        photo_url = store.save_data_url(photo_data, 'purchase_photos', f"purchase_{purchase.id}")

        stock = StockManager(self.actor_id)
        for line in purchase.items:
            stock.receive(
                item_id=line.item_id,
                quantity=line.quantity,
                reference_id=purchase.id,
                notes="Purchase request fulfilled",
            )

        purchase.status = PurchaseStateMachine.SUCCESS
        purchase.approved_by_id = self.actor_id
        purchase.approved_at = datetime.utcnow()
        purchase.receipt_photo_url = photo_url
        purchase.updated_by_id = self.actor_id
        try:
            db.session.commit()
        except Exception:
            store.delete(photo_url)
            raise

        logger.info(f"Purchase request {purchase.id} fulfilled, {len(purchase.items)} items "
                    f"added to stock by user {self.actor_id}")
        return ActionResult.ok(id=purchase.id, url=photo_url)

    @action("delete_purchase_request")
    def delete_purchase_request(self, purchase_id: int) -> ActionResult:
        purchase = get_or_raise(AtkPurchaseRequest, purchase_id, 'Purchase request')
        self._require_draft(purchase, 'deleted')

        db.session.delete(purchase)
        db.session.commit()

        logger.info(f"Deleted purchase request {purchase_id} by user {self.actor_id}")
        return ActionResult.ok(id=purchase_id)
