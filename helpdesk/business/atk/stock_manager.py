from __future__ import annotations

from helpdesk import db
from helpdesk.business.core.errors import InsufficientStockError, ValidationError
from helpdesk.business.core.records import get_or_raise
from helpdesk.data.atk.atk_item import AtkItem
from helpdesk.data.atk.atk_stock_history import AtkStockHistory


class StockManager:
    """
    Stock movements for ATK items and spareparts.

    Every change of AtkItem.stock_quantity goes through here and writes one
    AtkStockHistory ledger row. Nothing is committed; the calling manager
    commits once its own writes are done.
    """

    def __init__(self, actor_id: int | None):
        self.actor_id = actor_id

    def _ledger_row(self, item: AtkItem, movement_type: str, quantity: int,
                    reference_id: int | None, notes: str | None) -> AtkStockHistory:
        row = AtkStockHistory(
            item_id=item.id,
            type=movement_type,
            quantity=quantity,
            reference_id=reference_id,
            notes=notes,
            created_by_id=self.actor_id,
            updated_by_id=self.actor_id,
        )
        db.session.add(row)
        return row

    def receive(
        self,
        *,
        item_id: int,
        quantity: int,
        reference_id: int | None = None,
        notes: str | None = None,
    ) -> AtkStockHistory:
        if quantity is None or quantity <= 0:
            raise ValidationError("Quantity must be greater than zero")

        item = get_or_raise(AtkItem, item_id, 'Item')
        item.stock_quantity = (item.stock_quantity or 0) + quantity
        item.updated_by_id = self.actor_id
        return self._ledger_row(item, AtkStockHistory.TYPE_IN, quantity, reference_id, notes)

    def issue(
        self,
        *,
        item_id: int,
        quantity: int,
        reference_id: int | None = None,
        notes: str | None = None,
        floor_at_zero: bool = False,
    ) -> AtkStockHistory:
        """
        Take stock out of an item.

        With floor_at_zero the stock is clamped at zero instead of rejecting
        the issue; the ledger row still records the requested quantity.
        """
        if quantity is None or quantity <= 0:
            raise ValidationError("Quantity must be greater than zero")

        item = get_or_raise(AtkItem, item_id, 'Item')
        on_hand = item.stock_quantity or 0
        if quantity > on_hand and not floor_at_zero:
            raise InsufficientStockError(
                f"Insufficient stock for {item.name}: {on_hand} {item.unit} available, {quantity} requested"
            )

        item.stock_quantity = max(0, on_hand - quantity)
        item.updated_by_id = self.actor_id
        return self._ledger_row(item, AtkStockHistory.TYPE_OUT, quantity, reference_id, notes)

    def set_quantity(
        self,
        *,
        item_id: int,
        quantity: int,
        reference_id: int | None = None,
        notes: str | None = None,
    ) -> AtkStockHistory | None:
        """Set an absolute stock level (stock opname); the difference is booked as in or out"""
        if quantity is None or quantity < 0:
            raise ValidationError("Quantity cannot be negative")

        item = get_or_raise(AtkItem, item_id, 'Item')
        difference = quantity - (item.stock_quantity or 0)
        if difference == 0:
            return None

        item.stock_quantity = quantity
        item.updated_by_id = self.actor_id
        movement_type = AtkStockHistory.TYPE_IN if difference > 0 else AtkStockHistory.TYPE_OUT
        return self._ledger_row(item, movement_type, abs(difference), reference_id, notes)
