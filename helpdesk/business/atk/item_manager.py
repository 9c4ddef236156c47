"""
ItemManager - ATK item and sparepart records, item images and manual stock in/out
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from helpdesk import db
from helpdesk.business.atk.stock_manager import StockManager
from helpdesk.business.core.action_result import ActionResult, action
from helpdesk.business.core.errors import ValidationError
from helpdesk.business.core.file_storage import get_file_store
from helpdesk.business.core.records import ensure_unreferenced, get_or_raise
from helpdesk.business.notifications.notifier import get_notifier
from helpdesk.data.atk.atk_item import AtkItem
from helpdesk.data.atk.atk_purchase import AtkPurchaseItem
from helpdesk.data.atk.atk_request import AtkRequestItem
from helpdesk.data.atk.atk_stock_history import AtkStockHistory
from helpdesk.data.atk.stock_opname import StockOpnameItem
from helpdesk.data.core.user_info.user import User
from helpdesk.data.tickets.ticket import TicketPart
from helpdesk.logger import get_logger

logger = get_logger("helpdesk.business.atk.item_manager")

# Documents and ledger rows that keep an item from being deleted
ITEM_REFERENCES = [
    (AtkStockHistory, 'item_id', 'stock movements'),
    (AtkRequestItem, 'item_id', 'request lines'),
    (AtkPurchaseItem, 'item_id', 'purchase lines'),
    (StockOpnameItem, 'item_id', 'stock opname lines'),
    (TicketPart, 'item_id', 'ticket parts'),
]


def low_stock_items() -> List[AtkItem]:
    """Items at or below their minimum stock, emptiest first"""
    return (
        AtkItem.query
        .filter(AtkItem.stock_quantity <= AtkItem.min_stock)
        .order_by(AtkItem.stock_quantity.asc(), AtkItem.name.asc())
        .all()
    )


def send_low_stock_alert(predictions: Iterable, lead_time_days: int) -> int:
    """
    WhatsApp the urgent restock predictions to every active admin with a phone.

    Returns:
        Number of items in the alert; 0 means nothing was sent
    """
    items = [
        {
            'name': prediction.item.name,
            'stock': prediction.item.stock_quantity,
            'min_stock': prediction.item.min_stock,
            'days_left': prediction.days_until_min,
        }
        for prediction in predictions if prediction.urgent
    ]
    if not items:
        return 0
    admins = User.query.filter(
        User.role == User.ROLE_ADMIN,
        User.is_active.is_(True),
        User.whatsapp_phone.isnot(None),
    ).all()
    get_notifier().low_stock_alert(admins, items, lead_time_days)
    logger.info(f"Low stock alert for {len(items)} items sent to {len(admins)} admins")
    return len(items)


class ItemManager:

    def __init__(self, actor_id: int | None):
        self.actor_id = actor_id

    def _apply(self, item: AtkItem, data: Dict[str, Any]) -> None:
        name = (data.get('name') or '').strip()
        if not name:
            raise ValidationError("Item name is required")

        item_type = data.get('type') or AtkItem.TYPE_ATK
        if item_type not in AtkItem.TYPES:
            raise ValidationError(f"Unknown item type: {item_type}")

        price = data.get('price') or 0
        if price < 0:
            raise ValidationError("Price cannot be negative")

        item.type = item_type
        item.name = name
        item.description = data.get('description') or None
        item.unit = (data.get('unit') or '').strip() or 'pcs'
        item.price = price
        item.min_stock = data.get('min_stock') or AtkItem.DEFAULT_MIN_STOCK
        lead_time = data.get('lead_time_days') or AtkItem.DEFAULT_LEAD_TIME_DAYS
        if lead_time < 1:
            raise ValidationError("Lead time must be at least one day")
        item.lead_time_days = lead_time
        item.image_url = data.get('image_url') or None
        item.updated_by_id = self.actor_id

    @action("create_item")
    def create_item(self, data: Dict[str, Any]) -> AtkItem:
        item = AtkItem(stock_quantity=0, created_by_id=self.actor_id)
        self._apply(item, data)
        db.session.add(item)
        db.session.flush()

        initial_stock = data.get('stock_quantity') or 0
        if initial_stock < 0:
            raise ValidationError("Initial stock cannot be negative")
        if initial_stock:
            StockManager(self.actor_id).receive(
                item_id=item.id, quantity=initial_stock, notes="Initial stock")

        db.session.commit()
        logger.info(f"Created ATK item {item.id} ({item.name}) by user {self.actor_id}")
        return item

    @action("update_item")
    def update_item(self, item_id: int, data: Dict[str, Any]) -> AtkItem:
        """Stock quantity is left alone; it only moves through stock in/out"""
        item = get_or_raise(AtkItem, item_id, 'Item')
        old_image = item.image_url

        self._apply(item, data)
        db.session.commit()

        if old_image and old_image != item.image_url:
            get_file_store().delete(old_image)

        logger.info(f"Updated ATK item {item.id} by user {self.actor_id}")
        return item

    @action("delete_item")
    def delete_item(self, item_id: int) -> ActionResult:
        item = get_or_raise(AtkItem, item_id, 'Item')
        ensure_unreferenced(item.id, f"Item {item.name}", ITEM_REFERENCES)
        image_url = item.image_url
        name = item.name

        db.session.delete(item)
        db.session.commit()

        if image_url:
            get_file_store().delete(image_url)

        logger.info(f"Deleted ATK item {item_id} ({name}) by user {self.actor_id}")
        return ActionResult.ok(id=item_id)

    @action("upload_item_image")
    def upload_item_image(self, upload) -> ActionResult:
        url = get_file_store().save_upload(upload, 'items')
        return ActionResult.ok(url=url)

    @action("stock_in")
    def stock_in(self, item_id: int, quantity: int, notes: str | None = None) -> ActionResult:
        movement = StockManager(self.actor_id).receive(
            item_id=item_id, quantity=quantity, notes=notes or None)
        db.session.commit()
        logger.info(f"Stock in: item {item_id} +{quantity} by user {self.actor_id}")
        return ActionResult.ok(id=movement.id)

    @action("stock_out")
    def stock_out(self, item_id: int, quantity: int, notes: str | None = None) -> ActionResult:
        movement = StockManager(self.actor_id).issue(
            item_id=item_id, quantity=quantity, notes=notes or None)
        db.session.commit()
        logger.info(f"Stock out: item {item_id} -{quantity} by user {self.actor_id}")
        return ActionResult.ok(id=movement.id)
