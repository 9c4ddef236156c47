from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

from helpdesk import db
from helpdesk.business.core.action_result import ActionResult, action
from helpdesk.business.core.errors import ValidationError
from helpdesk.business.core.records import get_optional, get_or_raise
from helpdesk.data.assets.asset import Asset
from helpdesk.data.assets.asset_maintenance import AssetMaintenance
from helpdesk.data.core.user_info.user import User
from helpdesk.logger import get_logger

logger = get_logger("helpdesk.business.assets.maintenance_manager")


class MaintenanceManager:
    """Maintenance log entries for assets"""

    def __init__(self, actor_id: int | None):
        self.actor_id = actor_id

    def _apply(self, record: AssetMaintenance, data: Dict[str, Any]) -> None:
        asset = get_or_raise(Asset, data.get('asset_id'), 'Asset')

        maintenance_type = data.get('type') or 'repair'
        if maintenance_type not in AssetMaintenance.TYPES:
            raise ValidationError(f"Unknown maintenance type: {maintenance_type}")

        cost = data.get('cost') or 0
        if cost < 0:
            raise ValidationError("Cost cannot be negative")

        performer = get_optional(User, data.get('performed_by_id'), 'Technician')

        record.asset_id = asset.id
        record.type = maintenance_type
        record.description = data.get('description') or None
        record.cost = cost
        record.performed_by_id = performer.id if performer else None
        record.performed_at = data.get('performed_at') or record.performed_at or datetime.utcnow()
        record.next_maintenance = data.get('next_maintenance') or None
        record.notes = data.get('notes') or None
        record.updated_by_id = self.actor_id

    @action("create_maintenance")
    def create_maintenance(self, data: Dict[str, Any]) -> AssetMaintenance:
        record = AssetMaintenance(created_by_id=self.actor_id)
        self._apply(record, data)
        db.session.add(record)
        db.session.commit()

        logger.info(f"Logged {record.type} for asset {record.asset_id} by user {self.actor_id}")
        return record

    @action("update_maintenance")
    def update_maintenance(self, maintenance_id: int, data: Dict[str, Any]) -> AssetMaintenance:
        record = get_or_raise(AssetMaintenance, maintenance_id, 'Maintenance record')
        self._apply(record, data)
        db.session.commit()
        return record

    @action("delete_maintenance")
    def delete_maintenance(self, maintenance_id: int) -> ActionResult:
        record = get_or_raise(AssetMaintenance, maintenance_id, 'Maintenance record')
        db.session.delete(record)
        db.session.commit()

        logger.info(f"Deleted maintenance record {maintenance_id} by user {self.actor_id}")
        return ActionResult.ok(id=maintenance_id)
