"""
Master data managers: departments, locations and asset categories

All three share the name/description shape; categories add the asset code
prefix. A record that is still referenced cannot be deleted.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from helpdesk import db
from helpdesk.business.core.action_result import ActionResult, action
from helpdesk.business.core.errors import ConflictError, ValidationError
from helpdesk.business.core.records import ensure_unreferenced, get_or_raise
from helpdesk.data.assets.asset import Asset
from helpdesk.data.assets.asset_category import AssetCategory
from helpdesk.data.core.department import Department
from helpdesk.data.core.location import Location
from helpdesk.data.core.user_info.user import User
from helpdesk.logger import get_logger

logger = get_logger("helpdesk.business.core.master_manager")


class MasterDataManager:
    model = None
    label = 'record'
    # (model, foreign key column name, plural label) pairs that block a delete
    references: List[Tuple[Any, str, str]] = []

    def __init__(self, actor_id: int | None):
        self.actor_id = actor_id

    def _apply(self, record, data: Dict[str, Any]) -> None:
        name = (data.get('name') or '').strip()
        if not name:
            raise ValidationError(f"{self.label.capitalize()} name is required")
        existing = self.model.query.filter(db.func.lower(self.model.name) == name.lower()).first()
        if existing is not None and existing.id != record.id:
            raise ConflictError(f"{self.label.capitalize()} {name} already exists")

        record.name = name
        record.description = data.get('description') or None
        record.updated_by_id = self.actor_id

    def create(self, data: Dict[str, Any]) -> ActionResult:
        return self._create(data)

    def update(self, record_id: int, data: Dict[str, Any]) -> ActionResult:
        return self._update(record_id, data)

    def delete(self, record_id: int) -> ActionResult:
        return self._delete(record_id)

    @action("create_master_record")
    def _create(self, data: Dict[str, Any]):
        record = self.model(created_by_id=self.actor_id)
        self._apply(record, data)
        db.session.add(record)
        db.session.commit()

        logger.info(f"Created {self.label} {record.name} by user {self.actor_id}")
        return record

    @action("update_master_record")
    def _update(self, record_id: int, data: Dict[str, Any]):
        record = get_or_raise(self.model, record_id, self.label.capitalize())
        self._apply(record, data)
        db.session.commit()
        return record

    @action("delete_master_record")
    def _delete(self, record_id: int) -> ActionResult:
        record = get_or_raise(self.model, record_id, self.label.capitalize())

        ensure_unreferenced(record.id, f"{self.label.capitalize()} {record.name}", self.references)

        name = record.name
        db.session.delete(record)
        db.session.commit()

        logger.info(f"Deleted {self.label} {name} by user {self.actor_id}")
        return ActionResult.ok(id=record_id)


class DepartmentManager(MasterDataManager):
    model = Department
    label = 'department'
    references = [
        (User, 'department_id', 'users'),
        (Asset, 'department_id', 'assets'),
    ]


class LocationManager(MasterDataManager):
    model = Location
    label = 'location'
    references = [(Asset, 'location_id', 'assets')]


class CategoryManager(MasterDataManager):
    model = AssetCategory
    label = 'category'
    references = [(Asset, 'category_id', 'assets')]

    def _apply(self, record, data: Dict[str, Any]) -> None:
        super()._apply(record, data)
        prefix = (data.get('prefix') or '').strip().upper()
        if not prefix:
            raise ValidationError("Category prefix is required")
        if not prefix.isalnum():
            raise ValidationError("Category prefix may only contain letters and digits")
        record.prefix = prefix
