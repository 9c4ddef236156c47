"""
AssetManager - create, update and delete assets, upload asset images and
generate asset codes
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict

from helpdesk import db
from helpdesk.business.core.action_result import ActionResult, action
from helpdesk.business.core.document_numbers import next_asset_code
from helpdesk.business.core.errors import ConflictError, ValidationError
from helpdesk.business.core.file_storage import get_file_store
from helpdesk.business.core.records import ensure_unreferenced, get_optional, get_or_raise
from helpdesk.data.assets.asset import Asset
from helpdesk.data.assets.asset_borrowing import AssetBorrowing
from helpdesk.data.assets.asset_category import AssetCategory
from helpdesk.data.assets.asset_distribution import AssetDistributionItem
from helpdesk.data.assets.asset_maintenance import AssetMaintenance
from helpdesk.data.core.department import Department
from helpdesk.data.core.location import Location
from helpdesk.data.core.user_info.user import User
from helpdesk.data.tickets.ticket import Ticket
from helpdesk.logger import get_logger

logger = get_logger("helpdesk.business.assets.asset_manager")

ASSET_FIELDS = (
    'asset_code', 'category_id', 'name', 'brand', 'model', 'serial_number',
    'purchase_date', 'purchase_price', 'warranty_expiry', 'useful_life_years',
    'status', 'condition', 'location_id', 'department_id', 'assigned_to_id',
    'is_borrowable', 'image_url', 'notes',
)

# History rows that keep an asset from being deleted
ASSET_REFERENCES = [
    (AssetBorrowing, 'asset_id', 'borrowings'),
    (AssetDistributionItem, 'asset_id', 'distribution lines'),
    (AssetMaintenance, 'asset_id', 'maintenance records'),
    (Ticket, 'asset_id', 'tickets'),
]


def generate_asset_code(category_prefix: str, today: date | None = None) -> str:
    """Next free code for the prefix in the current year: {PREFIX}-{YYYY}-{NNNN}"""
    today = today or date.today()
    prefix = f"{category_prefix.strip().upper()}-{today.year}-"
    existing = [
        code for (code,) in db.session.query(Asset.asset_code)
        .filter(Asset.asset_code.like(f"{prefix}%")).all()
    ]
    return next_asset_code(category_prefix, existing, today)


class AssetManager:
    """
    Domain service for asset records.

    Missing optional values fall back to: price 0, useful life 5 years,
    status 'active', condition 'good'.
    """

    def __init__(self, actor_id: int | None):
        self.actor_id = actor_id

    def _normalise(self, data: Dict[str, Any]) -> Dict[str, Any]:
        values = {key: data.get(key) for key in ASSET_FIELDS if key in data}

        values['purchase_price'] = values.get('purchase_price') or 0
        values['useful_life_years'] = values.get('useful_life_years') or Asset.DEFAULT_USEFUL_LIFE_YEARS
        values['status'] = values.get('status') or Asset.STATUS_ACTIVE
        values['condition'] = values.get('condition') or 'good'
        values['is_borrowable'] = bool(values.get('is_borrowable'))

        if values['status'] not in Asset.STATUSES:
            raise ValidationError(f"Unknown asset status: {values['status']}")
        if values['condition'] not in Asset.CONDITIONS:
            raise ValidationError(f"Unknown asset condition: {values['condition']}")
        if values['purchase_price'] < 0:
            raise ValidationError("Purchase price cannot be negative")
        if values['useful_life_years'] < 1:
            raise ValidationError("Useful life must be at least one year")

        get_optional(AssetCategory, values.get('category_id'), 'Category')
        get_optional(Location, values.get('location_id'), 'Location')
        get_optional(Department, values.get('department_id'), 'Department')
        get_optional(User, values.get('assigned_to_id'), 'Assigned user')

        for key in ('category_id', 'location_id', 'department_id', 'assigned_to_id'):
            if values.get(key) in ('', None):
                values[key] = None
        return values

    def _check_code_free(self, asset_code: str, asset_id: int | None = None) -> None:
        existing = Asset.query.filter_by(asset_code=asset_code).first()
        if existing is not None and existing.id != asset_id:
            raise ConflictError(f"Asset code {asset_code} is already used")

    @action("create_asset")
    def create_asset(self, data: Dict[str, Any]) -> Asset:
        name = (data.get('name') or '').strip()
        if not name:
            raise ValidationError("Asset name is required")

        values = self._normalise(data)
        values['name'] = name

        asset_code = (values.get('asset_code') or '').strip()
        if not asset_code:
            category = get_optional(AssetCategory, values.get('category_id'), 'Category')
            if category is None:
                raise ValidationError("Asset code is required when no category is selected")
            asset_code = generate_asset_code(category.prefix)
        values['asset_code'] = asset_code
        self._check_code_free(asset_code)

        asset = Asset(**values, created_by_id=self.actor_id, updated_by_id=self.actor_id)
        db.session.add(asset)
        db.session.commit()

        logger.info(f"Created asset {asset.asset_code} ({asset.name}) by user {self.actor_id}")
        return asset

    @action("update_asset")
    def update_asset(self, asset_id: int, data: Dict[str, Any]) -> Asset:
        asset = get_or_raise(Asset, asset_id, 'Asset')

        name = (data.get('name') or '').strip()
        if not name:
            raise ValidationError("Asset name is required")

        values = self._normalise(data)
        values['name'] = name
        asset_code = (values.get('asset_code') or '').strip() or asset.asset_code
        values['asset_code'] = asset_code
        self._check_code_free(asset_code, asset.id)

        old_image = asset.image_url
        for key, value in values.items():
            setattr(asset, key, value)
        asset.updated_by_id = self.actor_id
        db.session.commit()

        if old_image and old_image != asset.image_url:
            get_file_store().delete(old_image)

        logger.info(f"Updated asset {asset.asset_code} by user {self.actor_id}")
        return asset

    @action("delete_asset")
    def delete_asset(self, asset_id: int) -> ActionResult:
        asset = get_or_raise(Asset, asset_id, 'Asset')
        ensure_unreferenced(asset.id, f"Asset {asset.asset_code}", ASSET_REFERENCES)
        image_url = asset.image_url
        asset_code = asset.asset_code

        db.session.delete(asset)
        db.session.commit()

        if image_url:
            get_file_store().delete(image_url)

        logger.info(f"Deleted asset {asset_code} by user {self.actor_id}")
        return ActionResult.ok(id=asset_id)

    @action("upload_asset_image")
    def upload_asset_image(self, upload) -> ActionResult:
        url = get_file_store().save_upload(upload, 'assets')
        return ActionResult.ok(url=url)
