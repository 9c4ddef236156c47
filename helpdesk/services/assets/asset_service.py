"""
Asset Service
Presentation service for asset-related data retrieval and formatting.

Handles:
- Query building and filtering for asset list views
- Depreciation figures for list rows and the detail view
- Detail view data aggregation (maintenance, borrowings, distributions)
"""

from typing import Dict, Optional, Tuple
from flask import Request
from flask_sqlalchemy.pagination import Pagination
from helpdesk import db
from helpdesk.business.assets.depreciation import calculate_depreciation
from helpdesk.business.core.state_machine import BorrowingStateMachine
from helpdesk.data.assets.asset import Asset
from helpdesk.data.assets.asset_borrowing import AssetBorrowing
from helpdesk.data.assets.asset_distribution import AssetDistribution, AssetDistributionItem
from helpdesk.data.assets.asset_maintenance import AssetMaintenance


class AssetService:
    """
    Service for asset presentation data.

    Provides methods for:
    - Building filtered asset queries
    - Calculating depreciation for display
    - Retrieving detail view data
    - Paginating asset lists
    """

    @staticmethod
    def build_filtered_query(
        search: Optional[str] = None,
        status: Optional[str] = None,
        category_id: Optional[int] = None,
        location_id: Optional[int] = None,
        department_id: Optional[int] = None,
        borrowable: Optional[bool] = None
    ):
        """
        Build a filtered asset query.

        Args:
            search: Case-insensitive match on name, code, serial number or brand
            status: Filter by asset status
            category_id: Filter by category
            location_id: Filter by current location
            department_id: Filter by owning department
            borrowable: Filter by the borrowable flag

        Returns:
            SQLAlchemy query object
        """
        query = Asset.query

        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(db.or_(
                Asset.name.ilike(pattern),
                Asset.asset_code.ilike(pattern),
                Asset.serial_number.ilike(pattern),
                Asset.brand.ilike(pattern),
            ))
        if status:
            query = query.filter(Asset.status == status)
        if category_id:
            query = query.filter(Asset.category_id == category_id)
        if location_id:
            query = query.filter(Asset.location_id == location_id)
        if department_id:
            query = query.filter(Asset.department_id == department_id)
        if borrowable is not None:
            query = query.filter(Asset.is_borrowable == borrowable)

        return query.order_by(Asset.created_at.desc(), Asset.id.desc())

    @staticmethod
    def get_list_data(
        request: Request,
        page: int = 1,
        per_page: int = 20
    ) -> Tuple[Pagination, Dict]:
        """
        Get paginated asset list with filters applied and the depreciation of
        every asset on the page.

        Returns:
            Tuple of (pagination object, {'depreciation': {asset_id: Depreciation}})
        """
        query = AssetService.build_filtered_query(
            search=request.args.get('search') or None,
            status=request.args.get('status') or None,
            category_id=request.args.get('category_id', type=int),
            location_id=request.args.get('location_id', type=int),
            department_id=request.args.get('department_id', type=int),
        )
        assets = query.paginate(page=page, per_page=per_page, error_out=False)

        depreciation = {
            asset.id: calculate_depreciation(asset.purchase_price, asset.purchase_date, asset.useful_life_years)
            for asset in assets.items
        }
        return assets, {'depreciation': depreciation}

    @staticmethod
    def get_detail_data(asset_id: int) -> Dict:
        asset = db.get_or_404(Asset, asset_id)

        maintenance = (AssetMaintenance.query.filter_by(asset_id=asset.id)
                       .order_by(AssetMaintenance.performed_at.desc()).all())
        borrowings = (AssetBorrowing.query.filter_by(asset_id=asset.id)
                      .order_by(AssetBorrowing.created_at.desc()).all())
        distributions = (AssetDistribution.query.join(AssetDistributionItem)
                         .filter(AssetDistributionItem.asset_id == asset.id)
                         .order_by(AssetDistribution.created_at.desc()).all())

        return {
            'asset': asset,
            'depreciation': calculate_depreciation(asset.purchase_price, asset.purchase_date, asset.useful_life_years),
            'maintenance': maintenance,
            'borrowings': borrowings,
            'distributions': distributions,
            'active_borrowing': next(
                (b for b in borrowings if b.status in BorrowingStateMachine.ACTIVE_STATES), None
            ),
        }

    @staticmethod
    def borrowable_assets():
        """Active borrowable assets with no pending, approved or borrowed borrowing"""
        busy = db.select(AssetBorrowing.asset_id).where(
            AssetBorrowing.status.in_(BorrowingStateMachine.ACTIVE_STATES)
        )
        return (Asset.query
                .filter(Asset.is_borrowable.is_(True),
                        Asset.status == Asset.STATUS_ACTIVE,
                        Asset.id.notin_(busy))
                .order_by(Asset.name).all())

    @staticmethod
    def all_assets():
        return Asset.query.order_by(Asset.name).all()
