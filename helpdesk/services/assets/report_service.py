"""
Asset Report Service
Aggregations behind the asset reports page: inventory summary, distribution
history, maintenance cost, borrowing statistics and the refresh cycle.

Rows are aggregated in Python after one query per report, which keeps the
rules (unknown labels, averaging, sorting) in one readable place.
"""

from collections import Counter, OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional

from helpdesk.business.assets.depreciation import (
    DEFAULT_USEFUL_LIFE_YEARS,
    classify_refresh,
    days_until_end_of_life,
)
from helpdesk.business.core.state_machine import BorrowingStateMachine, DistributionStateMachine
from helpdesk.data.assets.asset import Asset
from helpdesk.data.assets.asset_borrowing import AssetBorrowing
from helpdesk.data.assets.asset_distribution import AssetDistribution
from helpdesk.data.assets.asset_maintenance import AssetMaintenance
from helpdesk.services.core.filters import day_bounds

TOP_LOCATIONS = 10
DISTRIBUTION_REPORT_LIMIT = 100

UNCATEGORIZED = 'Uncategorized'
NO_LOCATION = 'No Location'


@dataclass
class AssetSummary:
    total_assets: int
    by_status: List[Dict]
    by_category: List[Dict]
    by_location: List[Dict]


@dataclass
class MaintenanceCostRow:
    asset_id: int
    asset_name: str
    asset_code: str
    total_cost: float = 0.0
    maintenance_count: int = 0
    last_maintenance: Optional[datetime] = None


@dataclass
class BorrowingStatsRow:
    asset_id: int
    asset_name: str
    asset_code: str
    borrow_count: int = 0
    current_status: Optional[str] = None
    total_days: int = field(default=0, repr=False)
    completed_borrows: int = field(default=0, repr=False)

    @property
    def avg_duration_days(self) -> Optional[int]:
        if not self.completed_borrows:
            return None
        return round(self.total_days / self.completed_borrows)


@dataclass
class RefreshCycleRow:
    asset_id: int
    name: str
    asset_code: str
    category: str
    purchase_date: date
    useful_life_years: int
    days_remaining: int
    status: str


def _counts(labels) -> List[Dict]:
    return [{'label': label, 'count': count} for label, count in Counter(labels).items()]


class AssetReportService:

    @staticmethod
    def summary() -> AssetSummary:
        """Totals by status, by category and the ten locations holding most assets"""
        assets = Asset.query.all()

        by_location = sorted(
            _counts(asset.location.name if asset.location else NO_LOCATION for asset in assets),
            key=lambda row: row['count'], reverse=True,
        )[:TOP_LOCATIONS]

        return AssetSummary(
            total_assets=len(assets),
            by_status=_counts(asset.status or 'unknown' for asset in assets),
            by_category=_counts(asset.category.name if asset.category else UNCATEGORIZED for asset in assets),
            by_location=by_location,
        )

    @staticmethod
    def distribution_report(start: Optional[date] = None, end: Optional[date] = None) -> List[AssetDistribution]:
        """Completed distributions, newest first, optionally within a date range"""
        query = AssetDistribution.query.filter(AssetDistribution.status == DistributionStateMachine.COMPLETED)
        if start is not None or end is not None:
            lower, upper = day_bounds(start or date.min, end or date.max)
            if start is not None:
                query = query.filter(AssetDistribution.distributed_at >= lower)
            if end is not None:
                query = query.filter(AssetDistribution.distributed_at <= upper)
        return (query.order_by(AssetDistribution.distributed_at.desc())
                .limit(DISTRIBUTION_REPORT_LIMIT).all())

    @staticmethod
    def maintenance_cost() -> List[MaintenanceCostRow]:
        """Maintenance cost and count per asset, most expensive first"""
        rows: Dict[int, MaintenanceCostRow] = OrderedDict()
        records = AssetMaintenance.query.order_by(AssetMaintenance.performed_at.desc()).all()

        for record in records:
            if record.asset is None:
                continue
            row = rows.get(record.asset_id)
            if row is None:
                row = rows[record.asset_id] = MaintenanceCostRow(
                    asset_id=record.asset_id,
                    asset_name=record.asset.name,
                    asset_code=record.asset.asset_code,
                )
            row.total_cost += record.cost or 0
            row.maintenance_count += 1
            if record.performed_at and (row.last_maintenance is None or record.performed_at > row.last_maintenance):
                row.last_maintenance = record.performed_at

        return sorted(rows.values(), key=lambda row: row.total_cost, reverse=True)

    @staticmethod
    def borrowing_stats() -> List[BorrowingStatsRow]:
        """
        Borrow count per asset, whether it is out right now, and the average
        length in days of its returned borrowings. Most borrowed first.
        """
        rows: Dict[int, BorrowingStatsRow] = OrderedDict()
        borrowings = AssetBorrowing.query.order_by(AssetBorrowing.created_at.desc()).all()

        for borrowing in borrowings:
            if borrowing.asset is None:
                continue
            row = rows.get(borrowing.asset_id)
            if row is None:
                row = rows[borrowing.asset_id] = BorrowingStatsRow(
                    asset_id=borrowing.asset_id,
                    asset_name=borrowing.asset.name,
                    asset_code=borrowing.asset.asset_code,
                )
            row.borrow_count += 1
            if borrowing.status == BorrowingStateMachine.BORROWED:
                row.current_status = BorrowingStateMachine.BORROWED

            if borrowing.status == BorrowingStateMachine.RETURNED and borrowing.actual_return_date and borrowing.borrow_date:
                duration = (borrowing.actual_return_date - borrowing.borrow_date).days
                if duration > 0:
                    row.total_days += duration
                    row.completed_borrows += 1

        return sorted(rows.values(), key=lambda row: row.borrow_count, reverse=True)

    @staticmethod
    def refresh_cycle(today: Optional[date] = None) -> List[RefreshCycleRow]:
        """Active assets with a purchase date, closest to the end of their useful life first"""
        today = today or date.today()
        assets = (Asset.query
                  .filter(Asset.status == Asset.STATUS_ACTIVE, Asset.purchase_date.isnot(None))
                  .order_by(Asset.purchase_date.asc()).all())

        rows = []
        for asset in assets:
            life = asset.useful_life_years or DEFAULT_USEFUL_LIFE_YEARS
            days_remaining = days_until_end_of_life(asset.purchase_date, life, today)
            rows.append(RefreshCycleRow(
                asset_id=asset.id,
                name=asset.name,
                asset_code=asset.asset_code,
                category=asset.category.name if asset.category else UNCATEGORIZED,
                purchase_date=asset.purchase_date,
                useful_life_years=life,
                days_remaining=days_remaining,
                status=classify_refresh(days_remaining),
            ))

        return sorted(rows, key=lambda row: row.days_remaining)
