"""
ATK Report Service
Usage report over the stock ledger for a date range: totals, a daily trend,
the most used items, usage per department and the ledger rows themselves.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List

from helpdesk.business.core.state_machine import AtkRequestStateMachine
from helpdesk.data.atk.atk_request import AtkRequest
from helpdesk.data.atk.atk_stock_history import AtkStockHistory
from helpdesk.services.core.filters import day_bounds

TOP_ITEMS = 10
UNKNOWN = 'Unknown'


@dataclass
class UsageSummary:
    total_usage_out: int = 0
    total_stock_in: int = 0
    total_cost: float = 0.0
    unique_items: int = 0
    requests_count: int = 0


@dataclass
class UsageReport:
    summary: UsageSummary
    trend: List[Dict] = field(default_factory=list)
    top_items: List[Dict] = field(default_factory=list)
    usage_by_department: List[Dict] = field(default_factory=list)
    history: List[AtkStockHistory] = field(default_factory=list)


class AtkReportService:

    @staticmethod
    def usage_report(start: date, end: date) -> UsageReport:
        """
        Args:
            start: First day of the period
            end: Last day of the period (inclusive)

        Returns:
            UsageReport; cost is the out quantity times the item's current price
        """
        lower, upper = day_bounds(start, end)

        history = (AtkStockHistory.query
                   .filter(AtkStockHistory.created_at >= lower, AtkStockHistory.created_at <= upper)
                   .order_by(AtkStockHistory.created_at.desc()).all())

        summary = UsageSummary()
        item_ids = set()
        trend: Dict[str, Dict] = {}
        items: Dict[int, Dict] = OrderedDict()

        for row in history:
            item_ids.add(row.item_id)
            day = row.created_at.date().isoformat()
            point = trend.setdefault(day, {'date': day, 'usage': 0, 'stock_in': 0})

            if row.type == AtkStockHistory.TYPE_OUT:
                price = row.item.price if row.item and row.item.price else 0
                summary.total_usage_out += row.quantity
                summary.total_cost += row.quantity * price
                point['usage'] += row.quantity

                stats = items.setdefault(row.item_id, {
                    'name': row.item.name if row.item else UNKNOWN, 'usage': 0, 'cost': 0.0,
                })
                stats['usage'] += row.quantity
                stats['cost'] += row.quantity * price
            elif row.type == AtkStockHistory.TYPE_IN:
                summary.total_stock_in += row.quantity
                point['stock_in'] += row.quantity

        summary.unique_items = len(item_ids)
        summary.requests_count = (AtkRequest.query
                                  .filter(AtkRequest.created_at >= lower, AtkRequest.created_at <= upper)
                                  .count())

        departments: Dict[str, int] = {}
        completed = (AtkRequest.query
                     .filter(AtkRequest.status == AtkRequestStateMachine.COMPLETED,
                             AtkRequest.created_at >= lower, AtkRequest.created_at <= upper).all())
        for atk_request in completed:
            name = atk_request.department.name if atk_request.department else UNKNOWN
            quantity = sum(
                line.approved_quantity if line.approved_quantity is not None else line.quantity
                for line in atk_request.items
            )
            departments[name] = departments.get(name, 0) + quantity

        return UsageReport(
            summary=summary,
            trend=sorted(trend.values(), key=lambda point: point['date']),
            top_items=sorted(items.values(), key=lambda stats: stats['usage'], reverse=True)[:TOP_ITEMS],
            usage_by_department=[
                {'department': name, 'usage': usage}
                for name, usage in sorted(departments.items(), key=lambda pair: pair[1], reverse=True)
            ],
            history=history,
        )
