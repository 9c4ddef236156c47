"""
ATK Stock Analytics
Reorder points, restock predictions and inventory health, recomputed from the
stock ledger's 'out' rows on every call.

The calculations are plain functions over (timestamp, quantity) pairs so they
can be checked without a database; StockAnalyticsService feeds them from the
ledger.
"""

import math
from calendar import monthrange
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from helpdesk import db
from helpdesk.data.atk.atk_item import AtkItem
from helpdesk.data.atk.atk_stock_history import AtkStockHistory

Usage = Tuple[datetime, int]

HISTORY_DAYS = 90
RECENT_DAYS = 30
NO_USAGE_DAYS = 999

# z-score for a 95% service level
SAFETY_Z = 1.65
# z-score of the 95% confidence interval
CONFIDENCE_Z = 1.96
SUGGESTED_ORDER_DAYS = 30

PRIORITY_URGENT = 'urgent'
PRIORITY_SOON = 'soon'
PRIORITY_PLANNED = 'planned'
PRIORITY_SAFE = 'safe'
PRIORITIES = (PRIORITY_URGENT, PRIORITY_SOON, PRIORITY_PLANNED, PRIORITY_SAFE)
SOON_DAYS = 7
PLANNED_DAYS = 14

PREDICTION_LEAD_TIME_DAYS = 14
TREND_PERCENT = 15.0
MONTH_END_DAYS = 7
SPIKE_MULTIPLIER = 1.3
FULL_CONFIDENCE_ROWS = 20
WEEKDAYS = ('Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun')

HEALTH_HEALTHY = 'healthy'
HEALTH_SLOW = 'slow'
HEALTH_DEAD = 'dead'
HEALTHY_DAYS = 7
SLOW_DAYS = 90
DEAD_STOCK_ALERT_VALUE = 500000
TOP_LIST = 10


@dataclass
class ReorderRecommendation:
    item: AtkItem
    avg_daily_usage: float
    safety_stock: int
    reorder_point: int
    suggested_quantity: int
    days_until_reorder: int
    priority: str
    stockout_date: Optional[date]


@dataclass
class RestockPrediction:
    item: AtkItem
    avg_daily_usage: float
    usage_lower: float
    usage_upper: float
    days_until_min: int
    predicted_min_date: date
    trend: str
    trend_percentage: float
    month_end_multiplier: float
    peak_day: Optional[str]
    confidence: float
    recommendation: str
    urgent: bool

    @property
    def has_month_end_spike(self) -> bool:
        return self.month_end_multiplier > SPIKE_MULTIPLIER


@dataclass
class ItemHealth:
    item: AtkItem
    days_since_last_out: int
    usage_30d: int
    usage_90d: int
    avg_daily_usage: float
    turnover_rate: float
    status: str
    value: float


@dataclass
class HealthSummary:
    healthy: int = 0
    slow: int = 0
    dead: int = 0
    total: int = 0
    total_value: float = 0.0
    dead_stock_value: float = 0.0
    low_stock_count: int = 0


@dataclass
class InventoryHealth:
    summary: HealthSummary
    items: List[ItemHealth] = field(default_factory=list)
    slow_moving: List[ItemHealth] = field(default_factory=list)
    alerts: List[Dict] = field(default_factory=list)


# Calculations

def reorder_point(avg_daily_usage: float, lead_time_days: int) -> Tuple[int, int]:
    """(reorder point, safety stock) for the given demand and lead time"""
    safety_stock = math.ceil(SAFETY_Z * avg_daily_usage * math.sqrt(lead_time_days))
    return math.ceil(avg_daily_usage * lead_time_days + safety_stock), safety_stock


def reorder_priority(stock: int, point: int, days_until_reorder: int) -> str:
    if stock <= point or days_until_reorder <= 0:
        return PRIORITY_URGENT
    if days_until_reorder <= SOON_DAYS:
        return PRIORITY_SOON
    if days_until_reorder <= PLANNED_DAYS:
        return PRIORITY_PLANNED
    return PRIORITY_SAFE


def recommend_reorder(item: AtkItem, usage: Sequence[Usage], today: date) -> ReorderRecommendation:
    """Demand is the 'out' quantity of the last HISTORY_DAYS days spread over every day."""
    avg = sum(quantity for _, quantity in usage) / HISTORY_DAYS
    lead_time = item.lead_time_days or AtkItem.DEFAULT_LEAD_TIME_DAYS
    stock = item.stock_quantity or 0
    point, safety_stock = reorder_point(avg, lead_time)

    if avg > 0:
        days_until_reorder = max(0, math.floor((stock - point) / avg))
        stockout_date = today + timedelta(days=math.floor(stock / avg))
    else:
        days_until_reorder = NO_USAGE_DAYS
        stockout_date = None

    return ReorderRecommendation(
        item=item,
        avg_daily_usage=avg,
        safety_stock=safety_stock,
        reorder_point=point,
        suggested_quantity=max(math.ceil(avg * SUGGESTED_ORDER_DAYS), item.min_stock or 0),
        days_until_reorder=days_until_reorder,
        priority=reorder_priority(stock, point, days_until_reorder),
        stockout_date=stockout_date,
    )


def detect_trend(weekly_totals: Sequence[int]) -> Tuple[str, float]:
    """
    Compare the older half of the weekly totals with the newer half.

    Args:
        weekly_totals: Totals in chronological order, oldest first

    Returns:
        ('increasing' | 'decreasing' | 'stable', change in percent)
    """
    if len(weekly_totals) < 2:
        return 'stable', 0.0
    middle = len(weekly_totals) // 2
    first, second = weekly_totals[:middle], weekly_totals[middle:]
    first_avg = sum(first) / len(first)
    second_avg = sum(second) / len(second)
    if first_avg == 0:
        return 'stable', 0.0

    change = (second_avg - first_avg) / first_avg * 100
    if change > TREND_PERCENT:
        return 'increasing', change
    if change < -TREND_PERCENT:
        return 'decreasing', change
    return 'stable', change


def is_month_end(day: date) -> bool:
    return day.day > monthrange(day.year, day.month)[1] - MONTH_END_DAYS


def weekly_totals(usage: Sequence[Usage], today: date) -> List[int]:
    """Totals of the weeks that had usage, counted back from today, oldest first"""
    weeks: Dict[int, int] = defaultdict(int)
    for moment, quantity in usage:
        weeks[(today - moment.date()).days // 7] += quantity
    return [weeks[weeks_ago] for weeks_ago in sorted(weeks, reverse=True)]


def population_std_dev(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    return math.sqrt(sum((value - mean) ** 2 for value in values) / len(values))


def predict_restock(item: AtkItem, usage: Sequence[Usage], today: date) -> RestockPrediction:
    """
    Days until the stock falls to its minimum at the last RECENT_DAYS days' rate,
    with the usage trend, month-end spikes, the busiest weekday and a 95%
    interval on the daily rate.
    """
    recent_start = today - timedelta(days=RECENT_DAYS)
    avg = sum(quantity for moment, quantity in usage if moment.date() >= recent_start) / RECENT_DAYS

    weekday_totals = [0] * 7
    weekday_rows = [0] * 7
    month_end, normal = [], []
    daily: Dict[date, int] = defaultdict(int)
    for moment, quantity in usage:
        weekday_totals[moment.weekday()] += quantity
        weekday_rows[moment.weekday()] += 1
        (month_end if is_month_end(moment.date()) else normal).append(quantity)
        daily[moment.date()] += quantity

    trend, trend_percentage = detect_trend(weekly_totals(usage, today))

    std_dev = population_std_dev(list(daily.values()))
    margin = CONFIDENCE_Z * std_dev / math.sqrt(len(daily) or 1)

    month_end_avg = sum(month_end) / len(month_end) if month_end else 0
    normal_avg = sum(normal) / len(normal) if normal else 0
    multiplier = month_end_avg / normal_avg if normal_avg > 0 else 1.0

    weekday_avgs = [total / rows if rows else 0 for total, rows in zip(weekday_totals, weekday_rows)]
    peak_day = WEEKDAYS[weekday_avgs.index(max(weekday_avgs))] if usage else None

    above_min = (item.stock_quantity or 0) - (item.min_stock or 0)
    days_until_min = math.floor(above_min / avg) if avg > 0 else NO_USAGE_DAYS

    urgent = days_until_min <= PREDICTION_LEAD_TIME_DAYS
    if urgent:
        recommendation = f"Restock now: stock reaches its minimum in {days_until_min} days."
    elif days_until_min <= PREDICTION_LEAD_TIME_DAYS * 2:
        recommendation = f"Order in {days_until_min - PREDICTION_LEAD_TIME_DAYS} days."
    else:
        recommendation = f"Stock is safe for {days_until_min} days."
    if trend == 'increasing':
        recommendation += f" Usage increasing (+{abs(trend_percentage):.0f}%)."
    elif trend == 'decreasing':
        recommendation += f" Usage decreasing ({trend_percentage:.0f}%)."
    if multiplier > SPIKE_MULTIPLIER:
        recommendation += f" Month-end spike ({multiplier:.1f}x normal)."

    consistency = max(0.5, 1 - std_dev / (avg or 1)) if std_dev > 0 else 1.0

    return RestockPrediction(
        item=item,
        avg_daily_usage=avg,
        usage_lower=max(0.0, avg - margin),
        usage_upper=avg + margin,
        days_until_min=days_until_min,
        predicted_min_date=today + timedelta(days=days_until_min),
        trend=trend,
        trend_percentage=trend_percentage,
        month_end_multiplier=multiplier,
        peak_day=peak_day,
        confidence=min(1.0, len(usage) / FULL_CONFIDENCE_ROWS) * consistency,
        recommendation=recommendation,
        urgent=urgent,
    )


def health_status(days_since_last_out: int) -> str:
    if days_since_last_out <= HEALTHY_DAYS:
        return HEALTH_HEALTHY
    if days_since_last_out <= SLOW_DAYS:
        return HEALTH_SLOW
    return HEALTH_DEAD


def item_health(item: AtkItem, usage: Sequence[Usage], last_out: Optional[datetime],
                today: date) -> ItemHealth:
    """usage covers the last HISTORY_DAYS days; last_out is the newest 'out' row ever"""
    stock = item.stock_quantity or 0
    days_since = (today - last_out.date()).days if last_out else NO_USAGE_DAYS
    recent_start = today - timedelta(days=RECENT_DAYS)
    usage_90d = sum(quantity for _, quantity in usage)
    return ItemHealth(
        item=item,
        days_since_last_out=days_since,
        usage_30d=sum(quantity for moment, quantity in usage if moment.date() >= recent_start),
        usage_90d=usage_90d,
        avg_daily_usage=usage_90d / HISTORY_DAYS,
        turnover_rate=usage_90d / stock if stock > 0 else 0.0,
        status=health_status(days_since),
        value=stock * (item.price or 0),
    )


def summarize_health(rows: Iterable[ItemHealth]) -> InventoryHealth:
    health = InventoryHealth(summary=HealthSummary())
    summary = health.summary
    for row in rows:
        health.items.append(row)
        summary.total += 1
        summary.total_value += row.value
        setattr(summary, row.status, getattr(summary, row.status) + 1)
        if row.status == HEALTH_DEAD:
            summary.dead_stock_value += row.value
        if row.status in (HEALTH_SLOW, HEALTH_DEAD):
            health.slow_moving.append(row)

        if row.item.is_low_stock:
            summary.low_stock_count += 1
            stock = row.item.stock_quantity or 0
            health.alerts.append({
                'type': 'danger' if stock == 0 else 'warning',
                'item_name': row.item.name,
                'message': ("Out of stock!" if stock == 0
                            else f"Stock ({stock}) at or below minimum ({row.item.min_stock})"),
            })
        if row.status == HEALTH_DEAD and row.value > DEAD_STOCK_ALERT_VALUE:
            health.alerts.append({
                'type': 'warning',
                'item_name': row.item.name,
                'message': f"Dead stock worth Rp {row.value:,.0f}; consider redistribution or disposal",
            })

    health.slow_moving.sort(key=lambda row: row.days_since_last_out, reverse=True)
    health.slow_moving = health.slow_moving[:TOP_LIST]
    health.alerts = health.alerts[:TOP_LIST]
    return health


class StockAnalyticsService:

    @staticmethod
    def usage_by_item(today: date) -> Dict[int, List[Usage]]:
        """'out' ledger rows of the last HISTORY_DAYS days, oldest first, keyed by item id"""
        since = datetime.combine(today - timedelta(days=HISTORY_DAYS), time.min)
        rows = (db.session.query(AtkStockHistory.item_id, AtkStockHistory.created_at,
                                 AtkStockHistory.quantity)
                .filter(AtkStockHistory.type == AtkStockHistory.TYPE_OUT,
                        AtkStockHistory.created_at >= since)
                .order_by(AtkStockHistory.created_at).all())
        usage: Dict[int, List[Usage]] = defaultdict(list)
        for item_id, created_at, quantity in rows:
            usage[item_id].append((created_at, quantity))
        return usage

    @staticmethod
    def reorder_recommendations(today: Optional[date] = None) -> List[ReorderRecommendation]:
        """Every item, the ones to reorder first at the top"""
        today = today or date.today()
        usage = StockAnalyticsService.usage_by_item(today)
        recommendations = [recommend_reorder(item, usage.get(item.id, []), today)
                           for item in AtkItem.query.order_by(AtkItem.name).all()]
        return sorted(recommendations,
                      key=lambda rec: (PRIORITIES.index(rec.priority), rec.days_until_reorder))

    @staticmethod
    def priority_counts(recommendations: Sequence[ReorderRecommendation]) -> Dict[str, int]:
        counts = {priority: 0 for priority in PRIORITIES}
        for rec in recommendations:
            counts[rec.priority] += 1
        counts['total'] = len(recommendations)
        return counts

    @staticmethod
    def restock_predictions(today: Optional[date] = None) -> List[RestockPrediction]:
        today = today or date.today()
        usage = StockAnalyticsService.usage_by_item(today)
        predictions = [predict_restock(item, usage.get(item.id, []), today)
                       for item in AtkItem.query.order_by(AtkItem.name).all()]
        return sorted(predictions, key=lambda prediction: prediction.days_until_min)

    @staticmethod
    def inventory_health(today: Optional[date] = None) -> InventoryHealth:
        today = today or date.today()
        usage = StockAnalyticsService.usage_by_item(today)
        last_out = dict(db.session.query(AtkStockHistory.item_id, db.func.max(AtkStockHistory.created_at))
                        .filter(AtkStockHistory.type == AtkStockHistory.TYPE_OUT)
                        .group_by(AtkStockHistory.item_id).all())
        return summarize_health(
            item_health(item, usage.get(item.id, []), last_out.get(item.id), today)
            for item in AtkItem.query.order_by(AtkItem.name).all()
        )
