"""
Tests for reorder recommendations, restock predictions, inventory health and
the low stock alert
"""
from datetime import date, datetime, timedelta

import pytest

from helpdesk.data.atk.atk_item import AtkItem
from helpdesk.data.atk.atk_stock_history import AtkStockHistory
from helpdesk.services.atk.stock_analytics_service import (
    StockAnalyticsService, detect_trend, health_status, item_health, predict_restock,
    recommend_reorder, reorder_point, summarize_health, weekly_totals,
)

JUNE_30 = date(2024, 6, 30)


def _item(name='Kertas A4', stock=30, min_stock=5, lead_time_days=7, price=50000):
    return AtkItem(name=name, stock_quantity=stock, min_stock=min_stock,
                   lead_time_days=lead_time_days, price=price)


def _out(db, item, quantity, created_at):
    db.session.add(AtkStockHistory(item_id=item.id, type=AtkStockHistory.TYPE_OUT,
                                   quantity=quantity, created_at=created_at))
    db.session.commit()


def test_reorder_point():
    # ceil(1.65 * sqrt(7)) = 5 units of safety stock on top of a week's demand
    assert reorder_point(1.0, 7) == (12, 5)
    assert reorder_point(0.0, 7) == (0, 0)


@pytest.mark.parametrize("stock, days, priority", [
    (30, 18, 'safe'),
    (20, 8, 'planned'),
    (15, 3, 'soon'),
    (12, 0, 'urgent'),
])
def test_reorder_priority_follows_days_left(stock, days, priority):
    usage = [(datetime(2024, 6, 1, 9), 90)]
    rec = recommend_reorder(_item(stock=stock), usage, JUNE_30)

    assert rec.avg_daily_usage == 1.0
    assert rec.reorder_point == 12
    assert rec.days_until_reorder == days
    assert rec.priority == priority
    assert rec.suggested_quantity == 30
    assert rec.stockout_date == JUNE_30 + timedelta(days=stock)


def test_reorder_without_usage():
    rec = recommend_reorder(_item(stock=4, min_stock=6), [], JUNE_30)
    assert rec.days_until_reorder == 999
    assert rec.stockout_date is None
    assert rec.priority == 'safe'
    assert rec.suggested_quantity == 6

    empty = recommend_reorder(_item(stock=0), [], JUNE_30)
    assert empty.priority == 'urgent'


def test_longer_lead_time_raises_reorder_point():
    usage = [(datetime(2024, 6, 1, 9), 90)]
    short = recommend_reorder(_item(lead_time_days=7), usage, JUNE_30)
    slow_supplier = recommend_reorder(_item(lead_time_days=21), usage, JUNE_30)
    assert slow_supplier.reorder_point > short.reorder_point
    assert slow_supplier.reorder_point == 29
    assert slow_supplier.priority == 'soon'


@pytest.mark.parametrize("weeks, trend", [
    ([10, 10, 20, 20], 'increasing'),
    ([20, 20, 10, 10], 'decreasing'),
    ([10, 11], 'stable'),
    ([0, 5], 'stable'),
    ([5], 'stable'),
])
def test_detect_trend(weeks, trend):
    assert detect_trend(weeks)[0] == trend


def test_weekly_totals_are_oldest_first():
    usage = [
        (datetime(2024, 6, 1, 9), 2),
        (datetime(2024, 6, 2, 9), 3),
        (datetime(2024, 6, 20, 9), 4),
        (datetime(2024, 6, 29, 9), 6),
    ]
    assert weekly_totals(usage, JUNE_30) == [5, 4, 6]


def test_predict_restock_steady_usage():
    usage = [(datetime(2024, 6, day, 10), 3) for day in range(10, 20)]
    prediction = predict_restock(_item(stock=25, min_stock=5), usage, JUNE_30)

    assert prediction.avg_daily_usage == 1.0
    assert prediction.usage_lower == prediction.usage_upper == 1.0
    assert prediction.days_until_min == 20
    assert prediction.predicted_min_date == date(2024, 7, 20)
    assert not prediction.urgent
    assert prediction.trend == 'decreasing'
    assert prediction.confidence == pytest.approx(0.5)
    assert prediction.recommendation == "Order in 6 days. Usage decreasing (-57%)."


def test_predict_restock_month_end_spike():
    usage = [
        (datetime(2024, 6, 3, 10), 2),
        (datetime(2024, 6, 10, 10), 2),
        (datetime(2024, 6, 25, 10), 6),
        (datetime(2024, 6, 26, 10), 6),
    ]
    prediction = predict_restock(_item(stock=10, min_stock=5), usage, JUNE_30)

    assert prediction.urgent
    assert prediction.days_until_min == 9
    assert prediction.month_end_multiplier == pytest.approx(3.0)
    assert prediction.has_month_end_spike
    assert prediction.peak_day == 'Tue'
    assert prediction.trend == 'increasing'
    assert prediction.usage_lower == 0.0
    assert prediction.usage_upper == pytest.approx(16 / 30 + 1.96)
    assert prediction.confidence == pytest.approx(0.1)
    assert prediction.recommendation == (
        "Restock now: stock reaches its minimum in 9 days."
        " Usage increasing (+250%). Month-end spike (3.0x normal)."
    )


def test_predict_restock_without_usage():
    prediction = predict_restock(_item(), [], JUNE_30)
    assert prediction.days_until_min == 999
    assert prediction.peak_day is None
    assert prediction.confidence == 0
    assert not prediction.urgent


@pytest.mark.parametrize("days, status", [
    (0, 'healthy'), (7, 'healthy'), (8, 'slow'), (90, 'slow'), (91, 'dead'), (999, 'dead'),
])
def test_health_status(days, status):
    assert health_status(days) == status


def test_inventory_health_summary():
    paper = item_health(_item('Kertas A4', stock=10, min_stock=5, price=50000),
                        [(datetime(2024, 6, 28, 9), 9)], datetime(2024, 6, 28, 9), JUNE_30)
    toner = item_health(_item('Toner', stock=2, min_stock=3, price=800000),
                        [], datetime(2024, 5, 21, 9), JUNE_30)
    ribbon = item_health(_item('Printer ribbon', stock=0, min_stock=1, price=100000), [], None, JUNE_30)
    lamp = item_health(_item('Proyektor lampu', stock=1, min_stock=0, price=900000), [], None, JUNE_30)

    assert paper.status == 'healthy'
    assert paper.usage_30d == paper.usage_90d == 9
    assert paper.turnover_rate == pytest.approx(0.9)
    assert toner.days_since_last_out == 40
    assert toner.status == 'slow'
    assert ribbon.days_since_last_out == 999

    health = summarize_health([paper, toner, ribbon, lamp])
    summary = health.summary
    assert (summary.healthy, summary.slow, summary.dead, summary.total) == (1, 1, 2, 4)
    assert summary.total_value == 3000000
    assert summary.dead_stock_value == 900000
    assert summary.low_stock_count == 2
    assert [row.item.name for row in health.slow_moving] == ['Printer ribbon', 'Proyektor lampu', 'Toner']
    assert [(alert['type'], alert['item_name'], alert['message']) for alert in health.alerts] == [
        ('warning', 'Toner', 'Stock (2) at or below minimum (3)'),
        ('danger', 'Printer ribbon', 'Out of stock!'),
        ('warning', 'Proyektor lampu', 'Dead stock worth Rp 900,000; consider redistribution or disposal'),
    ]


def test_service_reads_out_rows_of_the_last_90_days(db, make_item):
    paper = make_item('Kertas A4', stock=30)
    make_item('Pulpen', stock=0)
    _out(db, paper, 45, datetime(2024, 6, 20, 10))
    _out(db, paper, 45, datetime(2024, 4, 15, 10))
    _out(db, paper, 100, datetime(2024, 1, 1, 10))
    db.session.add(AtkStockHistory(item_id=paper.id, type=AtkStockHistory.TYPE_IN,
                                   quantity=50, created_at=datetime(2024, 6, 21, 10)))
    db.session.commit()

    recommendations = StockAnalyticsService.reorder_recommendations(JUNE_30)
    assert [(rec.item.name, rec.priority) for rec in recommendations] == [('Pulpen', 'urgent'), ('Kertas A4', 'safe')]
    assert recommendations[1].avg_daily_usage == 1.0
    assert StockAnalyticsService.priority_counts(recommendations) == {
        'urgent': 1, 'soon': 0, 'planned': 0, 'safe': 1, 'total': 2,
    }

    predictions = StockAnalyticsService.restock_predictions(JUNE_30)
    assert predictions[0].item.name == 'Kertas A4'
    assert predictions[0].avg_daily_usage == 1.5

    health = StockAnalyticsService.inventory_health(JUNE_30)
    by_name = {row.item.name: row for row in health.items}
    assert by_name['Kertas A4'].days_since_last_out == 10
    assert by_name['Kertas A4'].usage_90d == 90
    assert by_name['Pulpen'].status == 'dead'


def test_analytics_pages(authenticated_client, user_client, make_item):
    make_item('Kertas A4')
    for url in ('/atk/reorder', '/atk/predictions', '/atk/health'):
        response = authenticated_client.get(url)
        assert response.status_code == 200
        assert b'Kertas A4' in response.data
        assert user_client.get(url).status_code == 403
    assert user_client.post('/atk/predictions/notify').status_code == 403


def test_low_stock_alert_goes_to_admins(db, authenticated_client, admin, make_user, make_item, whatsapp):
    admin.whatsapp_phone = '081100000001'
    db.session.commit()
    make_user('staff.it', role='staff_it', whatsapp_phone='081100000002')
    toner = make_item('Toner', stock=6, min_stock=5)
    make_item('Kertas A4', stock=100, min_stock=5)
    _out(db, toner, 30, datetime.utcnow())

    response = authenticated_client.post('/atk/predictions/notify', follow_redirects=True)
    assert b'Low stock alert sent to admins for 1 items' in response.data

    sent = whatsapp.messages_to('6281100000001')
    assert len(sent) == 1
    assert 'Toner' in sent[0] and 'Kertas A4' not in sent[0]
    assert 'lead time: 14 hari' in sent[0]
    assert whatsapp.messages_to('6281100000002') == []


def test_low_stock_alert_with_nothing_urgent(authenticated_client, make_item, whatsapp):
    make_item('Kertas A4', stock=100, min_stock=5)
    response = authenticated_client.post('/atk/predictions/notify', follow_redirects=True)
    assert b'No item needs restocking' in response.data
    assert whatsapp.sent == []
