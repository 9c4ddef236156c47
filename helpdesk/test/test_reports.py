"""
Tests for the ticket, ATK usage and asset reports
"""
from datetime import date, datetime, timedelta

import pytest

from helpdesk.business.atk.request_manager import RequestLine, RequestManager
from helpdesk.business.tickets.ticket_manager import TicketInput, TicketManager
from helpdesk.data.atk.atk_stock_history import AtkStockHistory
from helpdesk.data.tickets.ticket import Ticket
from helpdesk.services.assets.report_service import AssetReportService
from helpdesk.services.atk.report_service import AtkReportService
from helpdesk.services.tickets.report_service import TicketReportService, duration_bucket
from helpdesk.test.conftest import PNG_DATA_URL

MARCH = (date(2024, 3, 1), date(2024, 3, 31))


@pytest.mark.parametrize("hours, label", [
    (0.5, '< 1 Jam'), (1, '1 - 4 Jam'), (3.9, '1 - 4 Jam'), (4, '4 - 24 Jam'),
    (30, '1 - 3 Hari'), (72, '> 3 Hari'), (500, '> 3 Hari'),
])
def test_duration_bucket(hours, label):
    assert duration_bucket(timedelta(hours=hours)) == label


def _dated_ticket(db, reporter, created_at, resolved_at=None, resolver=None, **values):
    ticket_id = TicketManager(reporter.id).create_ticket(TicketInput(
        title=values.get('title', 'Wifi lambat'),
        category=values.get('category', 'network'),
        priority=values.get('priority', 'medium'),
    )).id
    ticket = db.session.get(Ticket, ticket_id)
    ticket.created_at = created_at
    if resolved_at is not None:
        ticket.status = 'resolved'
        ticket.resolved_at = resolved_at
        ticket.resolved_by_id = resolver.id
        ticket.assigned_to_id = resolver.id
    db.session.commit()
    return ticket


def test_ticket_report(db, admin, regular_user):
    _dated_ticket(db, regular_user, datetime(2024, 3, 4, 8), datetime(2024, 3, 4, 8, 30), admin)
    _dated_ticket(db, regular_user, datetime(2024, 3, 4, 9), datetime(2024, 3, 6, 9), admin,
                  category='hardware', priority='high')
    _dated_ticket(db, regular_user, datetime(2024, 3, 10, 9))
    # Created before the period, resolved inside it
    _dated_ticket(db, regular_user, datetime(2024, 2, 20, 9), datetime(2024, 3, 1, 9), admin)
    _dated_ticket(db, regular_user, datetime(2024, 4, 2, 9))

    report = TicketReportService.report(*MARCH)

    assert report.summary.total_created == 3
    assert report.summary.total_resolved == 3
    assert report.summary.open_count == 1
    durations = {row['range']: row['count'] for row in report.duration_stats}
    assert durations == {'< 1 Jam': 1, '1 - 4 Jam': 0, '4 - 24 Jam': 0, '1 - 3 Hari': 1, '> 3 Hari': 1}
    assert report.summary.avg_resolution_hours == pytest.approx((0.5 + 48 + 240) / 3)

    assert [point['date'] for point in report.trend] == ['2024-03-01', '2024-03-04', '2024-03-06', '2024-03-10']
    assert {row['name']: row['count'] for row in report.category_stats} == {'network': 2, 'hardware': 1}
    assert report.technician_stats == [{'name': admin.display_name, 'assigned': 2, 'resolved': 3}]


def test_atk_usage_report(db, admin, regular_user, make_item):
    paper = make_item('Kertas A4', stock=20, price=50000)
    pens = make_item('Pulpen', stock=20, price=2000)
    requester = RequestManager(regular_user.id)
    staff = RequestManager(admin.id)

    request_id = requester.create_request([RequestLine(paper.id, 3), RequestLine(pens.id, 10)]).id
    staff.approve_request(request_id, {pens.id: 6})
    staff.complete_request(request_id, PNG_DATA_URL)

    today = date.today()
    report = AtkReportService.usage_report(today - timedelta(days=1), today + timedelta(days=1))

    assert report.summary.total_usage_out == 9
    assert report.summary.total_cost == 3 * 50000 + 6 * 2000
    assert report.summary.unique_items == 2
    assert report.summary.requests_count == 1
    assert [row['name'] for row in report.top_items] == ['Pulpen', 'Kertas A4']
    assert report.usage_by_department == [{'department': 'IT', 'usage': 9}]
    assert len(report.history) == AtkStockHistory.query.count()


def test_usage_report_outside_period_is_empty(make_item, admin):
    make_item()
    report = AtkReportService.usage_report(date(2001, 1, 1), date(2001, 1, 31))
    assert report.summary.total_usage_out == 0
    assert report.history == []


def test_asset_summary(make_asset, locations):
    head_office, warehouse = locations
    make_asset(location=head_office)
    make_asset(location=warehouse)
    make_asset(location=warehouse, status='damage')

    summary = AssetReportService.summary()
    assert summary.total_assets == 3
    assert {row['label']: row['count'] for row in summary.by_status} == {'active': 2, 'damage': 1}
    assert summary.by_location[0] == {'label': 'Gudang IT', 'count': 2}


def test_refresh_cycle(make_asset):
    today = date(2024, 6, 1)
    make_asset(name='Printer lama', purchase_date=date(2019, 1, 1), useful_life_years=5)
    make_asset(name='Laptop hampir habis', purchase_date=date(2019, 7, 1), useful_life_years=5)
    make_asset(name='Laptop baru', purchase_date=date(2024, 1, 1), useful_life_years=5)
    make_asset(name='Tanpa tanggal')
    make_asset(name='Sudah pensiun', purchase_date=date(2015, 1, 1), status='retired')

    rows = AssetReportService.refresh_cycle(today)
    assert [(row.name, row.status) for row in rows] == [
        ('Printer lama', 'expired'),
        ('Laptop hampir habis', 'critical'),
        ('Laptop baru', 'good'),
    ]
    assert rows[1].days_remaining == 30


def test_report_pages(authenticated_client, user_client):
    for url in ('/tickets/reports', '/atk/reports', '/assets/reports'):
        assert authenticated_client.get(url).status_code == 200
        assert user_client.get(url).status_code == 403
    assert authenticated_client.get('/tickets/reports?start_date=2024-03-01&end_date=2024-03-31').status_code == 200
