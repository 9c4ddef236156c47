"""
Tests for stock opname sessions (physical stock counts)
"""
from datetime import date

from helpdesk.business.atk.stock_opname_manager import StockOpnameManager
from helpdesk.data.atk.atk_stock_history import AtkStockHistory
from helpdesk.data.atk.stock_opname import StockOpnameSession


def _lines_by_item(session):
    return {line.item_id: line for line in session.items}


def test_create_session_snapshots_every_item(db, admin, make_item):
    paper = make_item('Kertas A4', stock=12)
    toner = make_item('Toner HP 85A', stock=0)

    result = StockOpnameManager(admin.id).create_session('Opname akhir tahun')
    assert result.success, result.error

    session = db.session.get(StockOpnameSession, result.id)
    assert session.status == 'draft'
    assert session.session_code == f"SO-{date.today().year}-0001"
    snapshot = {item_id: line.system_quantity for item_id, line in _lines_by_item(session).items()}
    assert snapshot == {paper.id: 12, toner.id: 0}
    assert session.counted_count == 0


def test_session_codes_are_sequential(db, admin):
    manager = StockOpnameManager(admin.id)
    manager.create_session()
    second = db.session.get(StockOpnameSession, manager.create_session().id)
    assert second.session_code.endswith('-0002')


def test_counting_moves_session_in_progress(db, admin, make_item):
    paper = make_item(stock=12)
    manager = StockOpnameManager(admin.id)
    session = db.session.get(StockOpnameSession, manager.create_session().id)
    line = _lines_by_item(session)[paper.id]

    assert manager.record_count(line.id, 9, 'Dua rim rusak').success
    db.session.refresh(line)
    assert (line.physical_quantity, line.difference) == (9, -3)
    assert line.counted_by_id == admin.id
    assert session.status == 'in_progress'

    assert not manager.record_count(line.id, -1).success


def test_complete_adjusts_stock_with_ledger(db, admin, make_item):
    paper = make_item('Kertas A4', stock=12)
    pens = make_item('Pulpen', stock=4)
    stapler = make_item('Stapler', stock=2)
    manager = StockOpnameManager(admin.id)
    session = db.session.get(StockOpnameSession, manager.create_session().id)
    lines = _lines_by_item(session)

    manager.record_count(lines[paper.id].id, 9)
    manager.record_count(lines[pens.id].id, 7)
    manager.record_count(lines[stapler.id].id, 2)

    assert manager.complete_session(session.id).success
    for item in (paper, pens, stapler):
        db.session.refresh(item)
    assert (paper.stock_quantity, pens.stock_quantity, stapler.stock_quantity) == (9, 7, 2)

    ledger = AtkStockHistory.query.filter_by(reference_id=session.id).all()
    assert sorted((row.item_id, row.type, row.quantity) for row in ledger) == sorted([
        (paper.id, 'out', 3), (pens.id, 'in', 3)])
    assert session.status == 'completed'
    assert session.completed_by_id == admin.id

    # Completed sessions refuse further counts
    result = manager.record_count(lines[paper.id].id, 1)
    assert not result.success
    assert 'completed' in result.error


def test_uncounted_items_keep_their_stock(db, admin, make_item):
    paper = make_item(stock=12)
    pens = make_item('Pulpen', stock=4)
    manager = StockOpnameManager(admin.id)
    session = db.session.get(StockOpnameSession, manager.create_session().id)

    result = manager.complete_session(session.id)
    assert not result.success
    assert 'counted' in result.error

    manager.record_count(_lines_by_item(session)[paper.id].id, 10)
    assert manager.complete_session(session.id).success
    db.session.refresh(pens)
    assert pens.stock_quantity == 4


def test_cancel_and_delete(db, admin, make_item):
    make_item(stock=1)
    manager = StockOpnameManager(admin.id)
    session_id = manager.create_session().id

    assert manager.cancel_session(session_id).success
    assert not manager.cancel_session(session_id).success
    assert not manager.complete_session(session_id).success

    assert manager.delete_session(session_id).success
    assert db.session.get(StockOpnameSession, session_id) is None


def test_stock_opname_routes(db, authenticated_client, user_client, make_item):
    paper = make_item(stock=5)
    authenticated_client.post('/atk/stock-opname/create', data={'notes': 'Bulanan'})
    session = StockOpnameSession.query.one()
    line = _lines_by_item(session)[paper.id]

    response = authenticated_client.post(f'/atk/stock-opname/items/{line.id}/count',
                                         data={'physical_quantity': '3'}, follow_redirects=True)
    assert response.status_code == 200
    authenticated_client.post(f'/atk/stock-opname/{session.id}/complete')
    db.session.refresh(paper)
    assert paper.stock_quantity == 3

    assert authenticated_client.get(f'/atk/stock-opname/{session.id}').status_code == 200
    assert user_client.get('/atk/stock-opname').status_code == 403
