"""
Stock opname routes
Open a counting session over every item, record physical counts and apply
the differences to stock on completion
"""

from flask import Blueprint, render_template, redirect, url_for, request
from flask_login import login_required, current_user

from helpdesk import db
from helpdesk.business.atk.stock_opname_manager import StockOpnameManager
from helpdesk.business.core.state_machine import StockOpnameStateMachine
from helpdesk.data.atk.stock_opname import StockOpnameItem
from helpdesk.logger import get_logger
from helpdesk.presentation.routes.form_utils import flash_result, form_int, form_text, staff_required
from helpdesk.services.atk.stock_opname_service import StockOpnameService

bp = Blueprint('stock_opname', __name__)
logger = get_logger("helpdesk.routes.stock_opname")


@bp.route('/stock-opname')
@login_required
@staff_required
def list():
    page = request.args.get('page', 1, type=int)
    sessions = StockOpnameService.get_list_data(request=request, page=page, per_page=20)
    return render_template('atk/stock_opname/list.html',
                           sessions=sessions,
                           statuses=(StockOpnameStateMachine.DRAFT,
                                     StockOpnameStateMachine.IN_PROGRESS,
                                     StockOpnameStateMachine.COMPLETED,
                                     StockOpnameStateMachine.CANCELLED))


@bp.route('/stock-opname/create', methods=['POST'])
@login_required
@staff_required
def create():
    result = StockOpnameManager(current_user.id).create_session(form_text(request.form, 'notes'))
    if flash_result(result, 'Stock opname started'):
        return redirect(url_for('stock_opname.detail', session_id=result.id))
    return redirect(url_for('stock_opname.list'))


@bp.route('/stock-opname/<int:session_id>')
@login_required
@staff_required
def detail(session_id):
    return render_template('atk/stock_opname/detail.html', **StockOpnameService.get_detail_data(session_id))


@bp.route('/stock-opname/items/<int:opname_item_id>/count', methods=['POST'])
@login_required
@staff_required
def count(opname_item_id):
    line = db.get_or_404(StockOpnameItem, opname_item_id)
    result = StockOpnameManager(current_user.id).record_count(
        opname_item_id,
        physical_quantity=form_int(request.form, 'physical_quantity', -1),
        notes=form_text(request.form, 'notes'),
    )
    flash_result(result, 'Count recorded')
    return redirect(url_for('stock_opname.detail', session_id=line.session_id))


@bp.route('/stock-opname/<int:session_id>/complete', methods=['POST'])
@login_required
@staff_required
def complete(session_id):
    result = StockOpnameManager(current_user.id).complete_session(session_id)
    flash_result(result, 'Stock opname completed, stock adjusted')
    return redirect(url_for('stock_opname.detail', session_id=session_id))


@bp.route('/stock-opname/<int:session_id>/cancel', methods=['POST'])
@login_required
@staff_required
def cancel(session_id):
    result = StockOpnameManager(current_user.id).cancel_session(session_id)
    flash_result(result, 'Stock opname cancelled')
    return redirect(url_for('stock_opname.detail', session_id=session_id))


@bp.route('/stock-opname/<int:session_id>/delete', methods=['POST'])
@login_required
@staff_required
def delete(session_id):
    result = StockOpnameManager(current_user.id).delete_session(session_id)
    flash_result(result, 'Stock opname deleted')
    return redirect(url_for('stock_opname.list'))
