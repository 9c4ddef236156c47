"""
ATK request routes
Employees request items; IT staff approve (possibly fewer than requested),
reject, or complete the handover with the requester's signature. The SPB
document is printed from the request.
"""

from flask import Blueprint, render_template, redirect, url_for, flash, request
from flask_login import login_required, current_user

from helpdesk.business.atk.request_manager import RequestLine, RequestManager
from helpdesk.business.core.state_machine import AtkRequestStateMachine
from helpdesk.logger import get_logger
from helpdesk.presentation.routes.form_utils import (
    flash_result, form_lines, form_text, staff_required, to_int,
)
from helpdesk.services.atk.item_service import ItemService
from helpdesk.services.atk.request_service import RequestService
from helpdesk.services.core.master_service import MasterDataService

bp = Blueprint('item_requests', __name__)
logger = get_logger("helpdesk.routes.item_requests")

STATUSES = (
    AtkRequestStateMachine.PENDING,
    AtkRequestStateMachine.APPROVED,
    AtkRequestStateMachine.REJECTED,
    AtkRequestStateMachine.COMPLETED,
)


@bp.route('/requests')
@login_required
def list():
    """All requests for staff, own requests for everyone else"""
    page = request.args.get('page', 1, type=int)
    requester_id = None if current_user.is_staff else current_user.id

    requests_page = RequestService.get_list_data(request=request, page=page, per_page=20,
                                                 requester_id=requester_id)
    return render_template('atk/requests/list.html',
                           atk_requests=requests_page,
                           statuses=STATUSES,
                           departments=MasterDataService.options()['departments'])


@bp.route('/requests/create', methods=['GET', 'POST'])
@login_required
def create():
    if request.method == 'POST':
        lines = [
            RequestLine(item_id=to_int(row['item_id']), quantity=to_int(row['quantity']))
            for row in form_lines(request.form, 'item_id', 'quantity')
        ]
        result = RequestManager(current_user.id).create_request(lines, notes=form_text(request.form, 'notes'))
        if flash_result(result, 'Request submitted'):
            return redirect(url_for('item_requests.detail', request_id=result.id))
    return render_template('atk/requests/form.html',
                           form=request.form,
                           items=ItemService.all_items())


@bp.route('/requests/<int:request_id>')
@login_required
def detail(request_id):
    data = RequestService.get_detail_data(request_id)
    if not current_user.is_staff and data['atk_request'].requester_id != current_user.id:
        flash('You can only view your own requests', 'error')
        return redirect(url_for('item_requests.list'))
    return render_template('atk/requests/detail.html', **data)


@bp.route('/requests/<int:request_id>/approve', methods=['POST'])
@login_required
@staff_required
def approve(request_id):
    """Approved quantities arrive as approved_<item_id> fields"""
    approved = {}
    for key, value in request.form.items():
        if key.startswith('approved_') and value.strip():
            approved[to_int(key[len('approved_'):])] = to_int(value, -1)

    result = RequestManager(current_user.id).approve_request(request_id, approved)
    flash_result(result, 'Request approved')
    return redirect(url_for('item_requests.detail', request_id=request_id))


@bp.route('/requests/<int:request_id>/reject', methods=['POST'])
@login_required
@staff_required
def reject(request_id):
    result = RequestManager(current_user.id).reject_request(request_id, form_text(request.form, 'reason'))
    flash_result(result, 'Request rejected')
    return redirect(url_for('item_requests.detail', request_id=request_id))


@bp.route('/requests/<int:request_id>/complete', methods=['POST'])
@login_required
@staff_required
def complete(request_id):
    signature_data = request.form.get('signature_data') or ''
    if not signature_data:
        flash('Signature is required', 'error')
        return redirect(url_for('item_requests.detail', request_id=request_id))

    result = RequestManager(current_user.id).complete_request(request_id, signature_data)
    flash_result(result, 'Request completed, items handed over')
    return redirect(url_for('item_requests.detail', request_id=request_id))


@bp.route('/requests/<int:request_id>/delete', methods=['POST'])
@login_required
def delete(request_id):
    data = RequestService.get_detail_data(request_id)
    if not current_user.is_staff and data['atk_request'].requester_id != current_user.id:
        flash('You can only delete your own requests', 'error')
        return redirect(url_for('item_requests.list'))

    result = RequestManager(current_user.id).delete_request(request_id)
    if flash_result(result, 'Request deleted'):
        return redirect(url_for('item_requests.list'))
    return redirect(url_for('item_requests.detail', request_id=request_id))


@bp.route('/requests/<int:request_id>/document')
@login_required
@staff_required
def document(request_id):
    """Printable SPB; the document number is assigned on first print"""
    result = RequestManager(current_user.id).generate_document_number_for_print(request_id)
    if not result.success:
        flash(result.error, 'error')
        return redirect(url_for('item_requests.list'))
    return render_template('atk/requests/document.html', **RequestService.get_detail_data(request_id))
