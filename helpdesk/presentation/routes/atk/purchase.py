"""
ATK purchase request routes
Draft, edit, submit and fulfil purchase requests; fulfilment adds every line
to stock and keeps a photo of the received goods
"""

from flask import Blueprint, render_template, redirect, url_for, flash, request
from flask_login import login_required, current_user

from helpdesk import db
from helpdesk.business.atk.purchase_manager import PurchaseLine, PurchaseManager
from helpdesk.business.core.state_machine import PurchaseStateMachine
from helpdesk.data.atk.atk_purchase import AtkPurchaseRequest
from helpdesk.logger import get_logger
from helpdesk.presentation.routes.form_utils import (
    flash_result, form_lines, form_text, staff_required, to_float, to_int,
)
from helpdesk.services.atk.item_service import ItemService
from helpdesk.services.atk.purchase_service import PurchaseService

bp = Blueprint('purchase', __name__)
logger = get_logger("helpdesk.routes.purchase")


def _lines(form):
    return [
        PurchaseLine(item_id=to_int(row['item_id']),
                     quantity=to_int(row['quantity']),
                     unit_price=to_float(row['unit_price']))
        for row in form_lines(form, 'item_id', 'quantity', 'unit_price')
    ]


def _render_form(purchase=None):
    return render_template('atk/purchase/form.html',
                           purchase=purchase,
                           form=request.form,
                           items=ItemService.all_items())


@bp.route('/purchase')
@login_required
@staff_required
def list():
    page = request.args.get('page', 1, type=int)
    purchases = PurchaseService.get_list_data(request=request, page=page, per_page=20)
    return render_template('atk/purchase/list.html',
                           purchases=purchases,
                           statuses=(PurchaseStateMachine.DRAFT,
                                     PurchaseStateMachine.PROCESS,
                                     PurchaseStateMachine.SUCCESS))


@bp.route('/purchase/create', methods=['GET', 'POST'])
@login_required
@staff_required
def create():
    if request.method == 'POST':
        result = PurchaseManager(current_user.id).create_purchase_request(
            title=form_text(request.form, 'title'),
            lines=_lines(request.form),
            notes=form_text(request.form, 'notes'),
        )
        if flash_result(result, 'Purchase request created'):
            return redirect(url_for('purchase.detail', purchase_id=result.id))
    return _render_form()


@bp.route('/purchase/<int:purchase_id>')
@login_required
@staff_required
def detail(purchase_id):
    return render_template('atk/purchase/detail.html', **PurchaseService.get_detail_data(purchase_id))


@bp.route('/purchase/<int:purchase_id>/edit', methods=['GET', 'POST'])
@login_required
@staff_required
def edit(purchase_id):
    purchase = db.get_or_404(AtkPurchaseRequest, purchase_id)
    if request.method == 'POST':
        result = PurchaseManager(current_user.id).update_purchase_request(
            purchase_id,
            title=form_text(request.form, 'title'),
            lines=_lines(request.form),
            notes=form_text(request.form, 'notes'),
        )
        if flash_result(result, 'Purchase request updated'):
            return redirect(url_for('purchase.detail', purchase_id=purchase_id))
    return _render_form(purchase)


@bp.route('/purchase/<int:purchase_id>/submit', methods=['POST'])
@login_required
@staff_required
def submit(purchase_id):
    result = PurchaseManager(current_user.id).submit_purchase_request(purchase_id)
    flash_result(result, 'Purchase request submitted for processing')
    return redirect(url_for('purchase.detail', purchase_id=purchase_id))


@bp.route('/purchase/<int:purchase_id>/success', methods=['POST'])
@login_required
@staff_required
def mark_success(purchase_id):
    """photo_data is the receipt photo as a data URL, filled in by the browser"""
    photo_data = request.form.get('photo_data') or ''
    if not photo_data:
        flash('A photo of the received goods is required', 'error')
        return redirect(url_for('purchase.detail', purchase_id=purchase_id))

    result = PurchaseManager(current_user.id).mark_purchase_success(purchase_id, photo_data)
    flash_result(result, 'Purchase completed, stock updated')
    return redirect(url_for('purchase.detail', purchase_id=purchase_id))


@bp.route('/purchase/<int:purchase_id>/delete', methods=['POST'])
@login_required
@staff_required
def delete(purchase_id):
    result = PurchaseManager(current_user.id).delete_purchase_request(purchase_id)
    if flash_result(result, 'Purchase request deleted'):
        return redirect(url_for('purchase.list'))
    return redirect(url_for('purchase.detail', purchase_id=purchase_id))
