"""
Asset borrowing routes
Request, approve/reject, hand over and return borrowed assets
"""

from datetime import date

from flask import Blueprint, render_template, redirect, url_for, request
from flask_login import login_required, current_user

from helpdesk.business.assets.borrowing_manager import BorrowingInput, BorrowingManager
from helpdesk.business.core.state_machine import BorrowingStateMachine
from helpdesk.logger import get_logger
from helpdesk.presentation.routes.form_utils import (
    flash_result, form_date, form_int, form_text, staff_required,
)
from helpdesk.services.assets.asset_service import AssetService
from helpdesk.services.assets.borrowing_service import BorrowingService
from helpdesk.services.core.master_service import MasterDataService
from helpdesk.services.core.user_service import UserService

bp = Blueprint('borrowing', __name__)
logger = get_logger("helpdesk.routes.borrowing")

STATUSES = (
    BorrowingStateMachine.PENDING,
    BorrowingStateMachine.APPROVED,
    BorrowingStateMachine.REJECTED,
    BorrowingStateMachine.BORROWED,
    BorrowingStateMachine.RETURNED,
)


@bp.route('/borrowing')
@login_required
def list():
    """Borrowing list; regular users only see their own requests"""
    page = request.args.get('page', 1, type=int)

    borrower_user_id = None if current_user.is_staff else current_user.id
    borrowings, extra = BorrowingService.get_list_data(request=request, page=page, per_page=20,
                                                       borrower_user_id=borrower_user_id)

    return render_template('assets/borrowing/list.html',
                           borrowings=borrowings,
                           status_counts=extra['status_counts'],
                           statuses=STATUSES,
                           assets=AssetService.borrowable_assets(),
                           users=UserService.active_users(),
                           today=date.today(),
                           **MasterDataService.options())


@bp.route('/borrowing/create', methods=['POST'])
@login_required
def create():
    form = request.form
    borrower_user_id = form_int(form, 'borrower_user_id') if current_user.is_staff else None
    data = BorrowingInput(
        asset_id=form_int(form, 'asset_id'),
        borrower_location_id=form_int(form, 'borrower_location_id'),
        borrower_user_id=borrower_user_id or current_user.id,
        borrow_date=form_date(form, 'borrow_date') or date.today(),
        expected_return_date=form_date(form, 'expected_return_date'),
        purpose=form_text(form, 'purpose') or '',
        notes=form_text(form, 'notes'),
    )
    result = BorrowingManager(current_user.id).create_borrowing_request(data)
    flash_result(result, 'Borrowing request submitted')
    return redirect(url_for('borrowing.list'))


@bp.route('/borrowing/<int:borrowing_id>/approve', methods=['POST'])
@login_required
@staff_required
def approve(borrowing_id):
    result = BorrowingManager(current_user.id).approve_borrowing(borrowing_id)
    flash_result(result, 'Borrowing approved')
    return redirect(url_for('borrowing.list'))


@bp.route('/borrowing/<int:borrowing_id>/reject', methods=['POST'])
@login_required
@staff_required
def reject(borrowing_id):
    result = BorrowingManager(current_user.id).reject_borrowing(borrowing_id, form_text(request.form, 'reason'))
    flash_result(result, 'Borrowing rejected')
    return redirect(url_for('borrowing.list'))


@bp.route('/borrowing/<int:borrowing_id>/borrowed', methods=['POST'])
@login_required
@staff_required
def confirm_borrowed(borrowing_id):
    result = BorrowingManager(current_user.id).confirm_borrowed(borrowing_id)
    flash_result(result, 'Asset handed over to the borrower')
    return redirect(url_for('borrowing.list'))


@bp.route('/borrowing/<int:borrowing_id>/return', methods=['POST'])
@login_required
@staff_required
def return_asset(borrowing_id):
    result = BorrowingManager(current_user.id).return_asset(borrowing_id)
    flash_result(result, 'Asset returned')
    return redirect(url_for('borrowing.list'))


@bp.route('/borrowing/<int:borrowing_id>/delete', methods=['POST'])
@login_required
@staff_required
def delete(borrowing_id):
    result = BorrowingManager(current_user.id).delete_borrowing(borrowing_id)
    flash_result(result, 'Borrowing deleted')
    return redirect(url_for('borrowing.list'))
