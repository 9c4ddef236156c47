"""
Asset distribution routes
Draft a handover of assets to a location and receiver, confirm it with the
receiver's signature and print the SBBK document
"""

from flask import Blueprint, render_template, redirect, url_for, flash, request
from flask_login import login_required, current_user

from helpdesk.business.assets.distribution_manager import DistributionLine, DistributionManager
from helpdesk.business.core.state_machine import DistributionStateMachine
from helpdesk.data.assets.asset_distribution import AssetDistributionItem
from helpdesk.logger import get_logger
from helpdesk.presentation.routes.form_utils import (
    flash_result, form_int, form_lines, form_text, staff_required, to_int,
)
from helpdesk.services.assets.asset_service import AssetService
from helpdesk.services.assets.distribution_service import DistributionService
from helpdesk.services.core.master_service import MasterDataService
from helpdesk.services.core.user_service import UserService

bp = Blueprint('distribution', __name__)
logger = get_logger("helpdesk.routes.distribution")


@bp.route('/distribution')
@login_required
@staff_required
def list():
    page = request.args.get('page', 1, type=int)

    distributions = DistributionService.get_list_data(request=request, page=page, per_page=20)

    return render_template('assets/distribution/list.html',
                           distributions=distributions,
                           statuses=(DistributionStateMachine.DRAFT, DistributionStateMachine.COMPLETED),
                           conditions=AssetDistributionItem.CONDITIONS,
                           assets=AssetService.all_assets(),
                           users=UserService.active_users(),
                           **MasterDataService.options())


@bp.route('/distribution/create', methods=['POST'])
@login_required
@staff_required
def create():
    lines = [
        DistributionLine(asset_id=to_int(row['asset_id']), condition=row['condition'] or 'Baru')
        for row in form_lines(request.form, 'asset_id', 'condition')
    ]
    result = DistributionManager(current_user.id).create_distribution(
        destination_location_id=form_int(request.form, 'destination_location_id'),
        receiver_id=form_int(request.form, 'receiver_id'),
        lines=lines,
        notes=form_text(request.form, 'notes'),
    )
    if flash_result(result, 'Distribution draft created'):
        return redirect(url_for('distribution.detail', distribution_id=result.id))
    return redirect(url_for('distribution.list'))


@bp.route('/distribution/<int:distribution_id>')
@login_required
@staff_required
def detail(distribution_id):
    return render_template('assets/distribution/detail.html',
                           **DistributionService.get_detail_data(distribution_id))


@bp.route('/distribution/<int:distribution_id>/confirm', methods=['POST'])
@login_required
@staff_required
def confirm(distribution_id):
    """Store the receiver's signature, then complete the distribution"""
    manager = DistributionManager(current_user.id)

    upload = request.files.get('signature')
    if upload is None or not upload.filename:
        flash('Receiver signature is required', 'error')
        return redirect(url_for('distribution.detail', distribution_id=distribution_id))

    uploaded = manager.upload_distribution_signature(distribution_id, upload)
    if not flash_result(uploaded, 'Signature uploaded'):
        return redirect(url_for('distribution.detail', distribution_id=distribution_id))

    result = manager.confirm_distribution(distribution_id, uploaded.url)
    flash_result(result, 'Distribution completed, assets moved to the destination')
    return redirect(url_for('distribution.detail', distribution_id=distribution_id))


@bp.route('/distribution/<int:distribution_id>/delete', methods=['POST'])
@login_required
@staff_required
def delete(distribution_id):
    result = DistributionManager(current_user.id).delete_distribution(distribution_id)
    if flash_result(result, 'Distribution deleted'):
        return redirect(url_for('distribution.list'))
    return redirect(url_for('distribution.detail', distribution_id=distribution_id))


@bp.route('/distribution/<int:distribution_id>/document')
@login_required
@staff_required
def document(distribution_id):
    """Printable SBBK; the document number is assigned on first print"""
    result = DistributionManager(current_user.id).generate_document_number_for_print(distribution_id)
    if not result.success:
        flash(result.error, 'error')
        return redirect(url_for('distribution.list'))
    return render_template('assets/distribution/document.html',
                           **DistributionService.get_detail_data(distribution_id))
