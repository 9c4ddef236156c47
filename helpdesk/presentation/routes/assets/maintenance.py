"""
Asset maintenance routes
"""

from datetime import datetime, time

from flask import Blueprint, render_template, redirect, url_for, request
from flask_login import login_required, current_user

from helpdesk import db
from helpdesk.business.assets.maintenance_manager import MaintenanceManager
from helpdesk.data.assets.asset_maintenance import AssetMaintenance
from helpdesk.presentation.routes.form_utils import (
    flash_result, form_date, form_float, form_int, form_text, safe_next, staff_required,
)
from helpdesk.services.assets.asset_service import AssetService
from helpdesk.services.assets.maintenance_service import MaintenanceService
from helpdesk.services.core.user_service import UserService

bp = Blueprint('maintenance', __name__)


def _form_data(form):
    performed_on = form_date(form, 'performed_at')
    return {
        'asset_id': form_int(form, 'asset_id'),
        'type': form_text(form, 'type'),
        'description': form_text(form, 'description'),
        'cost': form_float(form, 'cost', 0),
        'performed_by_id': form_int(form, 'performed_by_id'),
        'performed_at': datetime.combine(performed_on, time.min) if performed_on else None,
        'next_maintenance': form_date(form, 'next_maintenance'),
        'notes': form_text(form, 'notes'),
    }


def _render_list(edit_record=None):
    page = request.args.get('page', 1, type=int)
    records, extra = MaintenanceService.get_list_data(request=request, page=page, per_page=20)
    return render_template('assets/maintenance/list.html',
                           records=records,
                           total_cost=extra['total_cost'],
                           edit_record=edit_record,
                           types=AssetMaintenance.TYPES,
                           assets=AssetService.all_assets(),
                           technicians=UserService.technicians())


@bp.route('/maintenance')
@login_required
def list():
    return _render_list()


@bp.route('/maintenance/create', methods=['POST'])
@login_required
@staff_required
def create():
    result = MaintenanceManager(current_user.id).create_maintenance(_form_data(request.form))
    flash_result(result, 'Maintenance record created successfully')
    return redirect(safe_next(request.form.get('next'), url_for('maintenance.list')))


@bp.route('/maintenance/<int:maintenance_id>/edit', methods=['GET', 'POST'])
@login_required
@staff_required
def edit(maintenance_id):
    record = db.get_or_404(AssetMaintenance, maintenance_id)
    if request.method == 'POST':
        result = MaintenanceManager(current_user.id).update_maintenance(record.id, _form_data(request.form))
        if flash_result(result, 'Maintenance record updated successfully'):
            return redirect(url_for('maintenance.list'))
    return _render_list(edit_record=record)


@bp.route('/maintenance/<int:maintenance_id>/delete', methods=['POST'])
@login_required
@staff_required
def delete(maintenance_id):
    result = MaintenanceManager(current_user.id).delete_maintenance(maintenance_id)
    flash_result(result, 'Maintenance record deleted successfully')
    return redirect(url_for('maintenance.list'))
