"""
Master data routes
Departments, locations and asset categories share one set of list / create /
edit / delete views; each gets its own blueprint.
"""

from flask import Blueprint, render_template, redirect, url_for, request
from flask_login import login_required, current_user

from helpdesk import db
from helpdesk.business.core.master_manager import CategoryManager, DepartmentManager, LocationManager
from helpdesk.logger import get_logger
from helpdesk.presentation.routes.form_utils import flash_result, form_text, staff_required
from helpdesk.services.core.master_service import MasterDataService

logger = get_logger("helpdesk.routes.master")


def make_master_blueprint(name, url_path, manager_class, title, extra_fields=()):
    """
    Build the blueprint for one master data table.

    Args:
        name: Blueprint name, also the template context label
        url_path: URL segment, e.g. 'departments'
        manager_class: MasterDataManager subclass doing the writes
        title: Human readable plural for the page heading
        extra_fields: Form fields beyond name/description
    """
    bp = Blueprint(name, __name__)
    model = manager_class.model
    fields = ('name', 'description') + tuple(extra_fields)

    def form_data():
        return {field: form_text(request.form, field) for field in fields}

    def render_list(edit_record=None):
        page = request.args.get('page', 1, type=int)
        records, counts = MasterDataService.get_list_data(model, request, page=page, per_page=20)
        return render_template('core/master/list.html',
                               records=records,
                               counts=counts,
                               edit_record=edit_record,
                               fields=fields,
                               title=title,
                               endpoint=name)

    @bp.route(f'/{url_path}')
    @login_required
    def list():
        return render_list()

    @bp.route(f'/{url_path}/create', methods=['POST'])
    @login_required
    @staff_required
    def create():
        result = manager_class(current_user.id).create(form_data())
        flash_result(result, f'{manager_class.label.capitalize()} created successfully')
        return redirect(url_for(f'{name}.list'))

    @bp.route(f'/{url_path}/<int:record_id>/edit', methods=['GET', 'POST'])
    @login_required
    @staff_required
    def edit(record_id):
        record = db.get_or_404(model, record_id)
        if request.method == 'POST':
            result = manager_class(current_user.id).update(record.id, form_data())
            if flash_result(result, f'{manager_class.label.capitalize()} updated successfully'):
                return redirect(url_for(f'{name}.list'))
        return render_list(edit_record=record)

    @bp.route(f'/{url_path}/<int:record_id>/delete', methods=['POST'])
    @login_required
    @staff_required
    def delete(record_id):
        result = manager_class(current_user.id).delete(record_id)
        flash_result(result, f'{manager_class.label.capitalize()} deleted successfully')
        return redirect(url_for(f'{name}.list'))

    return bp


departments_bp = make_master_blueprint('departments', 'departments', DepartmentManager, 'Departments')
locations_bp = make_master_blueprint('locations', 'locations', LocationManager, 'Locations')
categories_bp = make_master_blueprint('categories', 'categories', CategoryManager, 'Asset Categories',
                                      extra_fields=('prefix',))
