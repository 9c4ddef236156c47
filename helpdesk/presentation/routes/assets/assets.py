"""
Asset inventory routes
List, detail, create, edit and delete assets through AssetManager
"""

from flask import Blueprint, render_template, redirect, url_for, flash, request, jsonify
from flask_login import login_required, current_user

from helpdesk import db
from helpdesk.business.assets.asset_manager import AssetManager, generate_asset_code
from helpdesk.data.assets.asset import Asset
from helpdesk.data.assets.asset_category import AssetCategory
from helpdesk.logger import get_logger
from helpdesk.presentation.routes.form_utils import (
    flash_result, form_date, form_float, form_int, form_text, staff_required,
)
from helpdesk.services.assets.asset_service import AssetService
from helpdesk.services.core.master_service import MasterDataService
from helpdesk.services.core.user_service import UserService

bp = Blueprint('assets', __name__)
logger = get_logger("helpdesk.routes.assets")


def _asset_form_data(form):
    return {
        'asset_code': form_text(form, 'asset_code'),
        'category_id': form_int(form, 'category_id'),
        'name': form_text(form, 'name'),
        'brand': form_text(form, 'brand'),
        'model': form_text(form, 'model'),
        'serial_number': form_text(form, 'serial_number'),
        'purchase_date': form_date(form, 'purchase_date'),
        'purchase_price': form_float(form, 'purchase_price'),
        'warranty_expiry': form_date(form, 'warranty_expiry'),
        'useful_life_years': form_int(form, 'useful_life_years'),
        'status': form_text(form, 'status'),
        'condition': form_text(form, 'condition'),
        'location_id': form_int(form, 'location_id'),
        'department_id': form_int(form, 'department_id'),
        'assigned_to_id': form_int(form, 'assigned_to_id'),
        'is_borrowable': form.get('is_borrowable') == 'on',
        'notes': form_text(form, 'notes'),
    }


def _render_form(asset=None):
    return render_template('assets/assets/form.html',
                           asset=asset,
                           form=request.form,
                           statuses=Asset.STATUSES,
                           conditions=Asset.CONDITIONS,
                           users=UserService.active_users(),
                           **MasterDataService.options())


def _save(asset=None):
    """Shared POST handling of create and edit; returns the ActionResult"""
    manager = AssetManager(current_user.id)
    data = _asset_form_data(request.form)

    upload = request.files.get('image')
    if upload is not None and upload.filename:
        uploaded = manager.upload_asset_image(upload)
        if not uploaded.success:
            return uploaded
        data['image_url'] = uploaded.url
    elif asset is not None:
        data['image_url'] = asset.image_url

    if asset is None:
        return manager.create_asset(data)
    return manager.update_asset(asset.id, data)


@bp.route('/')
@login_required
def list():
    """List assets with search and filters"""
    page = request.args.get('page', 1, type=int)

    assets, extra = AssetService.get_list_data(request=request, page=page, per_page=20)

    return render_template('assets/assets/list.html',
                           assets=assets,
                           depreciation=extra['depreciation'],
                           statuses=Asset.STATUSES,
                           **MasterDataService.options())


@bp.route('/<int:asset_id>')
@login_required
def detail(asset_id):
    """Asset detail with depreciation, maintenance and borrowing history"""
    return render_template('assets/assets/detail.html', **AssetService.get_detail_data(asset_id))


@bp.route('/create', methods=['GET', 'POST'])
@login_required
@staff_required
def create():
    if request.method == 'POST':
        result = _save()
        if flash_result(result, 'Asset created successfully'):
            return redirect(url_for('assets.detail', asset_id=result.id))
    return _render_form()


@bp.route('/<int:asset_id>/edit', methods=['GET', 'POST'])
@login_required
@staff_required
def edit(asset_id):
    asset = db.get_or_404(Asset, asset_id)
    if request.method == 'POST':
        if flash_result(_save(asset), 'Asset updated successfully'):
            return redirect(url_for('assets.detail', asset_id=asset.id))
    return _render_form(asset)


@bp.route('/<int:asset_id>/delete', methods=['POST'])
@login_required
@staff_required
def delete(asset_id):
    result = AssetManager(current_user.id).delete_asset(asset_id)
    if flash_result(result, 'Asset deleted successfully'):
        return redirect(url_for('assets.list'))
    return redirect(url_for('assets.detail', asset_id=asset_id))


@bp.route('/next-code')
@login_required
def next_code():
    """Preview of the code a new asset of the category would receive"""
    category = db.session.get(AssetCategory, request.args.get('category_id', 0, type=int))
    if category is None:
        return jsonify({'error': 'Category not found'}), 404
    return jsonify({'asset_code': generate_asset_code(category.prefix)})


@bp.route('/<int:asset_id>.json')
@login_required
def detail_json(asset_id):
    asset = db.get_or_404(Asset, asset_id)
    return jsonify(asset.to_dict(include_relationships=True))
