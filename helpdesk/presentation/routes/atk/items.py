"""
ATK item routes
Items and spareparts, manual stock in/out with the stock ledger, and the
low stock list
"""

from flask import Blueprint, render_template, redirect, url_for, request
from flask_login import login_required, current_user

from helpdesk import db
from helpdesk.business.atk.item_manager import ItemManager, low_stock_items
from helpdesk.data.atk.atk_item import AtkItem
from helpdesk.data.atk.atk_stock_history import AtkStockHistory
from helpdesk.logger import get_logger
from helpdesk.presentation.routes.form_utils import (
    flash_result, form_float, form_int, form_text, safe_next, staff_required,
)
from helpdesk.services.atk.item_service import ItemService

bp = Blueprint('items', __name__)
logger = get_logger("helpdesk.routes.items")


def _item_form_data(form):
    return {
        'type': form_text(form, 'type'),
        'name': form_text(form, 'name'),
        'description': form_text(form, 'description'),
        'unit': form_text(form, 'unit'),
        'price': form_float(form, 'price', 0),
        'min_stock': form_int(form, 'min_stock'),
        'lead_time_days': form_int(form, 'lead_time_days'),
        'stock_quantity': form_int(form, 'stock_quantity', 0),
    }


def _save(item=None):
    manager = ItemManager(current_user.id)
    data = _item_form_data(request.form)

    upload = request.files.get('image')
    if upload is not None and upload.filename:
        uploaded = manager.upload_item_image(upload)
        if not uploaded.success:
            return uploaded
        data['image_url'] = uploaded.url
    elif item is not None:
        data['image_url'] = item.image_url

    if item is None:
        return manager.create_item(data)
    return manager.update_item(item.id, data)


@bp.route('/items')
@login_required
def list():
    page = request.args.get('page', 1, type=int)
    items = ItemService.get_list_data(request=request, page=page, per_page=20)
    return render_template('atk/items/list.html', items=items, types=AtkItem.TYPES)


@bp.route('/items/create', methods=['GET', 'POST'])
@login_required
@staff_required
def create():
    if request.method == 'POST':
        if flash_result(_save(), 'Item created successfully'):
            return redirect(url_for('items.list'))
    return render_template('atk/items/form.html', item=None, form=request.form, types=AtkItem.TYPES)


@bp.route('/items/<int:item_id>/edit', methods=['GET', 'POST'])
@login_required
@staff_required
def edit(item_id):
    item = db.get_or_404(AtkItem, item_id)
    if request.method == 'POST':
        if flash_result(_save(item), 'Item updated successfully'):
            return redirect(url_for('items.list'))
    return render_template('atk/items/form.html', item=item, form=request.form, types=AtkItem.TYPES)


@bp.route('/items/<int:item_id>/delete', methods=['POST'])
@login_required
@staff_required
def delete(item_id):
    result = ItemManager(current_user.id).delete_item(item_id)
    flash_result(result, 'Item deleted successfully')
    return redirect(url_for('items.list'))


def _movement_page(movement_type, template):
    page = request.args.get('page', 1, type=int)
    history = ItemService.get_history_data(request=request, movement_type=movement_type,
                                           page=page, per_page=20)
    return render_template(template, history=history, items=ItemService.all_items())


@bp.route('/stock-in', methods=['GET', 'POST'])
@login_required
@staff_required
def stock_in():
    """Record goods received outside a purchase request"""
    if request.method == 'POST':
        result = ItemManager(current_user.id).stock_in(
            item_id=form_int(request.form, 'item_id'),
            quantity=form_int(request.form, 'quantity', 0),
            notes=form_text(request.form, 'notes'),
        )
        flash_result(result, 'Stock added')
        return redirect(safe_next(request.form.get('next'), url_for('items.stock_in')))
    return _movement_page(AtkStockHistory.TYPE_IN, 'atk/items/stock_in.html')


@bp.route('/stock-out', methods=['GET', 'POST'])
@login_required
@staff_required
def stock_out():
    """Record items used outside a request or a ticket"""
    if request.method == 'POST':
        result = ItemManager(current_user.id).stock_out(
            item_id=form_int(request.form, 'item_id'),
            quantity=form_int(request.form, 'quantity', 0),
            notes=form_text(request.form, 'notes'),
        )
        flash_result(result, 'Stock removed')
        return redirect(safe_next(request.form.get('next'), url_for('items.stock_out')))
    return _movement_page(AtkStockHistory.TYPE_OUT, 'atk/items/stock_out.html')


@bp.route('/low-stock')
@login_required
@staff_required
def low_stock():
    return render_template('atk/items/low_stock.html', items=low_stock_items())
