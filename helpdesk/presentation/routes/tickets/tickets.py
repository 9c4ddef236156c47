"""
Ticket routes
Report problems, assign them to technicians (manually or to the least busy
one) and resolve them with the spareparts used
"""

from flask import Blueprint, render_template, redirect, url_for, flash, request
from flask_login import login_required, current_user

from helpdesk import db
from helpdesk.business.tickets.ticket_manager import PartLine, TicketInput, TicketManager
from helpdesk.data.assets.asset_maintenance import AssetMaintenance
from helpdesk.data.atk.atk_item import AtkItem
from helpdesk.data.tickets.ticket import Ticket
from helpdesk.logger import get_logger
from helpdesk.presentation.routes.form_utils import (
    flash_result, form_int, form_lines, form_text, staff_required, to_int,
)
from helpdesk.services.assets.asset_service import AssetService
from helpdesk.services.atk.item_service import ItemService
from helpdesk.services.core.master_service import MasterDataService
from helpdesk.services.core.user_service import UserService
from helpdesk.services.tickets.ticket_service import TicketService

bp = Blueprint('tickets', __name__)
logger = get_logger("helpdesk.routes.tickets")


def _can_view(ticket):
    return current_user.is_staff or ticket.created_by_id == current_user.id


@bp.route('/')
@login_required
def list():
    """All tickets for staff, own tickets for everyone else"""
    page = request.args.get('page', 1, type=int)
    created_by_id = None if current_user.is_staff else current_user.id

    tickets, extra = TicketService.get_list_data(request=request, page=page, per_page=20,
                                                 created_by_id=created_by_id)

    return render_template('tickets/tickets/list.html',
                           tickets=tickets,
                           status_counts=extra['status_counts'],
                           statuses=Ticket.STATUSES,
                           categories=Ticket.CATEGORIES,
                           priorities=Ticket.PRIORITIES,
                           technicians=UserService.technicians())


@bp.route('/create', methods=['GET', 'POST'])
@login_required
def create():
    if request.method == 'POST':
        form = request.form
        data = TicketInput(
            title=form_text(form, 'title') or '',
            category=form_text(form, 'category') or '',
            priority=form_text(form, 'priority') or 'medium',
            description=form_text(form, 'description'),
            department_id=form_int(form, 'department_id'),
            asset_id=form_int(form, 'asset_id'),
        )
        result = TicketManager(current_user.id).create_ticket(data, auto_assign=form.get('auto_assign') == 'on')
        if flash_result(result, 'Ticket created successfully'):
            return redirect(url_for('tickets.detail', ticket_id=result.id))

    return render_template('tickets/tickets/form.html',
                           ticket=None,
                           form=request.form,
                           categories=Ticket.CATEGORIES,
                           priorities=Ticket.PRIORITIES,
                           assets=AssetService.all_assets(),
                           departments=MasterDataService.options()['departments'])


@bp.route('/<int:ticket_id>')
@login_required
def detail(ticket_id):
    data = TicketService.get_detail_data(ticket_id)
    if not _can_view(data['ticket']):
        flash('You can only view your own tickets', 'error')
        return redirect(url_for('tickets.list'))

    return render_template('tickets/tickets/detail.html',
                           statuses=Ticket.STATUSES,
                           categories=Ticket.CATEGORIES,
                           priorities=Ticket.PRIORITIES,
                           technicians=UserService.technicians(),
                           assets=AssetService.all_assets(),
                           spareparts=ItemService.all_items(AtkItem.TYPE_SPAREPART),
                           repair_types=AssetMaintenance.TYPES,
                           **data)


@bp.route('/<int:ticket_id>/edit', methods=['POST'])
@login_required
@staff_required
def edit(ticket_id):
    form = request.form
    changes = {
        'title': form_text(form, 'title'),
        'description': form_text(form, 'description'),
        'category': form_text(form, 'category'),
        'priority': form_text(form, 'priority'),
        'status': form_text(form, 'status'),
    }
    if 'asset_id' in form:
        changes['asset_id'] = form_int(form, 'asset_id')

    result = TicketManager(current_user.id).update_ticket(ticket_id, changes)
    flash_result(result, 'Ticket updated')
    return redirect(url_for('tickets.detail', ticket_id=ticket_id))


@bp.route('/<int:ticket_id>/assign', methods=['POST'])
@login_required
@staff_required
def assign(ticket_id):
    assignee_id = form_int(request.form, 'assigned_to_id')
    if not assignee_id:
        flash('Select a technician', 'error')
        return redirect(url_for('tickets.detail', ticket_id=ticket_id))

    result = TicketManager(current_user.id).assign_ticket(ticket_id, assignee_id)
    flash_result(result, 'Ticket assigned')
    return redirect(url_for('tickets.detail', ticket_id=ticket_id))


@bp.route('/<int:ticket_id>/complete', methods=['POST'])
@login_required
@staff_required
def complete(ticket_id):
    form = request.form
    parts = [
        PartLine(item_id=to_int(row['item_id']), quantity=to_int(row['quantity']))
        for row in form_lines(form, 'item_id', 'quantity')
    ]
    result = TicketManager(current_user.id).complete_ticket(
        ticket_id,
        resolution_notes=form_text(form, 'resolution_notes'),
        repair_type=form_text(form, 'repair_type'),
        asset_id=form_int(form, 'asset_id'),
        parts=parts,
    )
    flash_result(result, 'Ticket resolved')
    return redirect(url_for('tickets.detail', ticket_id=ticket_id))


@bp.route('/<int:ticket_id>/delete', methods=['POST'])
@login_required
def delete(ticket_id):
    ticket = db.get_or_404(Ticket, ticket_id)
    if not current_user.is_staff and ticket.created_by_id != current_user.id:
        flash('You can only delete your own tickets', 'error')
        return redirect(url_for('tickets.list'))

    result = TicketManager(current_user.id).delete_ticket(ticket_id)
    if flash_result(result, 'Ticket deleted'):
        return redirect(url_for('tickets.list'))
    return redirect(url_for('tickets.detail', ticket_id=ticket_id))
