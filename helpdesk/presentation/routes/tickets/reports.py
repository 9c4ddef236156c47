"""
Ticket report for a date range
"""

from flask import Blueprint, render_template, request
from flask_login import login_required

from helpdesk.presentation.routes.form_utils import staff_required
from helpdesk.services.core.filters import date_range_from_request
from helpdesk.services.tickets.report_service import TicketReportService

bp = Blueprint('ticket_reports', __name__)


@bp.route('/reports')
@login_required
@staff_required
def index():
    start, end = date_range_from_request(request)

    return render_template('tickets/reports/index.html',
                           start_date=start,
                           end_date=end,
                           report=TicketReportService.report(start, end))
