"""
ATK usage report for a date range
"""

from flask import Blueprint, render_template, request
from flask_login import login_required

from helpdesk.presentation.routes.form_utils import staff_required
from helpdesk.services.atk.report_service import AtkReportService
from helpdesk.services.core.filters import date_range_from_request

bp = Blueprint('atk_reports', __name__)


@bp.route('/reports')
@login_required
@staff_required
def index():
    start, end = date_range_from_request(request)
    report = AtkReportService.usage_report(start, end)

    return render_template('atk/reports/index.html',
                           start_date=start,
                           end_date=end,
                           report=report)
