"""
Asset reports
Summary counts, distributions, maintenance cost, borrowing statistics and
the refresh cycle of assets nearing the end of their useful life
"""

from flask import Blueprint, render_template, request
from flask_login import login_required

from helpdesk.presentation.routes.form_utils import staff_required
from helpdesk.services.assets.report_service import AssetReportService
from helpdesk.services.core.filters import date_range_from_request

bp = Blueprint('asset_reports', __name__)


@bp.route('/reports')
@login_required
@staff_required
def index():
    start, end = date_range_from_request(request)

    return render_template('assets/reports/index.html',
                           start_date=start,
                           end_date=end,
                           summary=AssetReportService.summary(),
                           distributions=AssetReportService.distribution_report(start, end),
                           maintenance_cost=AssetReportService.maintenance_cost(),
                           borrowing_stats=AssetReportService.borrowing_stats(),
                           refresh_cycle=AssetReportService.refresh_cycle())
