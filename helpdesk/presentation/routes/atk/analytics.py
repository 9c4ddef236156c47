"""
ATK stock analytics: reorder recommendations, restock predictions and
inventory health
"""

from flask import Blueprint, flash, redirect, render_template, url_for
from flask_login import current_user, login_required

from helpdesk.business.atk.item_manager import send_low_stock_alert
from helpdesk.logger import get_logger
from helpdesk.presentation.routes.form_utils import staff_required
from helpdesk.services.atk.stock_analytics_service import (
    PREDICTION_LEAD_TIME_DAYS, StockAnalyticsService,
)

bp = Blueprint('atk_analytics', __name__)
logger = get_logger("helpdesk.routes.atk_analytics")


@bp.route('/reorder')
@login_required
@staff_required
def reorder():
    recommendations = StockAnalyticsService.reorder_recommendations()
    return render_template('atk/analytics/reorder.html',
                           recommendations=recommendations,
                           counts=StockAnalyticsService.priority_counts(recommendations))


@bp.route('/predictions')
@login_required
@staff_required
def predictions():
    return render_template('atk/analytics/predictions.html',
                           predictions=StockAnalyticsService.restock_predictions(),
                           lead_time_days=PREDICTION_LEAD_TIME_DAYS)


@bp.route('/predictions/notify', methods=['POST'])
@login_required
@staff_required
def notify():
    count = send_low_stock_alert(StockAnalyticsService.restock_predictions(), PREDICTION_LEAD_TIME_DAYS)
    logger.info(f"User {current_user.id} requested the low stock alert: {count} items")
    if count:
        flash(f'Low stock alert sent to admins for {count} items', 'success')
    else:
        flash('No item needs restocking within the lead time', 'info')
    return redirect(url_for('atk_analytics.predictions'))


@bp.route('/health')
@login_required
@staff_required
def health():
    return render_template('atk/analytics/health.html',
                           health=StockAnalyticsService.inventory_health())
