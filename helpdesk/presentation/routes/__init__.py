"""
Routes package for the helpdesk
Organized in a tiered structure mirroring the model organization
"""

from flask import Blueprint
from helpdesk.logger import get_logger

logger = get_logger("helpdesk.routes")

# Create main blueprint
main = Blueprint('main', __name__)

# Import route modules
from . import main_routes  # noqa: E402,F401


def init_app(app):
    """Initialize all route blueprints with the Flask app"""
    logger.debug("Initializing route blueprints")

    # Don't register main again - it's already registered in helpdesk/__init__.py
    from .core import users, master, settings
    app.register_blueprint(users.bp, url_prefix='/master')
    app.register_blueprint(master.departments_bp, url_prefix='/master')
    app.register_blueprint(master.locations_bp, url_prefix='/master')
    app.register_blueprint(master.categories_bp, url_prefix='/assets')
    app.register_blueprint(settings.bp, url_prefix='/settings')

    from .assets import assets, maintenance, borrowing, distribution, reports as asset_reports
    app.register_blueprint(assets.bp, url_prefix='/assets')
    app.register_blueprint(maintenance.bp, url_prefix='/assets')
    app.register_blueprint(borrowing.bp, url_prefix='/assets')
    app.register_blueprint(distribution.bp, url_prefix='/assets')
    app.register_blueprint(asset_reports.bp, url_prefix='/assets')

    from .atk import items, purchase, item_requests, stock_opname, analytics, reports as atk_reports
    app.register_blueprint(items.bp, url_prefix='/atk')
    app.register_blueprint(purchase.bp, url_prefix='/atk')
    app.register_blueprint(item_requests.bp, url_prefix='/atk')
    app.register_blueprint(stock_opname.bp, url_prefix='/atk')
    app.register_blueprint(atk_reports.bp, url_prefix='/atk')
    app.register_blueprint(analytics.bp, url_prefix='/atk')

    from .tickets import tickets, reports as ticket_reports
    app.register_blueprint(tickets.bp, url_prefix='/tickets')
    app.register_blueprint(ticket_reports.bp, url_prefix='/tickets')

    from .api import whatsapp
    app.register_blueprint(whatsapp.bp, url_prefix='/api/whatsapp')

    from .public import assets as public_assets
    app.register_blueprint(public_assets.bp, url_prefix='/public')

    logger.info("All route blueprints registered successfully")
