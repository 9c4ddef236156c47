"""
Main routes for the helpdesk
Dashboard and uploaded file serving
"""

from flask import current_app, render_template, send_from_directory
from flask_login import login_required

from helpdesk.services.core.dashboard_service import DashboardService

# Import the main blueprint from the package
from . import main


@main.route('/')
@login_required
def index():
    """Home page with headline counts and recent tickets"""
    return render_template('index.html', **DashboardService.get_dashboard_data())


@main.route('/uploads/<path:filename>')
@login_required
def uploaded_file(filename):
    """Serve images, signatures and receipt photos stored by the file store"""
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)
