"""
Public asset page, the target of the QR label stuck on each asset.
Shows identification and whereabouts only; price, serial number and notes
stay behind the login.
"""

from flask import Blueprint, render_template

from helpdesk import db
from helpdesk.data.assets.asset import Asset

bp = Blueprint('public_assets', __name__)


@bp.route('/assets/<int:asset_id>')
def detail(asset_id):
    asset = db.get_or_404(Asset, asset_id)
    return render_template('public/asset.html', asset=asset)
