"""
Self-service settings: every signed-in user edits their own profile here
"""

from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required

from helpdesk.business.core.user_manager import UserManager
from helpdesk.presentation.routes.form_utils import flash_result, form_text

bp = Blueprint('settings', __name__)


@bp.route('/profile', methods=['GET', 'POST'])
@login_required
def profile():
    if request.method == 'POST':
        manager = UserManager(current_user.id)
        data = {
            'full_name': form_text(request.form, 'full_name'),
            'whatsapp_phone': form_text(request.form, 'whatsapp_phone'),
        }
        if request.form.get('remove_avatar') == 'on':
            data['avatar_url'] = None

        upload = request.files.get('avatar')
        if upload is not None and upload.filename:
            uploaded = manager.upload_avatar(upload, current_user.id)
            if not uploaded.success:
                flash(uploaded.error, 'error')
                return render_template('settings/profile.html', form=request.form)
            data['avatar_url'] = uploaded.url

        if flash_result(manager.update_profile(data), 'Profile updated successfully'):
            return redirect(url_for('settings.profile'))

    return render_template('settings/profile.html', form=request.form)
