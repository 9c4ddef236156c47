"""
User management routes
Profiles, avatars and CSV import, all through UserManager
"""

import csv
import io

from flask import Blueprint, render_template, redirect, url_for, flash, request
from flask_login import login_required, current_user

from helpdesk import db
from helpdesk.business.core.user_manager import UserManager
from helpdesk.data.core.user_info.user import User
from helpdesk.logger import get_logger
from helpdesk.presentation.routes.form_utils import admin_required, flash_result, form_int, form_text
from helpdesk.services.core.master_service import MasterDataService
from helpdesk.services.core.user_service import UserService
from helpdesk.utils.logging_sanitizer import sanitize_form_data

bp = Blueprint('users', __name__)
logger = get_logger("helpdesk.routes.users")

CSV_COLUMNS = ('username', 'email', 'password', 'full_name', 'role', 'whatsapp_phone', 'department')


def _user_form_data(form):
    return {
        'username': form_text(form, 'username'),
        'email': form_text(form, 'email'),
        'password': form.get('password') or '',
        'full_name': form_text(form, 'full_name'),
        'role': form_text(form, 'role'),
        'whatsapp_phone': form_text(form, 'whatsapp_phone'),
        'department_id': form_int(form, 'department_id'),
    }


def _store_avatar(manager, user_id=None):
    """Upload the avatar file if one was posted; returns (ok, url)"""
    upload = request.files.get('avatar')
    if upload is None or not upload.filename:
        return True, None
    result = manager.upload_avatar(upload, user_id)
    if not result.success:
        flash(result.error, 'error')
        return False, None
    return True, result.url


@bp.route('/users')
@login_required
@admin_required
def list():
    """List all users"""
    page = request.args.get('page', 1, type=int)

    users = UserService.get_list_data(request=request, page=page, per_page=20)

    return render_template('core/users/list.html',
                           users=users,
                           roles=User.ROLES,
                           **MasterDataService.options())


@bp.route('/users/create', methods=['GET', 'POST'])
@login_required
@admin_required
def create():
    """Create new user"""
    if request.method == 'POST':
        logger.debug(f"Create user form: {sanitize_form_data(request.form)}")
        manager = UserManager(current_user.id)
        data = _user_form_data(request.form)

        if request.form.get('password') != request.form.get('confirm_password'):
            flash('Passwords do not match', 'error')
            return render_template('core/users/form.html', user=None, roles=User.ROLES,
                                   form=request.form, **MasterDataService.options())

        ok, avatar_url = _store_avatar(manager)
        if ok:
            data['avatar_url'] = avatar_url
            if flash_result(manager.create_user(data), 'User created successfully'):
                return redirect(url_for('users.list'))

    return render_template('core/users/form.html', user=None, roles=User.ROLES,
                           form=request.form, **MasterDataService.options())


@bp.route('/users/<int:user_id>/edit', methods=['GET', 'POST'])
@login_required
@admin_required
def edit(user_id):
    """Edit a user profile"""
    user = db.get_or_404(User, user_id)

    if user.is_system:
        flash('System user cannot be edited', 'error')
        return redirect(url_for('users.list'))

    if request.method == 'POST':
        manager = UserManager(current_user.id)
        data = {
            'full_name': form_text(request.form, 'full_name'),
            'role': form_text(request.form, 'role'),
            'username': form_text(request.form, 'username'),
            'whatsapp_phone': form_text(request.form, 'whatsapp_phone'),
            'department_id': form_int(request.form, 'department_id'),
            'is_active': request.form.get('is_active') == 'on',
        }
        if request.form.get('password'):
            if request.form.get('password') != request.form.get('confirm_password'):
                flash('Passwords do not match', 'error')
                return render_template('core/users/form.html', user=user, roles=User.ROLES,
                                       form=request.form, **MasterDataService.options())
            data['password'] = request.form['password']

        ok, avatar_url = _store_avatar(manager, user.id)
        if ok:
            if avatar_url:
                data['avatar_url'] = avatar_url
            if flash_result(manager.update_user(user.id, data), 'User updated successfully'):
                return redirect(url_for('users.list'))

    return render_template('core/users/form.html', user=user, roles=User.ROLES,
                           form=request.form, **MasterDataService.options())


@bp.route('/users/<int:user_id>/delete', methods=['POST'])
@login_required
@admin_required
def delete(user_id):
    """Delete a user and their avatar"""
    flash_result(UserManager(current_user.id).delete_user(user_id), 'User deleted successfully')
    return redirect(url_for('users.list'))


@bp.route('/users/import', methods=['GET', 'POST'])
@login_required
@admin_required
def import_users():
    """
    Import users from a CSV file with a header row.

    Columns: username, email, password, full_name, role, whatsapp_phone,
    department (name). Unknown roles become 'user'.
    """
    result = None
    if request.method == 'POST':
        upload = request.files.get('file')
        if upload is None or not upload.filename:
            flash('No file selected', 'error')
        elif not upload.filename.lower().endswith('.csv'):
            flash('Only CSV files are allowed', 'error')
        else:
            try:
                text = upload.read().decode('utf-8-sig')
            except UnicodeDecodeError:
                flash('The file must be UTF-8 encoded', 'error')
            else:
                rows = [
                    {key.strip().lower(): (value or '') for key, value in row.items() if key}
                    for row in csv.DictReader(io.StringIO(text))
                ]
                result = UserManager(current_user.id).import_users_batch(rows)
                if result.success:
                    flash(f'{result.imported} users imported', 'success')
                else:
                    flash(f'{result.imported} users imported, {result.failed} failed', 'warning')

    return render_template('core/users/import.html', result=result, columns=CSV_COLUMNS)
