from flask import Blueprint, render_template, redirect, url_for, flash, request
from flask_login import login_user, logout_user, login_required, current_user
from helpdesk import limiter
from helpdesk.business.core.user_manager import normalize_username
from helpdesk.data.core.user_info.user import User
from helpdesk.presentation.routes.form_utils import safe_next
from helpdesk.logger import get_logger

logger = get_logger("helpdesk.auth")
auth = Blueprint('auth', __name__)


@auth.route('/login', methods=['GET', 'POST'])
@limiter.limit("10 per minute", methods=['POST'])
def login():
    if current_user.is_authenticated:
        return redirect(url_for('main.index'))

    if request.method == 'POST':
        username = normalize_username(request.form.get('username'))
        password = request.form.get('password')

        logger.debug(f"Login attempt for username: {username}")

        if not username or not password:
            flash('Please enter both username and password', 'error')
            return render_template('auth/login.html')

        user = User.query.filter_by(username=username).first()

        if user is None or not user.check_password(password):
            logger.warning(f"Failed login attempt for username: {username}")
            flash('Invalid username or password', 'error')
            return render_template('auth/login.html')

        if not user.is_active:
            logger.warning(f"Login attempt for disabled account: {username}")
            flash('Account is disabled', 'error')
            return render_template('auth/login.html')

        login_user(user, remember=request.form.get('remember') == 'on')
        logger.info(f"Successful login for user: {username}")

        next_page = safe_next(request.args.get('next'), url_for('main.index'))

        flash(f'Welcome, {user.display_name}!', 'success')
        return redirect(next_page)

    return render_template('auth/login.html')


@auth.route('/logout')
@login_required
def logout():
    username = current_user.username
    logout_user()
    logger.info(f"User logged out: {username}")
    flash('You have been logged out', 'info')
    return redirect(url_for('auth.login'))
