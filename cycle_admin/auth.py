from flask import Blueprint, redirect, url_for, flash, request, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from urllib.parse import urlparse
from cycle_admin import limiter
from cycle_admin.data.core.user import User
from cycle_admin.logger import get_logger

logger = get_logger("cycle_admin.auth")
auth = Blueprint('auth', __name__)


def _credentials():
    if request.is_json:
        payload = request.get_json(silent=True) or {}
        return payload.get('username'), payload.get('password')
    return request.form.get('username'), request.form.get('password')


@auth.route('/login', methods=['GET', 'POST'])
@limiter.limit("20 per minute", methods=['POST'])
def login():
    if current_user.is_authenticated:
        logger.debug(f"User {current_user.username} already authenticated")
        return redirect(url_for('admin_order_cycles.index'))

    if request.method == 'GET':
        return jsonify({'error': 'Please log in to access this page.'}), 401

    username, password = _credentials()
    logger.debug(f"Login attempt for username: {username}")

    if not username or not password:
        logger.warning(f"Login attempt with missing credentials for username: {username}")
        return jsonify({'error': 'Please enter both username and password'}), 400

    user = User.query.filter_by(username=username).first()

    if user is None or not user.check_password(password):
        logger.warning(f"Failed login attempt for username: {username}")
        return jsonify({'error': 'Invalid username or password'}), 401

    if not user.is_active:
        logger.warning(f"Login attempt for disabled account: {username}")
        return jsonify({'error': 'Account is disabled'}), 403

    login_user(user)
    logger.info(f"Successful login for user: {username}")

    next_page = request.args.get('next')
    if not next_page or urlparse(next_page).netloc != '':
        next_page = url_for('admin_order_cycles.index')

    flash(f'Welcome, {user.username}!', 'success')
    return redirect(next_page)


@auth.route('/logout')
@login_required
def logout():
    username = current_user.username
    logout_user()
    logger.info(f"User logged out: {username}")
    flash('You have been logged out', 'info')
    return redirect(url_for('auth.login'))
