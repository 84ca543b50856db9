"""
Admin Dashboard Routes
======================

Admin accounts, the session gate and the project listing.

The admin table lives in USER_DB. The first account can be created by
anyone; after that only a signed-in admin can add more.
"""

import sqlite3
from datetime import datetime

from flask import render_template, request, redirect, url_for, flash, session, jsonify
from werkzeug.security import check_password_hash, generate_password_hash

from folio.core import Database, admin_required, get_config_value, logger as app_logger
from folio.modules.projects.database import ProjectStore
from folio.modules.projects.errors import LoadFailure
from . import dashboard_bp

MIN_PASSWORD_LENGTH = 6


# ===== Admin accounts =====

def _user_db():
    return get_config_value('USER_DB', 'users.db')


def init_admin_table(user_db_path=None):
    """Create the admin table in USER_DB if needed"""
    user_db_path = user_db_path or _user_db()
    Database.ensure_parent_dir(user_db_path)

    with Database.connect(user_db_path) as conn:
        conn.execute('''
            CREATE TABLE IF NOT EXISTS admin (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                email TEXT UNIQUE NOT NULL,
                password_hash TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')
        conn.commit()


def count_admins():
    with Database.connect(_user_db()) as conn:
        return conn.execute('SELECT COUNT(*) FROM admin').fetchone()[0]


def create_admin_user(email, password):
    """Insert an admin account and return its id"""
    with Database.connect(_user_db()) as conn:
        cursor = conn.execute(
            'INSERT INTO admin (email, password_hash) VALUES (?, ?)',
            (email, generate_password_hash(password)),
        )
        conn.commit()
        return cursor.lastrowid


def authenticate_admin(email, password):
    """(id, email) for valid credentials, else None"""
    with Database.connect(_user_db()) as conn:
        row = conn.execute(
            'SELECT id, email, password_hash FROM admin WHERE email = ?', (email,)
        ).fetchone()

    if row and check_password_hash(row[2], password):
        return row[0], row[1]
    return None


def signup_error(email, password, confirm_password):
    """First problem with a create-admin form, or None"""
    if not (email and password and confirm_password):
        return 'All fields are required'
    if password != confirm_password:
        return 'Passwords do not match'
    if len(password) < MIN_PASSWORD_LENGTH:
        return f'Password must be at least {MIN_PASSWORD_LENGTH} characters long'
    return None


def _local_redirect_target(target):
    """Only same-site paths are followed after login"""
    if target and target.startswith('/') and not target.startswith('//'):
        return target
    return url_for('admin.dashboard')


def _email_field():
    return request.form.get('email', '').strip().lower()


# ===== Session =====

@dashboard_bp.route('/login', methods=['GET', 'POST'])
def login():
    """Sign in and continue to ?next= or the project listing"""
    if request.method == 'GET':
        return render_template('dashboard/login.html')

    email = _email_field()
    password = request.form.get('password', '')
    if not email or not password:
        flash('Please enter both email and password', 'error')
        return render_template('dashboard/login.html'), 400

    admin = authenticate_admin(email, password)
    if admin is None:
        app_logger.warning('admin', 'Failed admin login', {'email': email})
        flash('Invalid email or password', 'error')
        return render_template('dashboard/login.html'), 401

    session['admin_id'], session['admin_email'] = admin
    app_logger.log_user_action('admin', 'login', user_id=str(admin[0]))
    flash('Login successful', 'success')
    return redirect(_local_redirect_target(request.args.get('next')))


@dashboard_bp.route('/logout')
def logout():
    session.pop('admin_id', None)
    session.pop('admin_email', None)
    flash('You have been logged out', 'info')
    return redirect(url_for('admin.login'))


@dashboard_bp.route('/status')
def status():
    """Session check for scripts"""
    if 'admin_id' not in session:
        return jsonify({'logged_in': False}), 401
    return jsonify({'logged_in': True, 'admin_email': session.get('admin_email')})


# ===== Pages =====

@dashboard_bp.route('/')
@dashboard_bp.route('/dashboard')
@admin_required
def dashboard():
    """Admin landing page: every project with edit/delete actions"""
    try:
        projects = ProjectStore().list()
    except LoadFailure as e:
        flash(f'Error Loading Projects: {e}', 'error')
        projects = []
    return render_template('dashboard/dashboard.html', projects=projects)


@dashboard_bp.route('/create-admin', methods=['GET', 'POST'])
def create_admin():
    """Open while no admin exists; afterwards admins only"""
    signed_in = 'admin_id' in session
    if not signed_in and count_admins() > 0:
        return redirect(url_for('admin.login'))

    if request.method == 'GET':
        return render_template('dashboard/create_admin.html')

    email = _email_field()
    error = signup_error(email, request.form.get('password', ''),
                         request.form.get('confirm_password', ''))
    if error is None:
        try:
            create_admin_user(email, request.form['password'])
        except sqlite3.IntegrityError:
            error = 'An admin with this email already exists'

    if error:
        flash(error, 'error')
        return render_template('dashboard/create_admin.html'), 400

    app_logger.log_user_action('admin', f'created admin {email}')
    flash(f'Admin {email} created successfully', 'success')
    return redirect(url_for('admin.dashboard' if signed_in else 'admin.login'))


@dashboard_bp.context_processor
def utility_processor():
    return {'current_year': lambda: datetime.now().year}
