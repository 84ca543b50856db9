"""
Admin session gate shared by the admin modules.

The session flag is a UX guard for the admin pages; the JSON endpoints
check it as well so an anonymous client gets a 401 instead of data.
"""

from functools import wraps
from flask import jsonify, redirect, request, session, url_for


def admin_required(f):
    """Decorator to require admin login"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'admin_id' not in session:
            return redirect(url_for('admin.login', next=request.path))
        return f(*args, **kwargs)
    return decorated_function


def admin_api_required(f):
    """Decorator for admin JSON endpoints"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'admin_id' not in session:
            return jsonify({'error': 'Authentication required'}), 401
        return f(*args, **kwargs)
    return decorated_function
