from functools import wraps
from flask import jsonify, request
from flask_login import current_user

from eventquiz.security import SecurityLogger


def admin_required(f):
    """Decorator to require the admin role for an API route."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            return jsonify({
                'success': False,
                'error': 'Please sign in to continue',
                'reason': 'auth_required',
            }), 401
        if not current_user.is_admin():
            SecurityLogger.log_unauthorized_access(request.path, current_user.id)
            return jsonify({
                'success': False,
                'error': 'Administrator access required',
                'reason': 'forbidden',
            }), 403
        return f(*args, **kwargs)
    return decorated_function
