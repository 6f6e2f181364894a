"""
Route decorators for authentication and authorization.
Provides role-based access control for routes.
"""

from functools import wraps

from flask import jsonify
from flask_login import login_required, current_user


def role_required(*roles: str):
    """
    Decorator to require one of the given principal roles for a route.
    Admins pass every role check.

    Usage:
        @bp.route('/reservations')
        @login_required
        @role_required('clerk', 'manager')
        def list_reservations_view():
            ...

    Args:
        roles: Accepted roles (e.g. 'clerk', 'customer')

    Returns:
        Decorator function
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            role = getattr(current_user, 'role', None)
            if role != 'admin' and role not in roles:
                return jsonify({
                    'success': False,
                    'error': 'You do not have permission to perform this action'
                }), 403

            return func(*args, **kwargs)
        return wrapper
    return decorator


# Re-export login_required for convenience
__all__ = ['login_required', 'role_required']
