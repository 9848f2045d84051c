"""Middleware for acting-user context and role checks."""
from functools import wraps
from flask import session, g, jsonify, current_app
from pos_backend.database import get_session
from pos_backend.models import AppUser


def load_current_user():
    """
    Load the acting user into g (Flask's per-request global).

    The login flow stores user_id in the signed session cookie; here we only
    resolve it against active users. Sets g.user and g.user_id.
    """
    g.user = None
    g.user_id = None

    user_id = session.get('user_id')
    if not user_id:
        return

    try:
        user = get_session().query(AppUser).filter_by(id=user_id, active=True).first()
    except Exception as e:
        current_app.logger.error(f"Error in load_current_user: {e}")
        raise

    if user:
        g.user = user
        g.user_id = user.id
    else:
        session.pop('user_id', None)


def require_roles(*roles):
    """
    Decorator: require an authenticated user with one of the given roles.

    Responds 401 without a user and 403 when the role is not allowed.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if g.get('user') is None:
                return jsonify({'error': 'Acceso denegado: sesión no iniciada'}), 401
            if roles and g.user.role not in roles:
                return jsonify({
                    'error': f"No tienes permisos suficientes. Se requiere rol: {' o '.join(roles)}"
                }), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator
