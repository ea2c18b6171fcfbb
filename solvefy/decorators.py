from functools import wraps
from flask import current_app, g, request, session
from solvefy import dao
from solvefy.errors import AuthenticationError, AuthorizationError, ValidationError

STAFF_ROLES = ('admin', 'teacher')


def _verify_session():
    """Load the signed-in user (without secrets) from the session, or None."""
    user_id = session.get('user_id')
    if not user_id:
        return None
    user = dao.get_user(user_id)
    if user is None:
        session.pop('user_id', None)
        return None
    return dao.public_user(user)


class CurrentUser:
    """Proxy object providing attribute access to the current user dict."""

    def __init__(self, data=None):
        self._data = data or {}

    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)
        return self._data.get(name)

    def get(self, key, default=None):
        return self._data.get(key, default)

    def to_dict(self):
        return dict(self._data)

    @property
    def is_authenticated(self):
        return bool(self._data)

    @property
    def id(self):
        return self._data.get('id', '')

    @property
    def role(self):
        return self._data.get('role', 'student')


def load_current_user():
    """Load current user into g before each request."""
    if hasattr(g, '_current_user'):
        return
    g._current_user = CurrentUser(_verify_session())


def get_current_user():
    if not hasattr(g, '_current_user'):
        load_current_user()
    return g._current_user


def reset_current_user():
    g.pop('_current_user', None)


def resolve_principal(supplied_user_id=None):
    """Return the id of the user acting on this request.

    A session user always wins; a client-supplied id that disagrees with
    it is rejected. Without a session the supplied id is accepted unless
    REQUIRE_SESSION is set.
    """
    user = get_current_user()
    if user.is_authenticated:
        if supplied_user_id and supplied_user_id != user.id:
            raise AuthorizationError('userId does not match the signed-in user')
        return user.id
    if current_app.config.get('REQUIRE_SESSION'):
        raise AuthenticationError('Login required')
    if not supplied_user_id:
        raise ValidationError(fields=['userId'])
    return supplied_user_id


def _requested_user_id():
    body = request.get_json(silent=True)
    if isinstance(body, dict) and body.get('userId'):
        return str(body['userId'])
    return request.args.get('userId')


def auth_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        user = get_current_user()
        if not user.is_authenticated:
            raise AuthenticationError('Login required')
        g.current_user = user
        return f(*args, **kwargs)
    return decorated


def role_required(*roles):
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            user_id = resolve_principal(_requested_user_id())
            user = dao.get_user(user_id)
            if user is None:
                raise AuthorizationError('Unknown user')
            if user.get('role') not in roles:
                raise AuthorizationError('You do not have permission to do this')
            g.principal_id = user_id
            return f(*args, **kwargs)
        return decorated
    return decorator
