from functools import wraps
from flask import request, redirect, url_for, flash, g, session, current_app

SESSION_KEY = 'firebase_session'


def get_store():
    return current_app.extensions['studyhub.store']


def _verify_session():
    """Verify the Firebase session cookie. Returns an Identity or None."""
    session_cookie = session.get(SESSION_KEY)
    if not session_cookie:
        return None
    identity = get_store().verify_session(session_cookie)
    if identity is None:
        session.pop(SESSION_KEY, None)
    return identity


class CurrentUser:
    """Proxy object providing attribute access to the current identity."""

    def __init__(self, identity=None):
        self._identity = identity

    @property
    def identity(self):
        return self._identity

    @property
    def is_authenticated(self):
        return self._identity is not None

    @property
    def uid(self):
        return self._identity.uid if self._identity else ''

    @property
    def display_name(self):
        return self._identity.display_name if self._identity else ''

    @property
    def first_name(self):
        return self._identity.first_name if self._identity else ''

    @property
    def photo_url(self):
        return self._identity.photo_url if self._identity else None


def load_current_user():
    """Load current user into g before each request."""
    if hasattr(g, '_current_user'):
        return
    g._current_user = CurrentUser(_verify_session())


def get_current_user():
    if not hasattr(g, '_current_user'):
        load_current_user()
    return g._current_user


def auth_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        user = get_current_user()
        if not user.is_authenticated:
            flash('Vui lòng đăng nhập để tiếp tục.', 'info')
            return redirect(url_for('main.index', tab=request.args.get('tab', 'docs')))
        g.current_user = user
        return f(*args, **kwargs)
    return decorated
