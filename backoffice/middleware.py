"""Middleware for the backend session context."""
from functools import wraps
from flask import session, g, current_app

from backoffice.exceptions import UnauthorizedError
from backoffice.services.api_client import ApiSession, BackendClient

TOKEN_SESSION_KEY = 'access_token'


def load_api_session():
    """
    Build the per-request backend client into g.

    Sets g.api_session and g.api. The token comes from the signed Flask
    session; no service reads it on its own.
    """
    g.api_session = ApiSession(
        current_app.config['BACKEND_API_URL'],
        token=session.get(TOKEN_SESSION_KEY),
        timeout=current_app.config.get('BACKEND_API_TIMEOUT')
    )
    g.api = BackendClient(g.api_session)


def require_login(f):
    """
    Decorator: Require a backend token in the session.

    Answers 401 JSON when missing so the front-end can show its login screen.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not g.api_session.is_authenticated:
            raise UnauthorizedError('Vous devez vous connecter pour accéder à cette page')
        return f(*args, **kwargs)
    return decorated_function
