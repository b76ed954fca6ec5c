"""
Authentication blueprint.
Exchanges credentials for a backend token kept in the signed session.
"""

from flask import Blueprint, request, session, g, jsonify, Response
from typing import Tuple
import logging

from backoffice.middleware import require_login, TOKEN_SESSION_KEY
from backoffice.services import auth_service

logger = logging.getLogger(__name__)


auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


def _payload() -> dict:
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form.to_dict()


@auth_bp.route('/login', methods=['POST'])
def login() -> Tuple[Response, int]:
    """Log in against the backend and remember the token."""
    payload = _payload()
    result = auth_service.login(g.api, payload.get('email', ''), payload.get('password', ''))

    session.clear()
    session[TOKEN_SESSION_KEY] = result['access_token']
    session['user'] = result['user']
    session.permanent = True

    return jsonify({'status': 'ok', 'user': result['user']}), 200


@auth_bp.route('/logout', methods=['POST'])
def logout() -> Tuple[Response, int]:
    """Forget the token and any sale in progress."""
    session.clear()
    return jsonify({'status': 'ok', 'message': 'Déconnexion réussie'}), 200


@auth_bp.route('/me', methods=['GET'])
@require_login
def me() -> Tuple[Response, int]:
    profile = auth_service.get_profile(g.api)
    return jsonify({'status': 'ok', 'user': profile}), 200
