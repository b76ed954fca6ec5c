"""Authentication service - token exchange with the backend."""

import logging
import re
from typing import Dict, Any

from backoffice.exceptions import ValidationError, ApiError
from backoffice.services.api_client import BackendClient

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


def is_valid_email(email: str) -> bool:
    return EMAIL_PATTERN.match(email or '') is not None


def login(api: BackendClient, email: str, password: str) -> Dict[str, Any]:
    """
    Exchange credentials for an access token.

    Returns:
        dict with access_token and the user payload sent by the backend
    """
    email = (email or '').strip().lower()
    if not is_valid_email(email):
        raise ValidationError('Email invalide')
    if not password:
        raise ValidationError('Le mot de passe est requis')

    envelope = api.post('/auth/login', {'email': email, 'password': password})
    data = envelope.get('data') or {}
    token = data.get('access_token')
    if not token:
        raise ApiError('Réponse de connexion sans jeton')

    logger.info(f"[AUTH] Login ok for {email}")
    return {'access_token': token, 'user': data.get('user') or {}}


def get_profile(api: BackendClient) -> Dict[str, Any]:
    return api.get('/auth').get('data') or {}
