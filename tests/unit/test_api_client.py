"""
Unit tests for the backend REST client.
"""

import pytest
import requests

from conftest import ok, fail, FakeResponse, BACKEND_URL
from backoffice.exceptions import ApiError, TransportError, UnauthorizedError
from backoffice.services.api_client import ApiSession, BackendClient


class TestApiSession:

    def test_headers_carry_bearer_token(self):
        api_session = ApiSession(BACKEND_URL + '/', token='abc')
        assert api_session.base_url == BACKEND_URL
        assert api_session.headers['Authorization'] == 'Bearer abc'
        assert api_session.is_authenticated

    def test_anonymous_session_has_no_authorization(self):
        api_session = ApiSession(BACKEND_URL)
        assert 'Authorization' not in api_session.headers
        assert not api_session.is_authenticated


class TestBackendClient:

    def test_get_returns_envelope(self, api, backend):
        backend.on('GET', '/store/s1', ok({'id': 's1'}))
        envelope = api.get('/store/s1')
        assert envelope['data'] == {'id': 's1'}

    def test_timeout_comes_from_session(self, backend):
        client = BackendClient(ApiSession(BACKEND_URL, token='t', timeout=7.5))
        backend.on('GET', '/auth', ok({}))
        client.get('/auth')
        assert backend.calls[0]['timeout'] == 7.5

    def test_default_has_no_timeout(self, api, backend):
        backend.on('GET', '/auth', ok({}))
        api.get('/auth')
        assert backend.calls[0]['timeout'] is None

    def test_success_false_raises_api_error(self, api, backend):
        backend.on('POST', '/sale', fail('Magasin inactif'))
        with pytest.raises(ApiError, match='Magasin inactif'):
            api.post('/sale', {})

    def test_send_does_not_raise_on_success_false(self, api, backend):
        backend.on('GET', '/cash-register/my-open-register', (404, fail('Aucune caisse ouverte')))
        envelope = api.send('GET', '/cash-register/my-open-register')
        assert envelope['success'] is False

    def test_network_error_becomes_transport_error(self, api, backend):
        backend.on('GET', '/product', requests.Timeout('read timed out'))
        with pytest.raises(TransportError, match='Erreur de connexion au serveur'):
            api.get('/product')

    def test_non_json_body_becomes_transport_error(self, api, backend):
        backend.on('GET', '/product', FakeResponse(502, raw_text='<html>Bad Gateway</html>'))
        with pytest.raises(TransportError):
            api.get('/product')

    def test_body_without_envelope_becomes_transport_error(self, api, backend):
        backend.on('GET', '/product', FakeResponse(200, ['not', 'an', 'envelope']))
        with pytest.raises(TransportError):
            api.get('/product')

    def test_unauthorized_without_json_body(self, api, backend):
        backend.on('GET', '/auth', FakeResponse(401, raw_text='<html>401 Authorization Required</html>'))
        with pytest.raises(UnauthorizedError):
            api.get('/auth')

    def test_unauthorized_response(self, api, backend):
        backend.on('GET', '/auth', (401, fail('Token expiré')))
        with pytest.raises(UnauthorizedError, match='Token expiré'):
            api.get('/auth')
