import pytest
from decimal import Decimal
from urllib.parse import urlparse

import requests

from config import Config
from backoffice import create_app
from backoffice.models import CatalogProduct, CatalogStore, CatalogSnapshot
from backoffice.services.api_client import ApiSession, BackendClient
from backoffice.services.cache_service import CacheService

BACKEND_URL = 'http://backend.test'


class TestConfig(Config):
    TESTING = True
    WTF_CSRF_ENABLED = False
    SECRET_KEY = 'test-secret'
    BACKEND_API_URL = BACKEND_URL
    BACKEND_API_TIMEOUT = None
    CACHE_ENABLED = False


class FakeResponse:
    """Stand-in for requests.Response with just what the client reads."""

    def __init__(self, status_code=200, body=None, raw_text=None):
        self.status_code = status_code
        self._body = body
        self._raw_text = raw_text

    def json(self):
        if self._raw_text is not None:
            raise ValueError('No JSON object could be decoded')
        return self._body


class FakeBackend:
    """
    Routes (method, path) to canned envelopes and records every call.

    A route value may be a dict (200 envelope), a (status, body) tuple,
    a FakeResponse, an exception instance to raise, or a callable taking
    the call record and returning any of those.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []

    def on(self, method, path, response):
        self.routes[(method.upper(), path)] = response
        return self

    def calls_to(self, method, path):
        return [c for c in self.calls if c['method'] == method.upper() and c['path'] == path]

    def __call__(self, method, url, params=None, json=None, headers=None, timeout=None, **kwargs):
        path = urlparse(url).path
        call = {
            'method': method.upper(),
            'path': path,
            'params': params,
            'json': json,
            'headers': headers,
            'timeout': timeout,
        }
        self.calls.append(call)

        response = self.routes.get((method.upper(), path))
        if response is None:
            return FakeResponse(404, {'success': False, 'data': None, 'message': 'Route introuvable'})
        if callable(response) and not isinstance(response, FakeResponse):
            response = response(call)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, FakeResponse):
            return response
        if isinstance(response, tuple):
            return FakeResponse(response[0], response[1])
        return FakeResponse(200, response)


class InMemoryCache(CacheService):
    """CacheService backed by a dict instead of Redis."""

    def __init__(self):
        super().__init__()
        self.store = {}

    def is_available(self):
        return True

    def get(self, scope, module, key):
        return self.store.get(self._build_key(scope, module, key))

    def set(self, scope, module, key, value, ttl=None):
        self.store[self._build_key(scope, module, key)] = value
        return True

    def delete(self, scope, module, key):
        self.store.pop(self._build_key(scope, module, key), None)
        return True


def ok(data=None, message='OK'):
    return {'success': True, 'data': data, 'message': message}


def fail(message):
    return {'success': False, 'data': None, 'message': message}


PRODUCTS = [
    {'id': 'p-rice', 'name': 'Riz 25kg', 'sku': 'RIZ-25', 'sellingPrice': 5000, 'unit': 'sac'},
    {'id': 'p-oil', 'name': 'Huile 1L', 'sku': 'HUI-1', 'sellingPrice': 12.5, 'unit': 'bouteille'},
    {'id': 'p-candy', 'name': 'Bonbon', 'sku': 'BON-1', 'sellingPrice': 0.01, 'unit': 'piece'},
]

STORES = [
    {'id': 's-kaloum', 'name': 'Boutique Kaloum', 'city': 'Conakry'},
    {'id': 's-kindia', 'name': 'Boutique Kindia', 'city': 'Kindia'},
]


@pytest.fixture
def backend(mocker):
    """Intercept every requests.Session call made by the backend client."""
    fake = FakeBackend()
    fake.on('GET', '/product', ok({'products': PRODUCTS}))
    fake.on('GET', '/store', ok({'stores': STORES}))
    fake.on('GET', '/cash-register/my-open-register', (404, fail('Aucune caisse ouverte')))
    mocker.patch.object(requests.Session, 'request', side_effect=fake)
    return fake


@pytest.fixture
def api(backend):
    return BackendClient(ApiSession(BACKEND_URL, token='token-123'))


@pytest.fixture
def catalog():
    products = [CatalogProduct.from_api(p) for p in PRODUCTS]
    return CatalogSnapshot(
        products={p.id: p for p in products},
        stores=[CatalogStore.from_api(s) for s in STORES],
    )


@pytest.fixture
def memory_cache():
    return InMemoryCache()


@pytest.fixture
def app():
    """Create application instance for testing."""
    return create_app(TestConfig)


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def authenticated_client(client):
    """Test client whose session already holds a backend token."""
    with client.session_transaction() as sess:
        sess['access_token'] = 'token-123'
    return client


@pytest.fixture
def cached_app(app, mocker):
    """App whose cache service keeps values in memory."""
    cache = InMemoryCache()
    mocker.patch('backoffice.blueprints.sales.get_cache', return_value=cache)
    app.extensions['cache'] = cache
    return app


def money(value):
    return Decimal(value)
