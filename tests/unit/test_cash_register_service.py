"""
Unit tests for cash register operations.
"""

import pytest
from decimal import Decimal

from conftest import ok, fail
from backoffice.exceptions import ValidationError, ApiError
from backoffice.services import cash_register_service


class TestOpenRegister:

    def test_open_register(self, api, backend):
        backend.on('POST', '/cash-register/open', ok({'id': 'cr-1', 'status': 'OPEN'}, 'Caisse ouverte'))

        result = cash_register_service.open_cash_register(api, 's-kaloum', '150 000', ' matin ')

        assert result['cash_register']['id'] == 'cr-1'
        body = backend.calls_to('POST', '/cash-register/open')[0]['json']
        assert body == {'storeId': 's-kaloum', 'openingAmount': 150000.0, 'notes': 'matin'}

    def test_store_is_required(self, api, backend):
        with pytest.raises(ValidationError, match='magasin'):
            cash_register_service.open_cash_register(api, '', 1000)
        assert backend.calls == []

    def test_negative_opening_amount_is_rejected(self, api, backend):
        with pytest.raises(ValidationError):
            cash_register_service.open_cash_register(api, 's-kaloum', '-5')
        assert backend.calls == []

    def test_backend_refuses_second_open_register(self, api, backend):
        backend.on('POST', '/cash-register/open', (409, fail('Vous avez déjà une caisse ouverte')))
        with pytest.raises(ApiError, match='déjà une caisse ouverte'):
            cash_register_service.open_cash_register(api, 's-kaloum', 0)


class TestCloseRegister:

    REGISTER = {'id': 'cr-1', 'availableAmount': 250000, 'status': 'OPEN'}

    def test_close_reports_difference(self, api, backend):
        backend.on('PATCH', '/cash-register/cr-1/close', ok({'id': 'cr-1', 'status': 'CLOSED'}, 'Caisse fermée'))

        result = cash_register_service.close_cash_register(api, self.REGISTER, '248500')

        assert result['expected_amount'] == Decimal('250000.00')
        assert result['difference'] == Decimal('-1500.00')
        assert backend.calls_to('PATCH', '/cash-register/cr-1/close')[0]['json'] == {'closingAmount': 248500.0}

    @pytest.mark.parametrize('counted', [None, '', '   '])
    def test_counted_amount_is_required(self, api, backend, counted):
        with pytest.raises(ValidationError, match='montant réel compté'):
            cash_register_service.close_cash_register(api, self.REGISTER, counted)
        assert backend.calls == []

    def test_negative_counted_amount_is_rejected(self, api, backend):
        with pytest.raises(ValidationError):
            cash_register_service.close_cash_register(api, self.REGISTER, -1)


class TestMyOpenRegister:

    def test_none_when_backend_has_no_open_register(self, api, backend):
        assert cash_register_service.get_my_open_register(api) is None

    def test_returns_open_register(self, api, backend):
        backend.on('GET', '/cash-register/my-open-register', ok({'id': 'cr-1', 'storeId': 's-kaloum'}))
        assert cash_register_service.get_my_open_register(api)['id'] == 'cr-1'
