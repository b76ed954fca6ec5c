"""Cash register service - open, close and look up till sessions."""

import logging
from decimal import Decimal
from typing import Dict, Any, Optional

from backoffice.exceptions import ValidationError
from backoffice.services.api_client import BackendClient
from backoffice.utils.number_format import parse_amount

logger = logging.getLogger(__name__)


def open_cash_register(
    api: BackendClient,
    store_id: Optional[str],
    opening_amount,
    notes: Optional[str] = None
) -> Dict[str, Any]:
    """Open a register for a store with the cash counted at the start."""
    if not store_id:
        raise ValidationError('Veuillez sélectionner un magasin')

    try:
        amount = parse_amount(opening_amount, "Le montant d'ouverture")
    except ValueError as e:
        raise ValidationError(str(e))

    payload = {'storeId': str(store_id), 'openingAmount': float(amount)}
    if notes and notes.strip():
        payload['notes'] = notes.strip()

    envelope = api.post('/cash-register/open', payload)
    logger.info(f"[POS] Cash register opened for store {store_id} with {amount}")
    return {
        'cash_register': envelope.get('data') or {},
        'message': envelope.get('message') or 'Caisse ouverte',
    }


def closing_difference(register: Dict[str, Any], counted_amount: Decimal) -> Dict[str, Decimal]:
    """Compare the counted cash with what the register expects to hold."""
    expected = parse_amount(register.get('availableAmount') or 0, 'Le montant attendu')
    return {
        'expected_amount': expected,
        'counted_amount': counted_amount,
        'difference': (counted_amount - expected).quantize(Decimal('0.01')),
    }


def close_cash_register(
    api: BackendClient,
    register: Dict[str, Any],
    counted_amount,
    notes: Optional[str] = None
) -> Dict[str, Any]:
    """
    Close a register with the amount actually counted in the drawer.

    The backend records the closing; the difference returned here is for
    display only.
    """
    if counted_amount is None or str(counted_amount).strip() == '':
        raise ValidationError('Veuillez entrer le montant réel compté')

    try:
        counted = parse_amount(counted_amount, 'Le montant compté')
    except ValueError as e:
        raise ValidationError(str(e))

    summary = closing_difference(register, counted)

    payload = {'closingAmount': float(counted)}
    if notes and notes.strip():
        payload['notes'] = notes.strip()

    envelope = api.patch(f"/cash-register/{register['id']}/close", payload)
    logger.info(
        f"[POS] Cash register {register['id']} closed: counted={counted}, "
        f"expected={summary['expected_amount']}, difference={summary['difference']}"
    )
    return {
        'cash_register': envelope.get('data') or {},
        'message': envelope.get('message') or 'Caisse fermée',
        **summary,
    }


def get_cash_register(api: BackendClient, cash_register_id: str) -> Dict[str, Any]:
    return api.get(f'/cash-register/{cash_register_id}').get('data') or {}


def get_my_open_register(api: BackendClient) -> Optional[Dict[str, Any]]:
    """Return the caller's open register, or None when there is none."""
    envelope = api.send('GET', '/cash-register/my-open-register')
    if not envelope.get('success'):
        return None
    return envelope.get('data') or None
