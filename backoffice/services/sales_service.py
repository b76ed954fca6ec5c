"""
Sales service - Sale Submitter and the read side of the sales endpoint.
Validates a draft locally, then hands it to the backend in one call.
"""
import logging
from decimal import Decimal
from typing import Dict, Any, Optional, Union

from backoffice.exceptions import ValidationError, InsufficientPaymentError
from backoffice.models import SaleDraft, SaleStatus, REVERSED_STATUSES
from backoffice.services.api_client import BackendClient
from backoffice.services.pricing_service import calculate_draft_totals

logger = logging.getLogger(__name__)


def validate_draft(draft: SaleDraft) -> Dict[str, Any]:
    """
    Run the pre-submission checks and return the draft totals.

    Checks run in order: store selected, cart not empty, payment covers
    the total.
    """
    if not draft.store_id:
        raise ValidationError('Veuillez sélectionner un magasin')

    if draft.is_empty:
        raise ValidationError('Veuillez ajouter au moins un article')

    totals = calculate_draft_totals(draft)
    if draft.amount_paid < totals['total']:
        raise InsufficientPaymentError(totals['total'], draft.amount_paid)

    return totals


def _wire_amount(value: Decimal) -> Union[int, float]:
    """Decimal to JSON number, only at the wire edge."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def build_sale_payload(draft: SaleDraft) -> Dict[str, Any]:
    """Build the POST /sale body from a draft."""
    payload = {
        'storeId': draft.store_id,
        'items': [
            {
                'productId': line.product_id,
                'quantity': line.quantity,
                'unitPrice': _wire_amount(line.unit_price),
            }
            for line in draft.lines
        ],
        'discount': _wire_amount(draft.discount),
        'tax': _wire_amount(draft.tax),
        'paymentMethod': draft.payment_method.value,
        'amountPaid': _wire_amount(draft.amount_paid),
    }

    notes = (draft.notes or '').strip()
    if notes:
        payload['notes'] = notes
    if draft.cash_register_id:
        payload['cashRegisterId'] = draft.cash_register_id

    return payload


def submit_sale(api: BackendClient, draft: SaleDraft) -> Dict[str, Any]:
    """
    Validate the draft and create the sale with a single POST.

    The backend commits the sale and its stock deductions together. No
    retry is attempted here; a failure propagates and the caller keeps
    the draft for a manual resubmission.

    Returns:
        dict with sale_id, sale_number and the backend message
    """
    totals = validate_draft(draft)
    payload = build_sale_payload(draft)

    logger.info(
        f"[POS] Submitting sale: store={draft.store_id}, lines={len(draft.lines)}, "
        f"total={totals['total']}, method={draft.payment_method.value}"
    )

    envelope = api.post('/sale', payload)
    data = envelope.get('data') or {}
    result = {
        'sale_id': data.get('id'),
        'sale_number': data.get('saleNumber'),
        'message': envelope.get('message') or 'Vente enregistrée',
        'total': totals['total'],
        'change': totals['change'],
    }

    logger.info(f"[POS] Sale created: {result['sale_number']} (id={result['sale_id']})")
    return result


# =====================================================
# READ SIDE & STATUS CHANGES
# =====================================================

def list_sales(
    api: BackendClient,
    page: int = 1,
    limit: int = 50,
    store_id: Optional[str] = None,
    status: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    search: Optional[str] = None
) -> Dict[str, Any]:
    params = {
        'page': page,
        'limit': limit,
        'storeId': store_id,
        'status': status,
        'startDate': start_date,
        'endDate': end_date,
        'search': search,
    }
    return api.get('/sale', params=params).get('data') or {}


def get_sale(api: BackendClient, sale_id: str) -> Dict[str, Any]:
    return api.get(f'/sale/{sale_id}').get('data') or {}


def get_sale_by_number(api: BackendClient, sale_number: str) -> Dict[str, Any]:
    return api.get(f'/sale/number/{sale_number}').get('data') or {}


def check_status_transition(current: SaleStatus, target: SaleStatus) -> None:
    """
    Client-side guard for a status change. The backend re-checks.

    Raises:
        ValidationError: if the transition is not allowed
    """
    if current == target:
        raise ValidationError('Le statut sélectionné est identique au statut actuel')
    if target == SaleStatus.CANCELLED and current != SaleStatus.PENDING:
        if current in REVERSED_STATUSES:
            raise ValidationError('Cette vente a déjà été annulée ou remboursée')
        raise ValidationError('Vous ne pouvez annuler que les ventes en attente')
    if target == SaleStatus.REFUNDED and current != SaleStatus.COMPLETED:
        if current in REVERSED_STATUSES:
            raise ValidationError('Cette vente a déjà été annulée ou remboursée')
        raise ValidationError('Vous ne pouvez rembourser que les ventes complétées')


def _to_status(value) -> SaleStatus:
    try:
        return value if isinstance(value, SaleStatus) else SaleStatus(str(value).upper().strip())
    except ValueError:
        raise ValidationError(f'Statut invalide: {value}')


def change_sale_status(api: BackendClient, sale_id: str, new_status) -> Dict[str, Any]:
    """Move a sale to new_status after checking the transition locally."""
    target = _to_status(new_status)
    sale = get_sale(api, sale_id)
    current = _to_status(sale.get('status'))

    check_status_transition(current, target)

    logger.info(f"[POS] Sale {sale_id}: {current.value} -> {target.value}")
    envelope = api.patch(f'/sale/{sale_id}/status/{target.value}')
    return {
        'sale': envelope.get('data') or {},
        'message': envelope.get('message') or 'Statut mis à jour',
    }


def cancel_sale(api: BackendClient, sale_id: str) -> Dict[str, Any]:
    envelope = api.delete(f'/sale/{sale_id}')
    logger.info(f"[POS] Sale {sale_id} cancelled")
    return {
        'sale': envelope.get('data') or {},
        'message': envelope.get('message') or 'Vente annulée',
    }
