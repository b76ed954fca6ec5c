"""Sale Draft Service - cart operations for the till."""

import logging
from decimal import Decimal
from typing import Optional, Dict, Any

from backoffice.exceptions import ValidationError
from backoffice.models import CartLine, SaleDraft, CatalogSnapshot, PaymentMethod, normalize_payment_method
from backoffice.services.pricing_service import calculate_draft_totals
from backoffice.utils.number_format import parse_amount, parse_quantity

logger = logging.getLogger(__name__)

NOTES_MAX_LENGTH = 500


def new_draft(store_id: Optional[str] = None, cash_register_id: Optional[str] = None) -> SaleDraft:
    """Create an empty draft, optionally preselecting store and register."""
    return SaleDraft(
        store_id=str(store_id) if store_id else None,
        cash_register_id=str(cash_register_id) if cash_register_id else None
    )


def _to_quantity(value) -> int:
    try:
        return parse_quantity(value)
    except ValueError as e:
        raise ValidationError(str(e))


def _to_index(draft: SaleDraft, value) -> int:
    try:
        index = parse_quantity(value)
    except ValueError:
        raise ValidationError('Ligne invalide')
    if index < 0 or index >= len(draft.lines):
        raise ValidationError('Ligne introuvable dans le panier')
    return index


def add_item(draft: SaleDraft, catalog: CatalogSnapshot, product_id, quantity=1) -> CartLine:
    """
    Add a product to the draft or bump the quantity of its existing line.

    A new line freezes the catalog selling price as its unit price.
    """
    if product_id is None or str(product_id).strip() == '':
        raise ValidationError('Veuillez sélectionner un produit')

    qty = _to_quantity(quantity)
    if qty < 1:
        raise ValidationError('La quantité doit être au moins 1')

    product = catalog.get_product(str(product_id).strip())
    if not product:
        raise ValidationError('Produit introuvable dans le catalogue')

    total_before = _total(draft)

    line = draft.find_line(product.id)
    if line:
        line.quantity += qty
    else:
        line = CartLine(
            product_id=product.id,
            product_name=product.name,
            quantity=qty,
            unit_price=product.selling_price
        )
        draft.lines.append(line)

    auto_fill_amount_paid(draft, total_before)
    return line


def remove_item(draft: SaleDraft, index) -> CartLine:
    """Remove the line at index. An index outside the cart is rejected."""
    position = _to_index(draft, index)
    total_before = _total(draft)
    line = draft.lines.pop(position)
    auto_fill_amount_paid(draft, total_before)
    return line


def set_quantity(draft: SaleDraft, index, quantity) -> Optional[CartLine]:
    """
    Replace the quantity of the line at index.

    Quantities below 1 are ignored without error so a cashier clearing the
    field mid-typing does not wipe the line.
    """
    position = _to_index(draft, index)
    if quantity is None or str(quantity).strip() == '':
        return None
    qty = _to_quantity(quantity)
    if qty < 1:
        return None

    total_before = _total(draft)
    line = draft.lines[position]
    line.quantity = qty
    auto_fill_amount_paid(draft, total_before)
    return line


def set_adjustments(
    draft: SaleDraft,
    catalog: Optional[CatalogSnapshot] = None,
    **fields
) -> SaleDraft:
    """
    Update the scalar fields of the draft.

    Accepted keys: store_id, discount, tax, payment_method, amount_paid,
    notes, cash_register_id. Missing keys are left unchanged. When the
    total moves and amount_paid was not given, amount_paid follows it.
    """
    total_before = _total(draft)

    if 'store_id' in fields:
        store_id = fields['store_id']
        store_id = str(store_id).strip() if store_id is not None else ''
        if store_id and catalog is not None and catalog.stores and not catalog.has_store(store_id):
            raise ValidationError('Magasin introuvable')
        draft.store_id = store_id or None

    try:
        if 'discount' in fields:
            draft.discount = parse_amount(fields['discount'] or 0, 'La remise')
        if 'tax' in fields:
            draft.tax = parse_amount(fields['tax'] or 0, 'La taxe')
        if 'amount_paid' in fields:
            draft.amount_paid = parse_amount(fields['amount_paid'] or 0, 'Le montant payé')
        if 'payment_method' in fields:
            draft.payment_method = normalize_payment_method(fields['payment_method'])
    except ValueError as e:
        raise ValidationError(str(e))

    if 'notes' in fields:
        notes = (fields['notes'] or '').strip()
        if len(notes) > NOTES_MAX_LENGTH:
            raise ValidationError(f'Les notes ne peuvent pas dépasser {NOTES_MAX_LENGTH} caractères')
        draft.notes = notes or None

    if 'cash_register_id' in fields:
        draft.cash_register_id = str(fields['cash_register_id']) if fields['cash_register_id'] else None

    if 'amount_paid' not in fields:
        auto_fill_amount_paid(draft, total_before)
    return draft


def _total(draft: SaleDraft) -> Decimal:
    return calculate_draft_totals(draft)['total']


def auto_fill_amount_paid(draft: SaleDraft, total_before: Optional[Decimal] = None) -> None:
    """
    Raise amount_paid to the total when it is zero or below it.

    With total_before, nothing happens unless the total moved, so a short
    payment typed by the cashier survives edits that leave the total alone.
    """
    total = _total(draft)
    if total_before is not None and total == total_before:
        return
    if draft.amount_paid == 0 or draft.amount_paid < total:
        draft.amount_paid = max(total, Decimal('0.00'))


# =====================================================
# SESSION SERIALIZATION
# =====================================================

def serialize_draft(draft: SaleDraft) -> Dict[str, Any]:
    """Turn a draft into a JSON-safe dict (Decimals as strings)."""
    return {
        'draft_id': draft.draft_id,
        'store_id': draft.store_id,
        'cash_register_id': draft.cash_register_id,
        'lines': [
            {
                'product_id': line.product_id,
                'product_name': line.product_name,
                'quantity': line.quantity,
                'unit_price': str(line.unit_price),
            }
            for line in draft.lines
        ],
        'discount': str(draft.discount),
        'tax': str(draft.tax),
        'payment_method': draft.payment_method.value,
        'amount_paid': str(draft.amount_paid),
        'notes': draft.notes,
    }


def load_draft(data: Dict[str, Any]) -> SaleDraft:
    """Rebuild a draft from serialize_draft() output."""
    return SaleDraft(
        draft_id=data['draft_id'],
        store_id=data.get('store_id'),
        cash_register_id=data.get('cash_register_id'),
        lines=[
            CartLine(
                product_id=line['product_id'],
                product_name=line['product_name'],
                quantity=int(line['quantity']),
                unit_price=Decimal(line['unit_price']),
            )
            for line in data.get('lines', [])
        ],
        discount=Decimal(data.get('discount', '0.00')),
        tax=Decimal(data.get('tax', '0.00')),
        payment_method=PaymentMethod(data.get('payment_method', PaymentMethod.CASH.value)),
        amount_paid=Decimal(data.get('amount_paid', '0.00')),
        notes=data.get('notes'),
    )
