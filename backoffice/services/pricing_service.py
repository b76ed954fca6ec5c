"""Pricing Calculator - derives sale totals from the cart."""

from decimal import Decimal
from typing import Iterable, Dict, Any

from backoffice.models import CartLine

CENT = Decimal('0.01')


def calculate_totals(
    lines: Iterable[CartLine],
    discount: Decimal = Decimal('0'),
    tax: Decimal = Decimal('0'),
    amount_paid: Decimal = Decimal('0')
) -> Dict[str, Any]:
    """
    Calculate subtotal, total and change for a cart.

    total = subtotal - discount + tax
    change = amount_paid - total

    Pure function. change is always returned; change_visible tells the
    caller whether it may be shown (a negative change blocks the sale).
    """
    lines_details = []
    subtotal = Decimal('0')

    for line in lines:
        line_subtotal = line.subtotal
        lines_details.append({
            'product_id': line.product_id,
            'product_name': line.product_name,
            'quantity': line.quantity,
            'unit_price': line.unit_price,
            'subtotal': line_subtotal,
        })
        subtotal += line_subtotal

    subtotal = subtotal.quantize(CENT)
    total = (subtotal - Decimal(discount) + Decimal(tax)).quantize(CENT)
    change = (Decimal(amount_paid) - total).quantize(CENT)

    return {
        'subtotal': subtotal,
        'discount': Decimal(discount).quantize(CENT),
        'tax': Decimal(tax).quantize(CENT),
        'total': total,
        'amount_paid': Decimal(amount_paid).quantize(CENT),
        'change': change,
        'change_visible': change >= 0,
        'lines': lines_details,
    }


def calculate_draft_totals(draft) -> Dict[str, Any]:
    """Calculate totals for a SaleDraft."""
    return calculate_totals(draft.lines, draft.discount, draft.tax, draft.amount_paid)
