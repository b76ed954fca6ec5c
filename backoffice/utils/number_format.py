"""Number parsing utilities for amounts and quantities entered at the till."""
import re
from decimal import Decimal, InvalidOperation

CENT = Decimal('0.01')

# 1 500 000 | 1500000 | 1500,50 | 1500.50
AMOUNT_PATTERN = re.compile(r"^\d+(?:[.,]\d{1,2})?$")


def parse_amount(value, field: str = 'Le montant') -> Decimal:
    """
    Parse a monetary value to a Decimal with two places.

    Accepts ints, Decimals, floats coming out of JSON bodies and strings
    typed by the cashier. Strings may group thousands with spaces
    (``1 500 000``) and use a comma or a dot as decimal separator.

    Rules:
    - At most 2 decimal digits
    - No negatives

    Raises:
        ValueError: if the value is invalid or empty.
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f'{field} : valeur requise')

    if isinstance(value, Decimal):
        decimal_value = value
    elif isinstance(value, int):
        decimal_value = Decimal(value)
    elif isinstance(value, float):
        decimal_value = Decimal(str(value))
    else:
        cleaned = str(value).strip().replace(' ', '').replace('\u00a0', '')
        if not cleaned:
            raise ValueError(f'{field} : valeur requise')
        if cleaned.startswith('-'):
            raise ValueError(f'{field} : valeur négative non autorisée')
        if not AMOUNT_PATTERN.match(cleaned):
            raise ValueError(f'{field} : valeur invalide')
        try:
            decimal_value = Decimal(cleaned.replace(',', '.'))
        except (InvalidOperation, ValueError):
            raise ValueError(f'{field} : valeur invalide')

    if not decimal_value.is_finite():
        raise ValueError(f'{field} : valeur invalide')

    if decimal_value < 0:
        raise ValueError(f'{field} : valeur négative non autorisée')

    if decimal_value != decimal_value.quantize(CENT):
        raise ValueError(f'{field} : deux décimales au maximum')

    return decimal_value.quantize(CENT)


def parse_quantity(value) -> int:
    """
    Parse a quantity to an int.

    Zero and negative values are returned as-is; the cart decides what to
    do with them. Fractional quantities are rejected.

    Raises:
        ValueError: if the value is not a whole number.
    """
    if value is None or isinstance(value, bool):
        raise ValueError('La quantité est requise')

    if isinstance(value, int):
        return value

    cleaned = str(value).strip()
    if not cleaned:
        raise ValueError('La quantité est requise')

    try:
        decimal_value = Decimal(cleaned)
    except (InvalidOperation, ValueError):
        raise ValueError('La quantité doit être un nombre entier')

    if not decimal_value.is_finite() or decimal_value != decimal_value.to_integral_value():
        raise ValueError('La quantité doit être un nombre entier')

    return int(decimal_value)
