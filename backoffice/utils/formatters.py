"""
Formatting helpers for amounts shown to the cashier.
Guinean Franc amounts are grouped by thousands with a space.
"""
from decimal import Decimal, InvalidOperation
from typing import Union


def plain_amount(value: Union[int, float, Decimal, str, None]) -> str:
    """
    Render an amount without grouping, dropping a zero fractional part.

    Examples:
        plain_amount(Decimal('10000.00')) -> "10000"
        plain_amount(Decimal('12.50')) -> "12.50"
    """
    if value is None or value == "":
        return "0"
    try:
        num = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return "0"
    if num == num.to_integral_value():
        return str(int(num))
    return str(num.quantize(Decimal('0.01')))


def num_gn(value: Union[int, float, Decimal, str, None]) -> str:
    """
    Format a number with space-separated thousands and a comma decimal mark.

    Examples:
        num_gn(1500) -> "1 500"
        num_gn(1500.5) -> "1 500,5"
        num_gn(None) -> "-"
    """
    if value is None or value == "":
        return "-"

    try:
        if isinstance(value, str):
            value = value.replace(",", ".")
        num = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return "-"

    if num == 0:
        return "0"

    num_str = format(num, 'f')
    if '.' in num_str:
        integer_part, decimal_part = num_str.split('.')
        decimal_part = decimal_part.rstrip("0")
    else:
        integer_part, decimal_part = num_str, ""

    sign_str = ''
    if integer_part.startswith('-'):
        sign_str = '-'
        integer_part = integer_part[1:]

    reversed_int = integer_part[::-1]
    groups = [reversed_int[i:i+3] for i in range(0, len(reversed_int), 3)]
    integer_formatted = ' '.join(groups)[::-1]

    if decimal_part:
        return f"{sign_str}{integer_formatted},{decimal_part}"
    return f"{sign_str}{integer_formatted}"


def money_gnf(value: Union[int, float, Decimal, str, None]) -> str:
    """Format an amount with the currency suffix, e.g. "10 000 GNF"."""
    formatted = num_gn(value)
    if formatted == "-":
        return "-"
    return f"{formatted} GNF"
