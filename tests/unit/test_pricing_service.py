"""
Unit tests for the pricing calculator.
"""

import pytest
from decimal import Decimal

from backoffice.models import CartLine
from backoffice.services import sale_draft_service
from backoffice.services.pricing_service import calculate_totals, calculate_draft_totals


def _line(product_id, quantity, unit_price):
    return CartLine(product_id=product_id, product_name=product_id, quantity=quantity, unit_price=Decimal(unit_price))


class TestCalculateTotals:
    """Tests for calculate_totals."""

    def test_single_line_scenario(self):
        totals = calculate_totals([_line('A', 2, '5000')], Decimal('0'), Decimal('0'), Decimal('10000'))

        assert totals['subtotal'] == Decimal('10000.00')
        assert totals['total'] == Decimal('10000.00')
        assert totals['change'] == Decimal('0.00')
        assert totals['change_visible'] is True

    def test_total_applies_discount_and_tax(self):
        lines = [_line('A', 3, '1500'), _line('B', 1, '12.50')]
        totals = calculate_totals(lines, Decimal('200'), Decimal('99.99'), Decimal('5000'))

        assert totals['subtotal'] == Decimal('4512.50')
        assert totals['total'] == Decimal('4412.49')
        assert totals['change'] == Decimal('587.51')

    def test_subtotal_is_sum_of_line_subtotals(self):
        lines = [_line('A', 7, '0.33'), _line('B', 3, '19.99'), _line('C', 11, '1000')]
        totals = calculate_totals(lines)
        assert totals['subtotal'] == sum(line.subtotal for line in lines)
        assert [d['subtotal'] for d in totals['lines']] == [line.subtotal for line in lines]

    def test_no_drift_over_a_thousand_cent_additions(self):
        line = _line('A', 0, '0.01')
        for _ in range(1000):
            line.quantity += 1
        totals = calculate_totals([line])

        assert totals['subtotal'] == Decimal('10.00')
        assert totals['subtotal'] == line.subtotal

    def test_no_drift_over_a_thousand_cent_adds(self, catalog):
        draft = sale_draft_service.new_draft()
        for _ in range(1000):
            sale_draft_service.add_item(draft, catalog, 'p-candy', 1)

        assert len(draft.lines) == 1
        assert draft.lines[0].quantity == 1000
        assert calculate_draft_totals(draft)['subtotal'] == Decimal('10.00')

    def test_no_drift_over_a_thousand_cent_lines(self):
        lines = [_line(f'P{i}', 1, '0.01') for i in range(1000)]
        assert calculate_totals(lines)['subtotal'] == Decimal('10.00')

    def test_negative_change_is_not_visible(self):
        totals = calculate_totals([_line('A', 2, '5000')], amount_paid=Decimal('9000'))
        assert totals['change'] == Decimal('-1000.00')
        assert totals['change_visible'] is False

    def test_empty_cart(self):
        totals = calculate_totals([])
        assert totals['subtotal'] == Decimal('0.00')
        assert totals['total'] == Decimal('0.00')
        assert totals['lines'] == []

    @pytest.mark.parametrize('discount,tax,expected', [
        ('0', '0', '10000.00'),
        ('1000', '0', '9000.00'),
        ('0', '1800', '11800.00'),
        ('2500', '1800', '9300.00'),
    ])
    def test_total_formula(self, discount, tax, expected):
        totals = calculate_totals([_line('A', 2, '5000')], Decimal(discount), Decimal(tax))
        assert totals['total'] == Decimal(expected)
