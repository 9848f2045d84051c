"""
Unit tests for fixed-point money helpers.
"""

import pytest
from decimal import Decimal
from pos_backend.utils.money import to_money, line_subtotal, sum_money, parse_money, parse_int, parse_positive_int


class TestRounding:

    def test_half_rounds_away_from_zero(self):
        assert to_money(Decimal('2.675')) == Decimal('2.68')
        assert to_money(Decimal('-2.675')) == Decimal('-2.68')
        assert to_money('0.005') == Decimal('0.01')

    def test_float_input_does_not_carry_binary_drift(self):
        # float 1.005 is 1.00499999... in binary; str() keeps the decimal intent
        assert to_money(1.005) == Decimal('1.01')

    def test_line_subtotal(self):
        assert line_subtotal(Decimal('10.00'), 3) == Decimal('30.00')
        assert line_subtotal(Decimal('0.10'), 3) == Decimal('0.30')
        assert line_subtotal('19.99', 7) == Decimal('139.93')

    def test_total_equals_sum_of_rounded_subtotals(self):
        subtotals = [line_subtotal('0.10', 1) for _ in range(3)]
        assert sum_money(subtotals) == Decimal('0.30')

    def test_sum_of_nothing_is_zero(self):
        assert sum_money([]) == Decimal('0.00')


class TestParsing:

    def test_parse_money(self):
        assert parse_money('12.345') == Decimal('12.35')
        assert parse_money(7) == Decimal('7.00')
        assert parse_money(0) == Decimal('0.00')

    @pytest.mark.parametrize('value', [None, '', 'abc', -1, '-0.01', True, 'NaN', 'Infinity'])
    def test_parse_money_rejects(self, value):
        with pytest.raises(ValueError):
            parse_money(value)

    def test_parse_int(self):
        assert parse_int('12') == 12
        assert parse_int(3.0) == 3
        assert parse_int(-4) == -4

    @pytest.mark.parametrize('value', [None, '1.5', 2.5, 'x', False])
    def test_parse_int_rejects(self, value):
        with pytest.raises(ValueError):
            parse_int(value)

    def test_parse_positive_int_rejects_zero(self):
        with pytest.raises(ValueError):
            parse_positive_int(0)


class TestColumnLimits:

    @pytest.mark.parametrize('value', ['1e30', '100000000', Decimal('1E+400'), 1e20])
    def test_price_too_large_for_column(self, value):
        with pytest.raises(ValueError):
            parse_money(value)

    def test_largest_price_fits(self):
        assert parse_money('99999999.99') == Decimal('99999999.99')

    @pytest.mark.parametrize('value', [2**31, -2**31, '3000000000', 1e12, '1e30'])
    def test_int_outside_32_bits(self, value):
        with pytest.raises(ValueError):
            parse_int(value)

    def test_largest_int_fits(self):
        assert parse_int(2**31 - 1) == 2**31 - 1
        assert parse_positive_int(str(2**31 - 1)) == 2**31 - 1

    def test_huge_quantity_is_not_positive_int(self):
        with pytest.raises(ValueError):
            parse_positive_int(10**12)
