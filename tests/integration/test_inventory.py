"""
Tests for inventory receipts.
"""

import pytest
from decimal import Decimal
from pos_backend.exceptions import ErrorKind, ValidationError
from pos_backend.models import Product
from pos_backend.services.inventory_service import apply_receipt, validate_receipt_entries


class TestApplyReceipt:

    def test_adds_stock_and_keeps_prices(self, session, make_product):
        product_id = make_product(stock=5, purchase_price='6.00', sale_price='10.00')

        outcome = apply_receipt(session, [{'product_id': product_id, 'qty': 10}])

        assert outcome.ok
        row, = outcome.value
        assert row.stock_qty == 15
        assert row.purchase_price == Decimal('6.00')
        assert row.sale_price == Decimal('10.00')

    def test_price_overrides(self, session, make_product):
        repriced = make_product(stock=1, purchase_price='6.00', sale_price='10.00')
        plain = make_product(stock=1, purchase_price='3.00', sale_price='5.00')

        outcome = apply_receipt(session, [
            {'product_id': repriced, 'qty': 2, 'purchase_price': '7.25', 'sale_price': 12},
            {'product_id': plain, 'qty': 3},
        ])

        rows = {r.id: r for r in outcome.value}
        assert rows[repriced].purchase_price == Decimal('7.25')
        assert rows[repriced].sale_price == Decimal('12.00')
        assert rows[plain].purchase_price == Decimal('3.00')
        assert rows[plain].sale_price == Decimal('5.00')
        assert rows[plain].stock_qty == 4

    def test_rows_sorted_by_id(self, session, make_product):
        a = make_product()
        b = make_product()

        outcome = apply_receipt(session, [{'product_id': b, 'qty': 1}, {'product_id': a, 'qty': 1}])

        assert [r.id for r in outcome.value] == [a, b]

    def test_repeated_product_is_summed(self, session, make_product, stock_of):
        product_id = make_product(stock=0)

        outcome = apply_receipt(session, [
            {'product_id': product_id, 'qty': 2, 'sale_price': '11.00'},
            {'product_id': product_id, 'qty': 3, 'sale_price': '11.50'},
        ])

        assert outcome.ok
        assert stock_of(product_id) == 5
        assert session.get(Product, product_id).sale_price == Decimal('11.50')

    def test_unknown_product_cancels_the_batch(self, session, make_product, stock_of):
        product_id = make_product(stock=5, sale_price='10.00')

        outcome = apply_receipt(session, [
            {'product_id': product_id, 'qty': 10, 'sale_price': '99.00'},
            {'product_id': 999999, 'qty': 1},
        ])

        assert outcome.kind is ErrorKind.NOT_FOUND
        assert stock_of(product_id) == 5
        assert session.get(Product, product_id).sale_price == Decimal('10.00')

    def test_inactive_product_cancels_the_batch(self, session, make_product, stock_of):
        active = make_product(stock=1)
        inactive = make_product(stock=1, active=False)

        outcome = apply_receipt(session, [
            {'product_id': active, 'qty': 1},
            {'product_id': inactive, 'qty': 1},
        ])

        assert outcome.kind is ErrorKind.NOT_FOUND
        assert stock_of(active) == 1
        assert stock_of(inactive) == 1

    def test_invalid_entry_rejects_everything(self, session, make_product, stock_of):
        product_id = make_product(stock=1)

        outcome = apply_receipt(session, [
            {'product_id': product_id, 'qty': 5},
            {'product_id': product_id, 'qty': 0},
        ])

        assert outcome.kind is ErrorKind.VALIDATION
        assert stock_of(product_id) == 1


class TestValidateReceiptEntries:

    @pytest.mark.parametrize('entries', [
        [],
        None,
        ['no-es-un-objeto'],
        [{'product_id': 1, 'qty': -3}],
        [{'product_id': 1, 'qty': 1.5}],
        [{'product_id': None, 'qty': 1}],
        [{'product_id': 1, 'qty': 1, 'purchase_price': -1}],
        [{'product_id': 1, 'qty': 1, 'sale_price': 'gratis'}],
    ])
    def test_rejects(self, entries):
        with pytest.raises(ValidationError):
            validate_receipt_entries(entries)

    def test_prices_are_optional(self):
        entry, = validate_receipt_entries([{'product_id': '3', 'qty': '2'}])

        assert entry.product_id == 3
        assert entry.qty == 2
        assert entry.purchase_price is None
        assert entry.sale_price is None
