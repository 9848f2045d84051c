"""
Tests for sale confirmation.
"""

import pytest
from decimal import Decimal
from pos_backend.exceptions import ErrorKind, InsufficientStockError
from pos_backend.models import Sale, SaleLine
from pos_backend.services.sales_service import create_sale, list_sales, get_sale_detail
from pos_backend.services.inventory_service import apply_receipt
from pos_backend.services.product_service import ProductChanges, update_product


class TestCreateSale:

    def test_confirms_and_decrements_stock(self, session, cashier, make_product, stock_of):
        hammer = make_product(stock=5, sale_price='10.00')
        nails = make_product(stock=100, sale_price='0.35')

        outcome = create_sale(session, 'Efectivo', [(hammer, 2), (nails, 3)], user_id=cashier)

        assert outcome.ok
        receipt = outcome.value
        assert receipt.total == Decimal('21.05')
        assert receipt.items_count == 2
        assert receipt.payment_method == 'Efectivo'
        assert stock_of(hammer) == 3
        assert stock_of(nails) == 97

    def test_total_is_sum_of_line_subtotals(self, session, cashier, make_product):
        a = make_product(sale_price='19.99')
        b = make_product(sale_price='0.10')

        outcome = create_sale(session, 'Tarjeta', [(a, 7), (b, 3)], user_id=cashier)

        sale = session.get(Sale, outcome.value.sale_id)
        for line in sale.lines:
            assert line.subtotal == (line.unit_price * line.qty).quantize(Decimal('0.01'))
        assert sale.total == sum(line.subtotal for line in sale.lines)
        assert sale.total == Decimal('140.23')

    def test_duplicate_lines_are_aggregated(self, session, cashier, make_product, stock_of):
        product_id = make_product(stock=5)

        outcome = create_sale(session, 'Efectivo', [(product_id, 2), (product_id, 3)], user_id=cashier)

        assert outcome.ok
        assert outcome.value.items_count == 1
        lines = session.query(SaleLine).filter_by(sale_id=outcome.value.sale_id).all()
        assert [(l.product_id, l.qty) for l in lines] == [(product_id, 5)]
        assert stock_of(product_id) == 0

    def test_duplicates_checked_against_combined_demand(self, session, cashier, make_product, stock_of):
        product_id = make_product(stock=4)

        outcome = create_sale(session, 'Efectivo', [(product_id, 2), (product_id, 3)], user_id=cashier)

        assert outcome.kind is ErrorKind.CONFLICT
        assert stock_of(product_id) == 4

    def test_insufficient_stock_writes_nothing(self, session, cashier, make_product, stock_of):
        plenty = make_product(stock=50)
        scarce = make_product(stock=2, description='Pinza')

        outcome = create_sale(session, 'Efectivo', [(plenty, 1), (scarce, 3)], user_id=cashier)

        assert outcome.kind is ErrorKind.CONFLICT
        assert isinstance(outcome.error, InsufficientStockError)
        assert outcome.error.available == 2
        assert outcome.error.payload == {'disponible': 2, 'solicitado': 3}
        assert 'Pinza' in outcome.error.message
        assert stock_of(plenty) == 50
        assert stock_of(scarce) == 2
        assert session.query(Sale).count() == 0

    def test_inactive_product_is_a_conflict(self, session, cashier, make_product, stock_of):
        product_id = make_product(stock=5, active=False)

        outcome = create_sale(session, 'Efectivo', [(product_id, 1)], user_id=cashier)

        assert outcome.kind is ErrorKind.CONFLICT
        assert stock_of(product_id) == 5

    def test_missing_product_is_not_found(self, session, cashier, make_product, stock_of):
        product_id = make_product(stock=5)

        outcome = create_sale(session, 'Efectivo', [(product_id, 1), (999999, 1)], user_id=cashier)

        assert outcome.kind is ErrorKind.NOT_FOUND
        assert stock_of(product_id) == 5
        assert session.query(Sale).count() == 0

    @pytest.mark.parametrize('payment_method, items', [
        ('', [(1, 1)]),
        (None, [(1, 1)]),
        ('Efectivo', []),
        ('Efectivo', [(1, 0)]),
        ('Efectivo', [(1, -1)]),
    ])
    def test_validation_happens_before_storage(self, session, cashier, payment_method, items):
        outcome = create_sale(session, payment_method, items, user_id=cashier)

        assert outcome.kind is ErrorKind.VALIDATION
        assert session.query(Sale).count() == 0

    def test_lines_keep_the_price_of_the_moment(self, session, cashier, make_product):
        product_id = make_product(stock=5, sale_price='10.00')
        sale_id = create_sale(session, 'Efectivo', [(product_id, 1)], user_id=cashier).value.sale_id

        update_product(session, product_id, ProductChanges(sale_price='15.00')).unwrap()
        lines = get_sale_detail(session, sale_id)

        assert lines[0]['unit_price'] == Decimal('10.00')
        assert lines[0]['subtotal'] == Decimal('10.00')


def test_stock_walkthrough(session, cashier, admin, make_product, stock_of):
    """Sell 3 of 5, fail to sell 3 of 2, receive 4, end at 6."""
    product_id = make_product(stock=5)

    assert create_sale(session, 'Efectivo', [(product_id, 3)], user_id=cashier).ok
    assert stock_of(product_id) == 2

    second = create_sale(session, 'Efectivo', [(product_id, 3)], user_id=cashier)
    assert second.kind is ErrorKind.CONFLICT
    assert second.error.available == 2

    assert apply_receipt(session, [{'product_id': product_id, 'qty': 4}]).ok
    assert stock_of(product_id) == 6


class TestSalesHistory:

    def test_list_sales_newest_first(self, session, cashier, make_product):
        product_id = make_product(stock=10)
        first = create_sale(session, 'Efectivo', [(product_id, 1)], user_id=cashier).value
        second = create_sale(session, 'Tarjeta', [(product_id, 1)], user_id=cashier).value

        sales = list_sales(session)

        assert [s['id'] for s in sales] == [second.sale_id, first.sale_id]
        assert sales[0]['payment_method'] == 'Tarjeta'
        assert sales[0]['seller_name'] == 'Usuario Ventas'

    def test_detail_of_unknown_sale(self, session):
        from pos_backend.exceptions import NotFoundError
        with pytest.raises(NotFoundError):
            get_sale_detail(session, 424242)


def test_total_too_large_for_column(session, cashier, make_product, stock_of):
    product_id = make_product(stock=1000, sale_price='99999999.99')

    outcome = create_sale(session, 'Efectivo', [(product_id, 1000)], user_id=cashier)

    assert outcome.kind is ErrorKind.VALIDATION
    assert stock_of(product_id) == 1000
    assert session.query(Sale).count() == 0
