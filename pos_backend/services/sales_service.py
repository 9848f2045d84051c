"""
Sales service with transactional logic.
Handles sale confirmation: stock lock, price snapshot, lines and stock decrement.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, List, Tuple

from sqlalchemy import select, insert
from sqlalchemy.orm import selectinload

from pos_backend.models import Product, Sale, SaleLine, AppUser
from pos_backend.exceptions import ValidationError, NotFoundError, ConflictError, InsufficientStockError
from pos_backend.services.aggregation import AggregatedItems, aggregate_line_items
from pos_backend.services.ledger_service import lock_and_fetch, apply_bulk_delta
from pos_backend.services.transaction import Outcome, run_in_transaction
from pos_backend.utils.money import MAX_TOTAL, to_money, line_subtotal, sum_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaleReceipt:
    """What the cashier gets back once a sale is committed."""
    sale_id: int
    total: Decimal
    payment_method: str
    items_count: int


def create_sale(session, payment_method: str, items: Iterable[Tuple[Any, Any]], user_id: int) -> Outcome[SaleReceipt]:
    """
    Confirm a sale with full transactional processing.

    Steps:
    1. Validate payment method and aggregate duplicate line items
    2. Lock every product row (ascending id) and re-read its stock
    3. Reject missing, inactive or under-stocked products
    4. Copy current sale prices into lines and compute the total
    5. Insert sale + lines, decrement stock in one statement
    6. Commit

    Nothing is written if any step fails.
    """
    if not isinstance(payment_method, str) or not payment_method.strip():
        return Outcome.failure(ValidationError('La venta debe contener productos y forma de pago'))
    if len(payment_method.strip()) > 40:
        return Outcome.failure(ValidationError('Forma de pago excede 40 caracteres'))
    try:
        aggregated = aggregate_line_items(items)
    except ValidationError as e:
        return Outcome.failure(e)

    outcome = run_in_transaction(
        session, _record_sale, payment_method.strip(), aggregated, user_id,
        operation='Venta'
    )
    if outcome.ok:
        receipt = outcome.value
        logger.info(
            f"Venta #{receipt.sale_id} confirmada: total={receipt.total} "
            f"items={receipt.items_count} usuario={user_id}"
        )
    return outcome


def _record_sale(session, payment_method: str, aggregated: AggregatedItems, user_id: int) -> SaleReceipt:
    # 1. Lock stock levels
    products = lock_and_fetch(session, aggregated.product_ids)

    # 2. Validate against the locked values
    for product in products:
        if not product.active:
            raise ConflictError(f'El producto "{product.description}" está inactivo')
        requested = aggregated.quantities[product.id]
        if product.stock_qty < requested:
            raise InsufficientStockError(product.description, requested, product.stock_qty)

    # 3. Prepare lines in request order with the price in force right now
    products_dict = {p.id: p for p in products}
    sale_lines_data = []
    for pid, qty in aggregated.quantities.items():
        unit_price = to_money(products_dict[pid].sale_price)
        sale_lines_data.append({
            'product_id': pid,
            'qty': qty,
            'unit_price': unit_price,
            'subtotal': line_subtotal(unit_price, qty),
        })
    sale_total = sum_money(line['subtotal'] for line in sale_lines_data)
    if sale_total > MAX_TOTAL:
        raise ValidationError('El total de la venta excede el máximo permitido')

    # 4. Create Sale
    sale = Sale(total=sale_total, payment_method=payment_method, user_id=user_id)
    session.add(sale)
    session.flush()

    # 5. Create SaleLines
    session.execute(
        insert(SaleLine),
        [dict(line, sale_id=sale.id) for line in sale_lines_data]
    )

    # 6. Decrement stock
    rows = apply_bulk_delta(session, {pid: -qty for pid, qty in aggregated.quantities.items()})
    if len(rows) != len(aggregated):
        raise NotFoundError('Uno o más productos no existen en la base de datos')

    return SaleReceipt(
        sale_id=sale.id,
        total=sale_total,
        payment_method=payment_method,
        items_count=len(sale_lines_data),
    )


def list_sales(session) -> List[dict]:
    """Sales history, newest first, with the seller's name."""
    rows = session.execute(
        select(Sale, AppUser.username, AppUser.full_name)
        .join(AppUser, AppUser.id == Sale.user_id)
        .order_by(Sale.created_at.desc(), Sale.id.desc())
    ).all()
    return [
        {
            'id': sale.id,
            'created_at': sale.created_at,
            'total': sale.total,
            'payment_method': sale.payment_method,
            'username': username,
            'seller_name': full_name,
        }
        for sale, username, full_name in rows
    ]


def get_sale_detail(session, sale_id: int) -> List[dict]:
    """
    Lines of a committed sale with the product description.

    The description is looked up live; a product removed since the sale
    leaves it as None while price and quantity stay as recorded.
    """
    sale = session.execute(
        select(Sale).where(Sale.id == sale_id).options(selectinload(Sale.lines))
    ).scalar_one_or_none()
    if sale is None:
        raise NotFoundError(f'Venta {sale_id} no encontrada')

    descriptions = dict(session.execute(
        select(Product.id, Product.description)
        .where(Product.id.in_([line.product_id for line in sale.lines]))
    ).all())
    return [
        {
            'product_id': line.product_id,
            'description': descriptions.get(line.product_id),
            'qty': line.qty,
            'unit_price': line.unit_price,
            'subtotal': line.subtotal,
        }
        for line in sale.lines
    ]
