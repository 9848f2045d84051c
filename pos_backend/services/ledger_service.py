"""
Product ledger: the only code that reads stock for update or changes it.

All functions run inside the caller's open transaction and never commit.
"""
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select, update, case

from pos_backend.models import Product
from pos_backend.exceptions import NotFoundError

# Columns handed back by apply_bulk_delta
LEDGER_COLUMNS = (
    Product.id,
    Product.code,
    Product.description,
    Product.stock_qty,
    Product.purchase_price,
    Product.sale_price,
)


def lock_and_fetch(session, product_ids: Iterable[int], active_only: bool = False) -> List[Product]:
    """
    Lock product rows FOR UPDATE and return them ordered by id.

    Ids are locked in ascending order so two transactions touching an
    overlapping set of products always queue on the same first row instead of
    deadlocking. Blocks while another transaction holds any of the rows, then
    returns the committed values.

    Raises:
        NotFoundError: if fewer rows than distinct ids come back.
    """
    ids = sorted(set(product_ids))
    if not ids:
        return []

    stmt = (
        select(Product)
        .where(Product.id.in_(ids))
        .order_by(Product.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    if active_only:
        stmt = stmt.where(Product.active.is_(True))

    products = session.execute(stmt).scalars().all()
    if len(products) != len(ids):
        found = {p.id for p in products}
        missing = [pid for pid in ids if pid not in found]
        raise NotFoundError(
            'Uno o más productos no existen en la base de datos',
            payload={'faltantes': missing}
        )
    return products


def apply_bulk_delta(
    session,
    deltas: Dict[int, int],
    purchase_prices: Optional[Dict[int, Decimal]] = None,
    sale_prices: Optional[Dict[int, Decimal]] = None,
    active_only: bool = False,
) -> list:
    """
    Add a signed delta to each product's stock in one UPDATE statement.

    A price column is written only when at least one override for it was
    supplied; rows without an override keep their current value.

    Returns the affected rows (id, code, description, stock_qty,
    purchase_price, sale_price). The caller must compare the row count with
    len(deltas) and abort on mismatch.
    """
    if not deltas:
        return []

    values = {
        Product.stock_qty: Product.stock_qty + case(deltas, value=Product.id, else_=0),
    }
    if purchase_prices:
        values[Product.purchase_price] = case(
            purchase_prices, value=Product.id, else_=Product.purchase_price
        )
    if sale_prices:
        values[Product.sale_price] = case(
            sale_prices, value=Product.id, else_=Product.sale_price
        )

    stmt = update(Product).where(Product.id.in_(sorted(deltas)))
    if active_only:
        stmt = stmt.where(Product.active.is_(True))
    stmt = (
        stmt.values(values)
        .returning(*LEDGER_COLUMNS)
        .execution_options(synchronize_session=False)
    )
    return session.execute(stmt).all()


def fetch_snapshot(session, product_ids: Iterable[int], active_only: bool = True) -> Dict[int, Product]:
    """Unlocked point-in-time read of products by id."""
    ids = sorted(set(product_ids))
    if not ids:
        return {}
    stmt = select(Product).where(Product.id.in_(ids))
    if active_only:
        stmt = stmt.where(Product.active.is_(True))
    return {p.id: p for p in session.execute(stmt).scalars()}
