"""Catalog maintenance: create, edit and deactivate products."""
import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from pos_backend.models import Product
from pos_backend.exceptions import ValidationError, NotFoundError, ConflictError
from pos_backend.services.transaction import Outcome, run_in_transaction
from pos_backend.utils.money import parse_money, parse_int

logger = logging.getLogger(__name__)


class _Unset:
    """Marker for a field the caller did not supply."""

    def __repr__(self):
        return 'UNSET'

    def __bool__(self):
        return False


UNSET: Any = _Unset()

_TEXT_FIELDS = ('code', 'description', 'location', 'barcode', 'sat_key', 'image_path')
_NULLABLE_TEXT_FIELDS = ('barcode', 'sat_key', 'image_path')
_COUNT_FIELDS = ('stock_qty', 'min_stock', 'max_stock')
_PRICE_FIELDS = ('purchase_price', 'sale_price')
_REFERENCE_FIELDS = ('category_id', 'supplier_id')


@dataclass
class ProductChanges:
    """
    Explicit per-field optional values for a product write.

    Fields left as UNSET are not written at all; None is a real value
    (it clears nullable columns such as barcode).
    """
    code: Any = UNSET
    description: Any = UNSET
    location: Any = UNSET
    barcode: Any = UNSET
    sat_key: Any = UNSET
    image_path: Any = UNSET
    stock_qty: Any = UNSET
    min_stock: Any = UNSET
    max_stock: Any = UNSET
    purchase_price: Any = UNSET
    sale_price: Any = UNSET
    category_id: Any = UNSET
    supplier_id: Any = UNSET

    def supplied(self) -> Dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }


def normalize_changes(changes: ProductChanges) -> Dict[str, Any]:
    """
    Validate and coerce supplied fields into column values.

    Raises:
        ValidationError: on the first invalid field.
    """
    values = {}
    for name, value in changes.supplied().items():
        if name in _TEXT_FIELDS:
            if value is not None and not isinstance(value, str):
                raise ValidationError(f'Valor inválido para {name}')
            text = (value or '').strip()
            max_length = Product.__table__.c[name].type.length
            if len(text) > max_length:
                raise ValidationError(f'{name} excede {max_length} caracteres')
            if name in _NULLABLE_TEXT_FIELDS:
                values[name] = text or None
            else:
                values[name] = text
        elif name in _COUNT_FIELDS:
            try:
                number = parse_int(value)
            except ValueError:
                raise ValidationError(f'Valor inválido para {name}')
            if number < 0:
                raise ValidationError(f'{name} no puede ser negativo')
            values[name] = number
        elif name in _PRICE_FIELDS:
            try:
                values[name] = parse_money(value)
            except ValueError as e:
                raise ValidationError(f'{name}: {e}')
        elif name in _REFERENCE_FIELDS:
            if value in (None, ''):
                values[name] = None
                continue
            try:
                values[name] = parse_int(value)
            except ValueError:
                raise ValidationError(f'Valor inválido para {name}')

    for required in ('code', 'description'):
        if required in values and not values[required]:
            raise ValidationError(f'El campo {required} es obligatorio')
    return values


def _ensure_unique(session, values: Mapping[str, Any], product_id=None):
    """Reject a code or barcode already used by another product."""
    for column, label in ((Product.code, 'código'), (Product.barcode, 'código de barras')):
        value = values.get(column.key)
        if not value:
            continue
        stmt = select(Product.id).where(column == value)
        if product_id is not None:
            stmt = stmt.where(Product.id != product_id)
        if session.execute(stmt).first():
            raise ConflictError(f'El {label} "{value}" ya está en uso.')


def _flush_or_conflict(session):
    try:
        session.flush()
    except IntegrityError:
        raise ConflictError('El código o código de barras ya está en uso.')


def create_product(session, changes: ProductChanges) -> Outcome[Product]:
    """Create a product. code and description are required."""
    try:
        values = normalize_changes(changes)
    except ValidationError as e:
        return Outcome.failure(e)
    if not values.get('code'):
        return Outcome.failure(ValidationError('El código es obligatorio'))
    if not values.get('description'):
        return Outcome.failure(ValidationError('La descripción es obligatoria'))

    def work(session):
        _ensure_unique(session, values)
        product = Product(**values)
        session.add(product)
        _flush_or_conflict(session)
        return product

    outcome = run_in_transaction(session, work, operation='Alta de producto')
    if outcome.ok:
        logger.info(f"Producto #{outcome.value.id} creado ({values['code']})")
    return outcome


def update_product(session, product_id: int, changes: ProductChanges) -> Outcome[Product]:
    """Write only the supplied fields of an existing product."""
    try:
        values = normalize_changes(changes)
    except ValidationError as e:
        return Outcome.failure(e)

    def work(session):
        product = session.get(Product, product_id, with_for_update=True)
        if product is None:
            raise NotFoundError('Producto no encontrado')
        _ensure_unique(session, values, product_id=product_id)
        for name, value in values.items():
            setattr(product, name, value)
        _flush_or_conflict(session)
        return product

    return run_in_transaction(session, work, operation='Edición de producto')


def deactivate_product(session, product_id: int) -> Outcome[int]:
    """Soft delete: the product disappears from sales and receipts."""
    def work(session):
        result = session.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(active=False)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError('Producto no encontrado')
        return product_id

    return run_in_transaction(session, work, operation='Baja de producto')
