"""Inventory receipt service: stock entries with optional price updates."""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pos_backend.exceptions import ValidationError, NotFoundError
from pos_backend.services.ledger_service import apply_bulk_delta
from pos_backend.services.transaction import Outcome, run_in_transaction
from pos_backend.utils.money import parse_money, parse_positive_int

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReceiptEntry:
    """One validated stock entry."""
    product_id: int
    qty: int
    purchase_price: Optional[Decimal] = None
    sale_price: Optional[Decimal] = None


def validate_receipt_entries(entries: Iterable[Mapping[str, Any]]) -> List[ReceiptEntry]:
    """
    Validate raw entries ({product_id, qty, purchase_price?, sale_price?}).

    Raises:
        ValidationError: on the first invalid entry.
    """
    if not entries:
        raise ValidationError('La lista de entradas está vacía o es inválida')

    validated = []
    for raw in entries:
        if not isinstance(raw, Mapping):
            raise ValidationError('La lista de entradas está vacía o es inválida')
        raw_id = raw.get('product_id')
        try:
            product_id = parse_positive_int(raw_id)
            qty = parse_positive_int(raw.get('qty'))
        except ValueError:
            raise ValidationError(
                f'Datos inválidos en producto ID {raw_id or "?"}. La cantidad debe ser positiva.'
            )

        prices = {}
        for key, label in (('purchase_price', 'compra'), ('sale_price', 'venta')):
            value = raw.get(key)
            if value is None:
                prices[key] = None
                continue
            try:
                prices[key] = parse_money(value)
            except ValueError:
                raise ValidationError(f'Precio de {label} inválido en ID {product_id}')

        validated.append(ReceiptEntry(product_id=product_id, qty=qty, **prices))
    return validated


def apply_receipt(session, entries: Iterable[Mapping[str, Any]]) -> Outcome[list]:
    """
    Apply an inventory receipt atomically.

    Every entry is validated before the database is touched. Stock is then
    increased with one UPDATE restricted to active products; if it does not
    hit every requested product the whole batch is rolled back.
    """
    try:
        validated = validate_receipt_entries(entries)
    except ValidationError as e:
        return Outcome.failure(e)

    outcome = run_in_transaction(session, _record_receipt, validated, operation='Entrada de inventario')
    if outcome.ok:
        logger.info(f"Entrada de inventario aplicada a {len(outcome.value)} productos")
    return outcome


def _record_receipt(session, entries: List[ReceiptEntry]) -> list:
    deltas: Dict[int, int] = {}
    purchase_prices: Dict[int, Decimal] = {}
    sale_prices: Dict[int, Decimal] = {}
    for entry in entries:
        deltas[entry.product_id] = deltas.get(entry.product_id, 0) + entry.qty
        if entry.purchase_price is not None:
            purchase_prices[entry.product_id] = entry.purchase_price
        if entry.sale_price is not None:
            sale_prices[entry.product_id] = entry.sale_price

    rows = apply_bulk_delta(
        session, deltas,
        purchase_prices=purchase_prices,
        sale_prices=sale_prices,
        active_only=True,
    )
    if len(rows) != len(deltas):
        raise NotFoundError(
            'Uno o más productos no fueron encontrados o están inactivos. Operación cancelada.'
        )
    return sorted(rows, key=lambda row: row.id)
