"""Line-item aggregation for sale requests."""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple, Any

from pos_backend.exceptions import ValidationError
from pos_backend.utils.money import parse_positive_int


@dataclass
class AggregatedItems:
    """One net quantity per product, keyed in order of first appearance."""
    quantities: Dict[int, int] = field(default_factory=dict)

    @property
    def product_ids(self) -> List[int]:
        return list(self.quantities)

    @property
    def total_units(self) -> int:
        return sum(self.quantities.values())

    def __len__(self):
        return len(self.quantities)


def aggregate_line_items(items: Iterable[Tuple[Any, Any]]) -> AggregatedItems:
    """
    Collapse repeated product references into a single demand per product.

    A request listing product 7 with 2 and then 3 units yields {7: 5}, so the
    stock check and the row lock see the combined demand.

    Raises:
        ValidationError: empty list, missing/zero id, or quantity <= 0.
    """
    aggregated = AggregatedItems()
    for raw_id, raw_qty in items or ():
        try:
            product_id = parse_positive_int(raw_id)
            qty = parse_positive_int(raw_qty)
        except ValueError:
            raise ValidationError('Producto con datos inválidos')
        aggregated.quantities[product_id] = aggregated.quantities.get(product_id, 0) + qty

    if not aggregated:
        raise ValidationError('La venta debe contener productos y forma de pago')
    return aggregated
