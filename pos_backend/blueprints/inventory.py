"""Inventory blueprint: stock receipts."""
from collections.abc import Mapping

from flask import Blueprint, request, jsonify

from pos_backend.database import get_session
from pos_backend.exceptions import ValidationError
from pos_backend.middleware import require_roles
from pos_backend.services.inventory_service import apply_receipt
from pos_backend.blueprints.metrics import record_outcome
from pos_backend.utils.payload import pick, require_object
from pos_backend.utils.serializers import ledger_row_to_dict, error_response

inventory_bp = Blueprint('inventory', __name__, url_prefix='/api/inventario')


@inventory_bp.route('/entradas', methods=['POST'])
@require_roles('admin')
def receive_stock():
    """
    Apply an inventory receipt.

    Body: {entradas: [{id, cantidad, precioCompra?, precioVenta?}]}
    """
    try:
        data = require_object(request.get_json(silent=True))
        raw_entries = pick(data, 'entradas')
        if not isinstance(raw_entries, list) or not raw_entries:
            raise ValidationError('La lista de entradas está vacía o es inválida')
    except ValidationError as e:
        return error_response(e)

    entries = [
        {
            'product_id': entry.get('id'),
            'qty': entry.get('cantidad'),
            'purchase_price': pick(entry, 'precioCompra', 'precio_compra'),
            'sale_price': pick(entry, 'precioVenta', 'precio_venta'),
        } if isinstance(entry, Mapping) else entry
        for entry in raw_entries
    ]

    outcome = apply_receipt(get_session(), entries)
    record_outcome('receipt', outcome)
    if not outcome.ok:
        return error_response(outcome.error)

    rows = outcome.value
    return jsonify({
        'mensaje': 'Inventario actualizado correctamente',
        'totalActualizados': len(rows),
        'items': [ledger_row_to_dict(row) for row in rows],
    })
