"""Sales blueprint: confirm sales and browse sales history."""
from flask import Blueprint, request, jsonify, g

from pos_backend.database import get_session
from pos_backend.exceptions import ValidationError
from pos_backend.middleware import require_roles
from pos_backend.services.sales_service import create_sale, list_sales, get_sale_detail
from pos_backend.blueprints.metrics import record_outcome
from pos_backend.utils.payload import pick, require_object, line_items
from pos_backend.utils.serializers import money, sale_header_to_dict, sale_line_to_dict, error_response

sales_bp = Blueprint('sales', __name__, url_prefix='/api/ventas')


@sales_bp.route('', methods=['GET'])
@require_roles()
def sales_history():
    """List every sale, newest first."""
    return jsonify([sale_header_to_dict(s) for s in list_sales(get_session())])


@sales_bp.route('/<int:sale_id>', methods=['GET'])
@require_roles()
def sale_detail(sale_id):
    """Lines of one sale."""
    return jsonify([sale_line_to_dict(line) for line in get_sale_detail(get_session(), sale_id)])


@sales_bp.route('', methods=['POST'])
@require_roles('admin', 'ventas')
def confirm_sale():
    """
    Confirm a sale.

    Body: {formaPago, productos: [{id, cantidad}]}
    """
    try:
        data = require_object(request.get_json(silent=True))
        payment_method = pick(data, 'formaPago', 'forma_pago')
        items = line_items(
            pick(data, 'productos', default=[]),
            'La venta debe contener productos y forma de pago'
        )
    except ValidationError as e:
        return error_response(e)

    outcome = create_sale(get_session(), payment_method, items, user_id=g.user_id)
    record_outcome('sale', outcome)
    if not outcome.ok:
        return error_response(outcome.error)

    receipt = outcome.value
    return jsonify({
        'ok': True,
        'ventaId': receipt.sale_id,
        'total': money(receipt.total),
        'formaPago': receipt.payment_method,
        'itemsCount': receipt.items_count,
    }), 201
