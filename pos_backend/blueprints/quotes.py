"""Quotations blueprint for cotización management."""
from flask import Blueprint, request, jsonify, g, current_app, send_file

from pos_backend.database import get_session
from pos_backend.exceptions import ValidationError
from pos_backend.middleware import require_roles
from pos_backend.services.quote_service import (
    create_quotation,
    update_quotation,
    delete_quotation,
    list_quotations,
    get_quotation_detail,
    generate_quotation_pdf,
)
from pos_backend.blueprints.metrics import record_outcome
from pos_backend.utils.payload import pick, require_object, line_items
from pos_backend.utils.serializers import money, quotation_to_dict, error_response

quotes_bp = Blueprint('quotes', __name__, url_prefix='/api/cotizaciones')


def _read_body():
    """(items, client_name, payment_method) from the request body."""
    data = require_object(request.get_json(silent=True))
    items = line_items(
        pick(data, 'productos', default=[]),
        'La cotización debe tener al menos un producto válido'
    )
    return items, pick(data, 'cliente'), pick(data, 'formaPago', 'forma_pago')


@quotes_bp.route('', methods=['GET'])
@require_roles('admin', 'ventas')
def list_all():
    """Most recent quotations."""
    limit = current_app.config.get('QUOTATIONS_LIST_LIMIT', 100)
    return jsonify([quotation_to_dict(q) for q in list_quotations(get_session(), limit=limit)])


@quotes_bp.route('/<int:quotation_id>', methods=['GET'])
@require_roles()
def view(quotation_id):
    """Quotation header and lines with current stock."""
    return jsonify(quotation_to_dict(get_quotation_detail(get_session(), quotation_id)))


@quotes_bp.route('/<int:quotation_id>/pdf', methods=['GET'])
@require_roles()
def download_pdf(quotation_id):
    """Printable quotation."""
    business_info = {
        'name': current_app.config.get('BUSINESS_NAME'),
        'address': current_app.config.get('BUSINESS_ADDRESS'),
        'phone': current_app.config.get('BUSINESS_PHONE'),
        'valid_days': current_app.config.get('QUOTE_VALID_DAYS', 7),
    }
    pdf = generate_quotation_pdf(get_session(), quotation_id, business_info)
    return send_file(
        pdf,
        mimetype='application/pdf',
        as_attachment=True,
        download_name=f'cotizacion_{quotation_id}.pdf'
    )


@quotes_bp.route('', methods=['POST'])
@require_roles('admin', 'ventas')
def create():
    """
    Create a quotation.

    Body: {cliente?, formaPago?, productos: [{id, cantidad}]}
    """
    try:
        items, client_name, payment_method = _read_body()
    except ValidationError as e:
        return error_response(e)

    outcome = create_quotation(
        get_session(), items,
        user_id=g.user_id,
        client_name=client_name,
        payment_method=payment_method,
        default_client=current_app.config['DEFAULT_CLIENT_NAME'],
        default_payment=current_app.config['DEFAULT_PAYMENT_METHOD'],
    )
    record_outcome('quotation_create', outcome)
    if not outcome.ok:
        return error_response(outcome.error)

    return jsonify({
        'cotizacionId': outcome.value.quotation_id,
        'total': money(outcome.value.total),
    }), 201


@quotes_bp.route('/<int:quotation_id>', methods=['PUT'])
@require_roles('admin', 'ventas')
def update(quotation_id):
    """Replace a quotation's client, payment method and lines."""
    try:
        items, client_name, payment_method = _read_body()
    except ValidationError as e:
        return error_response(e)

    outcome = update_quotation(
        get_session(), quotation_id, items,
        client_name=client_name,
        payment_method=payment_method,
        default_client=current_app.config['DEFAULT_CLIENT_NAME'],
    )
    record_outcome('quotation_update', outcome)
    if not outcome.ok:
        return error_response(outcome.error)

    return jsonify({'ok': True, 'id': quotation_id, 'total': money(outcome.value.total)})


@quotes_bp.route('/<int:quotation_id>', methods=['DELETE'])
@require_roles('admin', 'ventas')
def delete(quotation_id):
    """Delete a quotation and its lines."""
    outcome = delete_quotation(get_session(), quotation_id)
    record_outcome('quotation_delete', outcome)
    if not outcome.ok:
        return error_response(outcome.error)
    return jsonify({'ok': True, 'mensaje': 'Cotización eliminada'})
