"""Catalog blueprint: product maintenance."""
from flask import Blueprint, request, jsonify

from pos_backend.database import get_session
from pos_backend.exceptions import ValidationError
from pos_backend.middleware import require_roles
from pos_backend.services.product_service import (
    ProductChanges, UNSET, create_product, update_product, deactivate_product
)
from pos_backend.blueprints.metrics import record_outcome
from pos_backend.utils.payload import pick, require_object
from pos_backend.utils.serializers import product_to_dict, error_response

catalog_bp = Blueprint('catalog', __name__, url_prefix='/api/productos')

# API key(s) -> ProductChanges field
FIELD_KEYS = {
    'code': ('codigo',),
    'description': ('descripcion',),
    'location': ('ubicacion',),
    'barcode': ('codigoBarras', 'codigo_barras'),
    'sat_key': ('claveSat', 'clave_sat'),
    'image_path': ('imagen',),
    'stock_qty': ('cantidadStock', 'cantidad_stock'),
    'min_stock': ('stockMinimo', 'stock_minimo'),
    'max_stock': ('stockMaximo', 'stock_maximo'),
    'purchase_price': ('precioCompra', 'precio_compra'),
    'sale_price': ('precioVenta', 'precio_venta'),
    'category_id': ('categoriaId', 'categoria_id'),
    'supplier_id': ('proveedorId', 'proveedor_id'),
}


def changes_from_payload(data):
    """Only keys present in the body become supplied fields."""
    return ProductChanges(**{
        name: pick(data, *keys, default=UNSET)
        for name, keys in FIELD_KEYS.items()
    })


@catalog_bp.route('', methods=['POST'])
@require_roles('admin')
def create():
    try:
        changes = changes_from_payload(require_object(request.get_json(silent=True)))
    except ValidationError as e:
        return error_response(e)

    outcome = create_product(get_session(), changes)
    record_outcome('product_create', outcome)
    if not outcome.ok:
        return error_response(outcome.error)
    return jsonify(product_to_dict(outcome.value)), 201


@catalog_bp.route('/<int:product_id>', methods=['PUT'])
@require_roles('admin')
def update(product_id):
    try:
        changes = changes_from_payload(require_object(request.get_json(silent=True)))
    except ValidationError as e:
        return error_response(e)

    outcome = update_product(get_session(), product_id, changes)
    record_outcome('product_update', outcome)
    if not outcome.ok:
        return error_response(outcome.error)
    return jsonify(product_to_dict(outcome.value))


@catalog_bp.route('/<int:product_id>', methods=['DELETE'])
@require_roles('admin')
def deactivate(product_id):
    outcome = deactivate_product(get_session(), product_id)
    record_outcome('product_deactivate', outcome)
    if not outcome.ok:
        return error_response(outcome.error)
    return jsonify({'mensaje': 'Producto eliminado correctamente'})
