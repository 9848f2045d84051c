"""JSON shapes returned by the API."""
from decimal import Decimal
from flask import jsonify


def money(value):
    """Money goes out as a JSON number."""
    if value is None:
        return None
    return float(value) if isinstance(value, Decimal) else value


def timestamp(value):
    return value.isoformat() if value is not None else None


def product_to_dict(product):
    """Full product document (catalog endpoints)."""
    return {
        'id': product.id,
        'codigo': product.code,
        'codigoBarras': product.barcode,
        'descripcion': product.description,
        'ubicacion': product.location,
        'claveSat': product.sat_key,
        'cantidadStock': product.stock_qty,
        'stockMinimo': product.min_stock,
        'stockMaximo': product.max_stock,
        'stockFaltante': product.missing_qty,
        'precioCompra': money(product.purchase_price),
        'precioVenta': money(product.sale_price),
        'categoriaId': product.category_id,
        'proveedorId': product.supplier_id,
        'imagen': product.image_path,
        'activo': product.active,
    }


def ledger_row_to_dict(row):
    """Row returned by the ledger's bulk update."""
    return {
        'id': row.id,
        'codigo': row.code,
        'descripcion': row.description,
        'cantidadStock': row.stock_qty,
        'precioCompra': money(row.purchase_price),
        'precioVenta': money(row.sale_price),
    }


def sale_header_to_dict(sale):
    return {
        'id': sale['id'],
        'fecha': timestamp(sale['created_at']),
        'total': money(sale['total']),
        'formaPago': sale['payment_method'],
        'usuario': sale['username'],
        'nombreVendedor': sale['seller_name'],
    }


def sale_line_to_dict(line):
    return {
        'productoId': line['product_id'],
        'descripcion': line['description'],
        'cantidad': line['qty'],
        'precioUnitario': money(line['unit_price']),
        'subtotal': money(line['subtotal']),
    }


def quotation_to_dict(detail):
    data = {
        'id': detail['id'],
        'fecha': timestamp(detail['created_at']),
        'cliente': detail['client_name'],
        'formaPago': detail['payment_method'],
        'total': money(detail['total']),
        'estado': detail['status'],
        'vendedor': detail['seller_name'],
    }
    if 'lines' in detail:
        data['productos'] = [
            {
                'id': line['product_id'],
                'descripcion': line['description'],
                'precioUnitario': money(line['unit_price']),
                'cantidad': line['qty'],
                'subtotal': money(line['subtotal']),
                'cantidadStock': line['stock_qty'],
            }
            for line in detail['lines']
        ]
    return data


def error_response(error):
    """(body, status) for a PosError."""
    return jsonify(error.to_dict()), error.status_code
