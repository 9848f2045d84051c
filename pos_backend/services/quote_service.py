"""Quotation service: advisory price snapshots that never touch stock."""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from io import BytesIO
from typing import Any, Dict, Iterable, List, Optional, Tuple
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import A4
from reportlab.lib import colors
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_CENTER

from sqlalchemy import select, insert, delete
from sqlalchemy.orm import Session

from pos_backend.models import Quotation, QuotationLine, Product, AppUser
from pos_backend.exceptions import ValidationError, NotFoundError
from pos_backend.services.ledger_service import fetch_snapshot
from pos_backend.services.transaction import Outcome, run_in_transaction
from pos_backend.utils.money import MAX_TOTAL, to_money, line_subtotal, sum_money, parse_int, parse_positive_int

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_NAME = 'Público General'
DEFAULT_PAYMENT_METHOD = 'Efectivo'


@dataclass(frozen=True)
class QuoteItem:
    product_id: int
    qty: int


@dataclass(frozen=True)
class QuotationSummary:
    quotation_id: int
    total: Decimal


def parse_quote_items(items: Iterable[Tuple[Any, Any]]) -> List[QuoteItem]:
    """
    Validate requested lines without merging duplicates.

    A missing or non-positive quantity is quoted as 1 unit.
    """
    parsed = []
    for raw_id, raw_qty in items or ():
        try:
            product_id = parse_positive_int(raw_id)
            qty = 1 if raw_qty in (None, '') else max(1, parse_int(raw_qty))
        except ValueError:
            raise ValidationError('Producto con datos inválidos en la cotización')
        parsed.append(QuoteItem(product_id=product_id, qty=qty))

    if not parsed:
        raise ValidationError('La cotización debe tener al menos un producto válido')
    return parsed


def _build_lines(session: Session, items: List[QuoteItem]) -> Tuple[List[Dict[str, Any]], Decimal]:
    """Price each requested line from an unlocked read of the catalog."""
    products = fetch_snapshot(session, [item.product_id for item in items], active_only=True)

    lines = []
    for item in items:
        product = products.get(item.product_id)
        if product is None:
            raise NotFoundError(f'Producto ID {item.product_id} no encontrado o inactivo')
        unit_price = to_money(product.sale_price)
        lines.append({
            'product_id': product.id,
            'description': product.description,
            'unit_price': unit_price,
            'qty': item.qty,
            'subtotal': line_subtotal(unit_price, item.qty),
        })
    total = sum_money(line['subtotal'] for line in lines)
    if total > MAX_TOTAL:
        raise ValidationError('El total de la cotización excede el máximo permitido')
    return lines, total


def _clean_text(value: Any, label: str, max_length: int) -> Optional[str]:
    """Stripped text, or None when absent or blank."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f'{label} inválido')
    text = value.strip()
    if len(text) > max_length:
        raise ValidationError(f'{label} excede {max_length} caracteres')
    return text or None


def _insert_lines(session: Session, quotation_id: int, lines: List[Dict[str, Any]]):
    session.execute(
        insert(QuotationLine),
        [dict(line, quotation_id=quotation_id) for line in lines]
    )


def create_quotation(
    session: Session,
    items: Iterable[Tuple[Any, Any]],
    user_id: Optional[int],
    client_name: Optional[str] = None,
    payment_method: Optional[str] = None,
    default_client: str = DEFAULT_CLIENT_NAME,
    default_payment: str = DEFAULT_PAYMENT_METHOD,
) -> Outcome[QuotationSummary]:
    """Create a quotation from the current catalog prices."""
    try:
        parsed = parse_quote_items(items)
        client_name = _clean_text(client_name, 'Cliente', 255)
        payment_method = _clean_text(payment_method, 'Forma de pago', 40)
    except ValidationError as e:
        return Outcome.failure(e)

    def work(session):
        lines, total = _build_lines(session, parsed)
        quotation = Quotation(
            client_name=client_name or default_client,
            payment_method=payment_method or default_payment,
            total=total,
            user_id=user_id,
        )
        session.add(quotation)
        session.flush()
        _insert_lines(session, quotation.id, lines)
        return QuotationSummary(quotation_id=quotation.id, total=total)

    outcome = run_in_transaction(session, work, operation='Cotización')
    if outcome.ok:
        logger.info(f"Cotización #{outcome.value.quotation_id} creada: total={outcome.value.total}")
    return outcome


def update_quotation(
    session: Session,
    quotation_id: int,
    items: Iterable[Tuple[Any, Any]],
    client_name: Optional[str] = None,
    payment_method: Optional[str] = None,
    default_client: str = DEFAULT_CLIENT_NAME,
) -> Outcome[QuotationSummary]:
    """
    Replace a quotation's lines and header in one transaction.

    The client name falls back to the placeholder when omitted; the payment
    method is only overwritten when supplied.
    """
    try:
        parsed = parse_quote_items(items)
        client_name = _clean_text(client_name, 'Cliente', 255)
        payment_method = _clean_text(payment_method, 'Forma de pago', 40)
    except ValidationError as e:
        return Outcome.failure(e)

    def work(session):
        quotation = session.get(Quotation, quotation_id, with_for_update=True)
        if quotation is None:
            raise NotFoundError('Cotización no encontrada')

        lines, total = _build_lines(session, parsed)

        quotation.client_name = client_name or default_client
        if payment_method:
            quotation.payment_method = payment_method
        quotation.total = total

        session.execute(delete(QuotationLine).where(QuotationLine.quotation_id == quotation_id))
        _insert_lines(session, quotation_id, lines)
        session.flush()
        return QuotationSummary(quotation_id=quotation_id, total=total)

    outcome = run_in_transaction(session, work, operation='Actualización de cotización')
    if outcome.ok:
        logger.info(f"Cotización #{quotation_id} actualizada: total={outcome.value.total}")
    return outcome


def delete_quotation(session: Session, quotation_id: int) -> Outcome[int]:
    """Hard delete a quotation and its lines."""
    def work(session):
        quotation = session.get(Quotation, quotation_id)
        if quotation is None:
            raise NotFoundError('Cotización no encontrada')
        session.delete(quotation)
        session.flush()
        return quotation_id

    return run_in_transaction(session, work, operation='Eliminación de cotización')


def list_quotations(session: Session, limit: int = 100) -> List[dict]:
    """Most recent quotations with the seller's name."""
    rows = session.execute(
        select(Quotation, AppUser.full_name)
        .outerjoin(AppUser, AppUser.id == Quotation.user_id)
        .order_by(Quotation.created_at.desc(), Quotation.id.desc())
        .limit(limit)
    ).all()
    return [_header_dict(quotation, seller) for quotation, seller in rows]


def get_quotation_detail(session: Session, quotation_id: int) -> dict:
    """Header plus snapshot lines, each with the product's current stock."""
    row = session.execute(
        select(Quotation, AppUser.full_name)
        .outerjoin(AppUser, AppUser.id == Quotation.user_id)
        .where(Quotation.id == quotation_id)
    ).first()
    if row is None:
        raise NotFoundError('Cotización no encontrada')
    quotation, seller = row

    line_rows = session.execute(
        select(QuotationLine, Product.stock_qty)
        .outerjoin(Product, Product.id == QuotationLine.product_id)
        .where(QuotationLine.quotation_id == quotation_id)
        .order_by(QuotationLine.id)
    ).all()

    detail = _header_dict(quotation, seller)
    detail['lines'] = [
        {
            'product_id': line.product_id,
            'description': line.description,
            'unit_price': line.unit_price,
            'qty': line.qty,
            'subtotal': line.subtotal,
            'stock_qty': stock_qty,
        }
        for line, stock_qty in line_rows
    ]
    return detail


def _header_dict(quotation: Quotation, seller: Optional[str]) -> dict:
    return {
        'id': quotation.id,
        'created_at': quotation.created_at,
        'client_name': quotation.client_name,
        'payment_method': quotation.payment_method,
        'total': quotation.total,
        'status': quotation.status,
        'seller_name': seller,
    }


def render_quotation_pdf(detail: dict, business_info: dict) -> BytesIO:
    """Render a quotation detail (see get_quotation_detail) as an A4 PDF."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=0.75*inch,
        leftMargin=0.75*inch,
        topMargin=0.75*inch,
        bottomMargin=0.75*inch
    )

    elements = []
    styles = getSampleStyleSheet()

    title_style = ParagraphStyle(
        'QuoteTitle',
        parent=styles['Heading1'],
        fontSize=22,
        textColor=colors.HexColor('#2C3E50'),
        spaceAfter=12,
        alignment=TA_CENTER,
        fontName='Helvetica-Bold'
    )
    header_style = ParagraphStyle(
        'QuoteHeader',
        parent=styles['Normal'],
        fontSize=10,
        textColor=colors.HexColor('#7F8C8D'),
        alignment=TA_CENTER,
        spaceAfter=6
    )

    # 1. Title and Business Header
    elements.append(Paragraph("COTIZACIÓN", title_style))
    if business_info.get('name'):
        elements.append(Paragraph(f"<b>{escape(business_info['name'])}</b>", header_style))
    if business_info.get('address'):
        elements.append(Paragraph(escape(business_info['address']), header_style))
    if business_info.get('phone'):
        elements.append(Paragraph(f"Tel: {escape(business_info['phone'])}", header_style))
    elements.append(Spacer(1, 0.3*inch))

    # 2. Metadata
    issued = detail.get('created_at') or datetime.now()
    valid_days = business_info.get('valid_days', 7)
    info_rows = [
        ['Cotización N°:', str(detail['id'])],
        ['Fecha:', issued.strftime('%d/%m/%Y')],
        ['Válida hasta:', (issued + timedelta(days=valid_days)).strftime('%d/%m/%Y')],
        ['Cliente:', detail['client_name']],
        ['Forma de pago:', detail['payment_method']],
    ]
    if detail.get('seller_name'):
        info_rows.append(['Vendedor:', detail['seller_name']])
    info_table = Table(info_rows, colWidths=[2*inch, 3*inch])
    info_table.setStyle(TableStyle([
        ('ALIGN', (0, 0), (0, -1), 'RIGHT'),
        ('ALIGN', (1, 0), (1, -1), 'LEFT'),
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('TEXTCOLOR', (0, 0), (-1, -1), colors.HexColor('#34495E')),
    ]))
    elements.append(info_table)
    elements.append(Spacer(1, 0.3*inch))

    # 3. Items Table, straight from the stored snapshot
    table_data = [['Producto', 'Cantidad', 'Precio Unit.', 'Subtotal']]
    for line in detail['lines']:
        table_data.append([
            line['description'],
            str(line['qty']),
            f"${line['unit_price']:.2f}",
            f"${line['subtotal']:.2f}",
        ])
    items_table = Table(table_data, colWidths=[3.6*inch, 0.9*inch, 1.1*inch, 1.1*inch])
    items_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#3498DB')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('ALIGN', (1, 1), (1, -1), 'CENTER'),
        ('ALIGN', (2, 1), (-1, -1), 'RIGHT'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.HexColor('#BDC3C7')),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#ECF0F1')]),
    ]))
    elements.append(items_table)
    elements.append(Spacer(1, 0.2*inch))

    # 4. Total and Footer
    total_table = Table([['TOTAL:', f"${detail['total']:.2f}"]], colWidths=[5.6*inch, 1.1*inch])
    total_table.setStyle(TableStyle([
        ('ALIGN', (0, 0), (-1, -1), 'RIGHT'),
        ('FONTNAME', (0, 0), (-1, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 14),
        ('TEXTCOLOR', (0, 0), (-1, -1), colors.HexColor('#27AE60')),
        ('BOX', (0, 0), (-1, -1), 2, colors.HexColor('#27AE60')),
    ]))
    elements.append(total_table)
    elements.append(Spacer(1, 0.4*inch))

    footer_style = ParagraphStyle('QuoteFooter', parent=styles['Normal'], fontSize=9, textColor=colors.HexColor('#95A5A6'), alignment=TA_CENTER)
    elements.append(Paragraph(
        f"<b>IMPORTANTE:</b><br/>Precios sujetos a cambio sin previo aviso.<br/>"
        f"Validez: {valid_days} días.<br/><i>No constituye comprobante de venta.</i>",
        footer_style
    ))

    doc.build(elements)
    buffer.seek(0)
    return buffer


def generate_quotation_pdf(session: Session, quotation_id: int, business_info: dict) -> BytesIO:
    """Generate the PDF of a stored quotation."""
    return render_quotation_pdf(get_quotation_detail(session, quotation_id), business_info)
