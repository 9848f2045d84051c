"""QuotationLine model for quotation line items."""
from sqlalchemy import Column, Integer, String, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from pos_backend.database import Base


class QuotationLine(Base):
    """
    Quotation Line (Detalle de cotización).

    Stores a snapshot of the product description and price at the time the
    quotation was written, so later catalog edits do not alter it.
    """

    __tablename__ = 'quotation_line'

    id = Column(Integer, primary_key=True, autoincrement=True)
    quotation_id = Column(Integer, ForeignKey('quotation.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = Column(Integer, nullable=False)
    description = Column(String(255), nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    qty = Column(Integer, nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)

    # Relationships
    quotation = relationship('Quotation', back_populates='lines')

    def __repr__(self):
        return f"<QuotationLine(id={self.id}, quotation_id={self.quotation_id}, product_id={self.product_id}, qty={self.qty})>"
