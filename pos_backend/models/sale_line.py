"""Sale Line model."""
from sqlalchemy import Column, Integer, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from pos_backend.database import Base


class SaleLine(Base):
    """
    Sale Line (detalle de venta).

    product_id is copied, not a foreign key, so the line outlives the product.
    unit_price is the sale price at the moment the sale was committed.
    """

    __tablename__ = 'sale_line'
    __table_args__ = (
        CheckConstraint('qty > 0', name='ck_sale_line_qty_positive'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    sale_id = Column(Integer, ForeignKey('sale.id'), nullable=False, index=True)
    product_id = Column(Integer, nullable=False)
    qty = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)

    # Relationships
    sale = relationship('Sale', back_populates='lines')

    def __repr__(self):
        return f"<SaleLine(id={self.id}, product_id={self.product_id}, qty={self.qty})>"
