"""Quotation model for cotizaciones."""
import enum
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from pos_backend.database import Base


class QuotationStatus(enum.Enum):
    """Quotation status enum."""
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    CANCELED = "CANCELED"


class Quotation(Base):
    """
    Quotation (Cotización).

    An advisory price snapshot. It never touches stock, and editing it
    replaces every line.
    """

    __tablename__ = 'quotation'

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    client_name = Column(String(255), nullable=False)
    payment_method = Column(String(40), nullable=False)
    total = Column(Numeric(12, 2), nullable=False, default=0)
    status = Column(String(20), nullable=False, default=QuotationStatus.PENDING.value)
    user_id = Column(Integer, ForeignKey('app_user.id'), nullable=True)

    # Relationships
    user = relationship('AppUser')
    lines = relationship(
        'QuotationLine',
        back_populates='quotation',
        cascade='all, delete-orphan',
        order_by='QuotationLine.id',
    )

    def __repr__(self):
        return f"<Quotation(id={self.id}, client='{self.client_name}', total={self.total})>"
