"""Sale model."""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from pos_backend.database import Base


class Sale(Base):
    """Sale (venta confirmada). Immutable once committed."""

    __tablename__ = 'sale'

    id = Column(Integer, primary_key=True, autoincrement=True)
    # now() is the transaction start time on PostgreSQL
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    total = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(String(40), nullable=False)
    user_id = Column(Integer, ForeignKey('app_user.id'), nullable=False)

    # Relationships
    user = relationship('AppUser')
    lines = relationship('SaleLine', back_populates='sale', order_by='SaleLine.id')

    def __repr__(self):
        return f"<Sale(id={self.id}, total={self.total}, payment_method='{self.payment_method}')>"
