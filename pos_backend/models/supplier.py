"""Supplier model."""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from pos_backend.database import Base


class Supplier(Base):
    """Supplier (proveedor)."""

    __tablename__ = 'supplier'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(160), nullable=False)
    phone = Column(String(40), nullable=True)
    email = Column(String(160), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Supplier(id={self.id}, name='{self.name}')>"
