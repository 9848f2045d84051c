"""Product model."""
from sqlalchemy import Column, Integer, String, Boolean, Numeric, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func, expression
from pos_backend.database import Base


class Product(Base):
    """Product (artículo del catálogo) with its single stock quantity."""

    __tablename__ = 'product'
    __table_args__ = (
        CheckConstraint('stock_qty >= 0', name='ck_product_stock_non_negative'),
        CheckConstraint('purchase_price >= 0', name='ck_product_purchase_price_non_negative'),
        CheckConstraint('sale_price >= 0', name='ck_product_sale_price_non_negative'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(64), nullable=False, unique=True)
    barcode = Column(String(64), nullable=True, unique=True)
    description = Column(String(255), nullable=False)
    location = Column(String(120), nullable=False, default='', server_default='')
    sat_key = Column(String(32), nullable=True)
    stock_qty = Column(Integer, nullable=False, default=0, server_default='0')
    min_stock = Column(Integer, nullable=False, default=0, server_default='0')
    max_stock = Column(Integer, nullable=False, default=0, server_default='0')
    purchase_price = Column(Numeric(10, 2), nullable=False, default=0, server_default='0.00')
    sale_price = Column(Numeric(10, 2), nullable=False, default=0, server_default='0.00')
    category_id = Column(Integer, ForeignKey('category.id'), nullable=True)
    supplier_id = Column(Integer, ForeignKey('supplier.id'), nullable=True)
    active = Column(Boolean, nullable=False, default=True, server_default=expression.true())
    image_path = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    category = relationship('Category', foreign_keys=[category_id])
    supplier = relationship('Supplier', foreign_keys=[supplier_id])

    def __repr__(self):
        return f"<Product(id={self.id}, code='{self.code}', stock_qty={self.stock_qty})>"

    @property
    def missing_qty(self):
        """Units needed to reach max_stock (never negative)."""
        return max((self.max_stock or 0) - (self.stock_qty or 0), 0)
