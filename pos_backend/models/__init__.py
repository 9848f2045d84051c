"""Models package - exports all SQLAlchemy models."""
# Catalog
from pos_backend.models.category import Category
from pos_backend.models.supplier import Supplier
from pos_backend.models.product import Product

# Users
from pos_backend.models.app_user import AppUser, UserRole

# Ledger records
from pos_backend.models.sale import Sale
from pos_backend.models.sale_line import SaleLine
from pos_backend.models.quotation import Quotation, QuotationStatus
from pos_backend.models.quotation_line import QuotationLine

__all__ = [
    'Category', 'Supplier', 'Product',
    'AppUser', 'UserRole',
    'Sale', 'SaleLine',
    'Quotation', 'QuotationStatus', 'QuotationLine',
]
