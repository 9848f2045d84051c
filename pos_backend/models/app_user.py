"""Application user model."""
import enum
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func, expression
from pos_backend.database import Base


class UserRole(str, enum.Enum):
    """Roles recognised by the write endpoints."""
    ADMIN = 'admin'
    VENTAS = 'ventas'


class AppUser(Base):
    """
    Cashier or administrator.

    Credentials are managed by the authentication service; this table only
    identifies who recorded a sale or quotation and what they may do.
    """

    __tablename__ = 'app_user'

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(80), nullable=False, unique=True)
    full_name = Column(String(160), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.VENTAS.value)
    active = Column(Boolean, nullable=False, default=True, server_default=expression.true())
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<AppUser(id={self.id}, username='{self.username}', role='{self.role}')>"
