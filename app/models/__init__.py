"""
Models package initialization.
This file imports all models to make them available to Alembic for autogeneration.
"""

# IMPORTANT: Utiliser la MÊME Base que celle de database.py
from app.core.database import Base

# Import all your models here so they are registered with Base.metadata
# This is crucial for Alembic autogeneration to work
from .category import Category, ProtectionType, Industry  # noqa: F401
from .product import Product  # noqa: F401
from .coupon import Coupon, CouponType, CouponStatus  # noqa: F401

# Export Base so it can be imported from app.models
__all__ = ['Base', 'Category', 'ProtectionType', 'Industry', 'Product', 'Coupon', 'CouponType', 'CouponStatus']
