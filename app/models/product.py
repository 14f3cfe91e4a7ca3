# ===================================
# app/models/product.py
# ===================================
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, ForeignKey,
    Text, DECIMAL
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func as sql_func
from sqlalchemy.ext.hybrid import hybrid_property

from app.core.database import Base


class Product(Base):
    __tablename__ = "product"

    id = Column(Integer, primary_key=True, index=True)
    sku = Column(String, unique=True, index=True, nullable=False)

    # Informations principales
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    short_description = Column(String(300), nullable=True)
    brand = Column(String, nullable=False, index=True)
    model = Column(String, nullable=True)
    image_url = Column(String, nullable=True)

    # Prix
    price = Column(DECIMAL(10, 2), nullable=False)
    compare_price = Column(DECIMAL(10, 2), nullable=True)
    currency = Column(String(3), nullable=False, default="KES")

    # Classification
    protection_type = Column(String, nullable=False, index=True)  # ProtectionType
    industry = Column(String, nullable=False, index=True)  # Industry
    category_id = Column(Integer, ForeignKey('category.id'), nullable=False, index=True)

    # Stock
    stock = Column(Integer, nullable=False, default=0)
    low_stock_threshold = Column(Integer, nullable=False, default=10)

    # État
    is_active = Column(Boolean, default=True, index=True)
    is_featured = Column(Boolean, default=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=sql_func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=sql_func.now())

    # Relations
    category = relationship("Category", back_populates="products")

    def __repr__(self):
        return f"<Product(id={self.id}, sku='{self.sku}', name='{self.name}')>"

    @hybrid_property
    def is_on_sale(self):
        return self.compare_price is not None and self.compare_price > self.price

    @property
    def discount_percentage(self) -> int:
        """Pourcentage de réduction affiché par rapport au prix barré"""
        if not self.is_on_sale:
            return 0
        return int(round((1 - self.price / self.compare_price) * 100))

    def is_in_stock(self) -> bool:
        """Vérifier si le produit est en stock"""
        return (self.stock or 0) > 0

    def is_low_stock(self) -> bool:
        return (self.stock or 0) <= (self.low_stock_threshold or 0)
