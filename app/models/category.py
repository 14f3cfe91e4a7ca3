# ===================================
# app/models/category.py
# ===================================
import enum
import re
from typing import List

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text, select, func as sql_func
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.ext.hybrid import hybrid_property

from app.core.database import Base


class ProtectionType(str, enum.Enum):
    HEAD = "Head"
    FOOT = "Foot"
    EYE = "Eye"
    HAND = "Hand"
    BREATHING = "Breathing"


class Industry(str, enum.Enum):
    MEDICAL = "Medical"
    CONSTRUCTION = "Construction"
    MANUFACTURING = "Manufacturing"


# Une catégorie peut viser toutes les industries
CATEGORY_INDUSTRIES = [industry.value for industry in Industry] + ["All"]


def slugify(name: str) -> str:
    """Générer un slug à partir du nom ("Safety Helmets" -> "safety-helmets")"""
    slug = re.sub(r"[^a-z0-9]", "-", name.lower())
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


class Category(Base):
    __tablename__ = "category"

    id = Column(Integer, primary_key=True, index=True)
    parent_id = Column(Integer, ForeignKey('category.id', ondelete='SET NULL'), nullable=True)

    # Informations principales
    name = Column(String(100), unique=True, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String, nullable=True)
    icon = Column(String, nullable=True)

    # Classification
    protection_type = Column(String, nullable=False, index=True)  # ProtectionType
    industry = Column(String, nullable=False, default="All")

    # Affichage
    is_active = Column(Boolean, default=True)
    is_featured = Column(Boolean, default=False)
    sort_order = Column(Integer, default=0)

    # Statistiques
    product_count = Column(Integer, default=0)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relations
    parent = relationship("Category", remote_side=[id], back_populates="children")
    children = relationship("Category", back_populates="parent")
    products = relationship("Product", back_populates="category")

    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.name}')>"

    @hybrid_property
    def url(self):
        return f"/categories/{self.slug}"

    @hybrid_property
    def is_root(self):
        """Vérifier si c'est une catégorie racine"""
        return self.parent_id is None

    def update_product_count(self, db_session):
        """Recompter les produits actifs de la catégorie"""
        from app.models.product import Product

        count = db_session.scalar(
            select(sql_func.count()).select_from(Product).where(
                Product.category_id == self.id,
                Product.is_active == True
            )
        )
        self.product_count = count or 0

    @classmethod
    def group_by_protection_type(cls, categories: List['Category']) -> dict:
        """Regrouper les catégories par type de protection"""
        grouped = {}
        for category in categories:
            grouped.setdefault(category.protection_type, []).append(category)
        return grouped
