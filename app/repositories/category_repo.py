# ===================================
# app/repositories/category_repo.py
# ===================================
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from app.models.category import Category
from app.models.product import Product


class CategoryRepository:
    """Repository pour la gestion des catégories"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, category_id: int) -> Optional[Category]:
        return self.db.get(Category, category_id)

    def get_by_slug(self, slug: str) -> Optional[Category]:
        return self.db.scalar(select(Category).where(Category.slug == slug))

    def get_by_name(self, name: str) -> Optional[Category]:
        return self.db.scalar(
            select(Category).where(func.lower(Category.name) == name.lower())
        )

    def get_categories(self, protection_type: Optional[str] = None,
                       industry: Optional[str] = None,
                       is_active: Optional[bool] = True,
                       is_featured: Optional[bool] = None) -> List[Category]:
        """Récupérer les catégories triées par ordre d'affichage puis par nom"""
        query = select(Category)

        if is_active is not None:
            query = query.where(Category.is_active == is_active)
        if is_featured is not None:
            query = query.where(Category.is_featured == is_featured)
        if protection_type:
            query = query.where(Category.protection_type == protection_type)
        if industry:
            query = query.where(Category.industry == industry)

        return list(self.db.scalars(query.order_by(Category.sort_order, Category.name)))

    def create_category(self, category_data: dict) -> Category:
        category = Category(**category_data)
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category

    def update_category(self, category_id: int, update_data: dict) -> Optional[Category]:
        category = self.get_by_id(category_id)
        if not category:
            return None

        for field, value in update_data.items():
            if hasattr(category, field):
                setattr(category, field, value)

        self.db.commit()
        self.db.refresh(category)
        return category

    def delete_category(self, category_id: int) -> bool:
        category = self.get_by_id(category_id)
        if not category:
            return False
        self.db.delete(category)
        self.db.commit()
        return True

    def count_products(self, category_id: int) -> int:
        """Nombre de produits (actifs ou non) rattachés à la catégorie"""
        return self.db.scalar(
            select(func.count()).select_from(Product).where(Product.category_id == category_id)
        ) or 0

    def count_children(self, category_id: int) -> int:
        return self.db.scalar(
            select(func.count()).select_from(Category).where(Category.parent_id == category_id)
        ) or 0

    def refresh_product_count(self, category_id: int) -> None:
        """Mettre à jour le compteur de produits actifs"""
        category = self.get_by_id(category_id)
        if category:
            category.update_product_count(self.db)
            self.db.commit()
