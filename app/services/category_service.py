# ===================================
# app/services/category_service.py
# ===================================

import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.models.category import Category, slugify
from app.repositories.category_repo import CategoryRepository
from app.schemas.category import CategoryCreate, CategoryUpdate
from app.services.exceptions import CategoryInUseError, ConflictError, NotFoundError, StoreError

logger = logging.getLogger(__name__)


class CategoryService:
    """Service pour la logique métier des catégories"""

    def __init__(self, db: Session):
        self.db = db
        self.category_repo = CategoryRepository(db)

    def create_category(self, category_data: CategoryCreate) -> Category:
        """Créer une catégorie ; le slug est dérivé du nom"""
        if self.category_repo.get_by_name(category_data.name):
            raise ConflictError("Une catégorie avec ce nom existe déjà")

        if category_data.parent_id and not self.category_repo.get_by_id(category_data.parent_id):
            raise NotFoundError("Catégorie parente non trouvée")

        category_dict = category_data.dict()
        category_dict["slug"] = self._generate_slug(category_data.name)

        category = self.category_repo.create_category(category_dict)
        logger.info(f"Catégorie créée: {category.name} ({category.slug})")
        return category

    def update_category(self, category_id: int, category_update: CategoryUpdate) -> Optional[Category]:
        """Mettre à jour une catégorie ; le slug suit le nom"""
        category = self.category_repo.get_by_id(category_id)
        if not category:
            return None

        update_data = {k: v for k, v in category_update.dict(exclude_unset=True).items()
                       if v is not None or k == "parent_id"}

        new_name = update_data.get("name")
        if new_name and new_name != category.name:
            existing = self.category_repo.get_by_name(new_name)
            if existing and existing.id != category_id:
                raise ConflictError("Une catégorie avec ce nom existe déjà")
            update_data["slug"] = self._generate_slug(new_name, exclude_id=category_id)

        parent_id = update_data.get("parent_id")
        if parent_id is not None:
            if parent_id == category_id:
                raise StoreError("Une catégorie ne peut pas être son propre parent")
            if not self.category_repo.get_by_id(parent_id):
                raise NotFoundError("Catégorie parente non trouvée")

        category = self.category_repo.update_category(category_id, update_data)
        logger.info(f"Catégorie mise à jour: {category.name}")
        return category

    def delete_category(self, category_id: int) -> bool:
        """Supprimer une catégorie sans produit ni sous-catégorie"""
        category = self.category_repo.get_by_id(category_id)
        if not category:
            return False

        product_count = self.category_repo.count_products(category_id)
        if product_count > 0:
            raise CategoryInUseError(
                f"Impossible de supprimer la catégorie : {product_count} produit(s) associé(s)"
            )

        children_count = self.category_repo.count_children(category_id)
        if children_count > 0:
            raise CategoryInUseError(
                f"Impossible de supprimer la catégorie : {children_count} sous-catégorie(s)"
            )

        self.category_repo.delete_category(category_id)
        logger.info(f"Catégorie supprimée: {category_id}")
        return True

    def _generate_slug(self, name: str, exclude_id: Optional[int] = None) -> str:
        """Générer un slug unique à partir du nom"""
        base_slug = slugify(name) or "categorie"

        counter = 1
        slug = base_slug
        while True:
            existing = self.category_repo.get_by_slug(slug)
            if existing is None or existing.id == exclude_id:
                return slug
            slug = f"{base_slug}-{counter}"
            counter += 1
