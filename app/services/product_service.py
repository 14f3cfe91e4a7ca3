# ===================================
# app/services/product_service.py
# ===================================

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.models.product import Product
from app.repositories.category_repo import CategoryRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductCreate, ProductUpdate, StockUpdate, StockUpdateResult
from app.services.exceptions import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


class ProductService:
    """Service pour la logique métier des produits"""

    def __init__(self, db: Session):
        self.db = db
        self.product_repo = ProductRepository(db)
        self.category_repo = CategoryRepository(db)

    def create_product(self, product_data: ProductCreate) -> Product:
        """Créer un produit dans une catégorie existante"""
        if self.product_repo.get_product_by_sku(product_data.sku):
            raise ConflictError("Un produit avec ce SKU existe déjà")

        if not self.category_repo.get_by_id(product_data.category_id):
            raise NotFoundError("Catégorie non trouvée")

        product = self.product_repo.create_product(product_data.dict())

        # Mettre à jour le compteur de la catégorie
        self.category_repo.refresh_product_count(product.category_id)

        logger.info(f"Produit créé: {product.sku}")
        return self.product_repo.get_product_by_id(product.id)

    def update_product(self, product_id: int, product_update: ProductUpdate) -> Optional[Product]:
        """Mettre à jour un produit"""
        product = self.product_repo.get_product_by_id(product_id)
        if not product:
            return None

        update_data = product_update.dict(exclude_unset=True)
        previous_category_id = product.category_id

        new_category_id = update_data.get("category_id")
        if new_category_id and not self.category_repo.get_by_id(new_category_id):
            raise NotFoundError("Catégorie non trouvée")

        product = self.product_repo.update_product(product_id, update_data)

        if "category_id" in update_data or "is_active" in update_data:
            self.category_repo.refresh_product_count(previous_category_id)
            if product.category_id != previous_category_id:
                self.category_repo.refresh_product_count(product.category_id)

        return product

    def delete_product(self, product_id: int) -> bool:
        """Désactiver un produit et recompter sa catégorie"""
        product = self.product_repo.get_product_by_id(product_id)
        if not product:
            return False

        category_id = product.category_id
        self.product_repo.soft_delete_product(product_id)
        self.category_repo.refresh_product_count(category_id)
        logger.info(f"Produit désactivé: {product_id}")
        return True

    def bulk_update_stock(self, updates: List[StockUpdate]) -> List[StockUpdateResult]:
        """Mettre à jour le stock de plusieurs produits ; chaque ligne a son propre résultat"""
        results = []
        for update in updates:
            product = self.product_repo.update_stock(update.product_id, update.stock)
            if product:
                results.append(StockUpdateResult(
                    product_id=update.product_id,
                    success=True,
                    name=product.name,
                    new_stock=product.stock
                ))
            else:
                results.append(StockUpdateResult(
                    product_id=update.product_id,
                    success=False,
                    error="Produit non trouvé"
                ))
        return results
