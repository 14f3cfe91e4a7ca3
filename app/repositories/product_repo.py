from typing import List, Optional, Tuple
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select, func, and_, or_, desc, asc

from app.models.product import Product

# Tris acceptés par l'API publique
SORT_OPTIONS = {
    "newest": desc(Product.created_at),
    "price-low": asc(Product.price),
    "price-high": desc(Product.price),
    "name": asc(Product.name),
}


class ProductRepository:
    """Repository pour la gestion des produits"""

    def __init__(self, db: Session):
        self.db = db

    def get_product_by_id(self, product_id: int) -> Optional[Product]:
        """Récupérer un produit par son ID"""
        return self.db.scalar(
            select(Product)
            .where(Product.id == product_id)
            .options(selectinload(Product.category))
        )

    def get_product_by_sku(self, sku: str) -> Optional[Product]:
        """Récupérer un produit par son SKU"""
        return self.db.scalar(select(Product).where(Product.sku == sku.strip().upper()))

    def get_products(self, skip: int = 0, limit: int = 12,
                     search: Optional[str] = None,
                     category_id: Optional[int] = None,
                     protection_type: Optional[str] = None,
                     industry: Optional[str] = None,
                     brand: Optional[str] = None,
                     min_price: Optional[float] = None,
                     max_price: Optional[float] = None,
                     in_stock: Optional[bool] = None,
                     is_featured: Optional[bool] = None,
                     on_sale: Optional[bool] = None,
                     is_active: Optional[bool] = True,
                     sort: str = "newest") -> Tuple[List[Product], int]:
        """Récupérer les produits avec filtres et pagination"""

        query = select(Product)

        # Filtres
        conditions = []

        if is_active is not None:
            conditions.append(Product.is_active == is_active)

        if is_featured is not None:
            conditions.append(Product.is_featured == is_featured)

        if category_id:
            conditions.append(Product.category_id == category_id)

        if protection_type:
            conditions.append(Product.protection_type == protection_type)

        if industry:
            conditions.append(Product.industry == industry)

        if brand:
            conditions.append(Product.brand.ilike(f"%{brand}%"))

        if search:
            # Recherche dans le nom, la description et la marque
            conditions.append(or_(
                Product.name.ilike(f"%{search}%"),
                Product.description.ilike(f"%{search}%"),
                Product.brand.ilike(f"%{search}%")
            ))

        if min_price is not None:
            conditions.append(Product.price >= min_price)
        if max_price is not None:
            conditions.append(Product.price <= max_price)

        if in_stock:
            conditions.append(Product.stock > 0)

        if on_sale:
            conditions.append(and_(
                Product.compare_price.is_not(None),
                Product.compare_price > Product.price
            ))

        if conditions:
            query = query.where(and_(*conditions))

        # Compter le total
        total = self.db.scalar(select(func.count()).select_from(query.subquery()))

        # Tri
        order_by = SORT_OPTIONS.get(sort, SORT_OPTIONS["newest"])

        products = self.db.scalars(
            query.options(selectinload(Product.category))
            .order_by(order_by, desc(Product.id))
            .offset(skip)
            .limit(limit)
        ).all()

        return list(products), total or 0

    def get_low_stock_products(self, threshold: int) -> List[Product]:
        """Produits actifs dont le stock est inférieur ou égal au seuil"""
        return list(self.db.scalars(
            select(Product)
            .where(Product.is_active == True, Product.stock <= threshold)
            .options(selectinload(Product.category))
            .order_by(asc(Product.stock))
        ))

    def create_product(self, product_data: dict) -> Product:
        """Créer un nouveau produit"""
        product = Product(**product_data)
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def update_product(self, product_id: int, update_data: dict) -> Optional[Product]:
        """Mettre à jour un produit"""
        product = self.get_product_by_id(product_id)
        if not product:
            return None

        for field, value in update_data.items():
            if hasattr(product, field) and value is not None:
                setattr(product, field, value)

        self.db.commit()
        self.db.refresh(product)
        return product

    def soft_delete_product(self, product_id: int) -> bool:
        """Désactiver un produit (soft delete)"""
        product = self.db.get(Product, product_id)
        if product:
            product.is_active = False
            self.db.commit()
            return True
        return False

    def update_stock(self, product_id: int, stock: int) -> Optional[Product]:
        product = self.db.get(Product, product_id)
        if not product:
            return None
        product.stock = stock
        self.db.commit()
        return product
