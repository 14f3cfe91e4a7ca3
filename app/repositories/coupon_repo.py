# ===================================
# app/repositories/coupon_repo.py
# ===================================
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import select, func, update, or_, desc
from sqlalchemy.orm import Session

from app.models.category import Category
from app.models.coupon import Coupon
from app.models.product import Product
from app.schemas.coupon import normalize_code


class CouponRepository:
    """Repository pour la gestion des coupons"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, coupon_id: int) -> Optional[Coupon]:
        """Récupérer un coupon par son ID"""
        return self.db.get(Coupon, coupon_id)

    def get_by_code(self, code: str) -> Optional[Coupon]:
        """Récupérer un coupon par son code (insensible à la casse)"""
        return self.db.scalar(
            select(Coupon).where(Coupon.code == normalize_code(code))
        )

    def get_coupons(self, skip: int = 0, limit: int = 20,
                    is_active: Optional[bool] = None,
                    search: Optional[str] = None) -> Tuple[List[Coupon], int]:
        """Récupérer les coupons avec filtres et pagination"""
        query = select(Coupon)

        if is_active is not None:
            query = query.where(Coupon.is_active == is_active)

        if search:
            query = query.where(or_(
                Coupon.code.ilike(f"%{search}%"),
                Coupon.description.ilike(f"%{search}%")
            ))

        total = self.db.scalar(select(func.count()).select_from(query.subquery()))

        coupons = self.db.scalars(
            query.order_by(desc(Coupon.created_at), desc(Coupon.id))
            .offset(skip)
            .limit(limit)
        ).all()

        return list(coupons), total or 0

    def create_coupon(self, coupon_data: dict,
                      product_ids: Iterable[int] = (),
                      category_ids: Iterable[int] = ()) -> Coupon:
        """Créer un nouveau coupon"""
        coupon = Coupon(**coupon_data)
        coupon.applicable_products = self._load_products(product_ids)
        coupon.applicable_categories = self._load_categories(category_ids)
        self.db.add(coupon)
        self.db.commit()
        self.db.refresh(coupon)
        return coupon

    def update_coupon(self, coupon_id: int, update_data: dict,
                      product_ids: Optional[Iterable[int]] = None,
                      category_ids: Optional[Iterable[int]] = None) -> Optional[Coupon]:
        """Mettre à jour un coupon"""
        coupon = self.get_by_id(coupon_id)
        if not coupon:
            return None

        for field, value in update_data.items():
            if hasattr(coupon, field):
                setattr(coupon, field, value)

        if product_ids is not None:
            coupon.applicable_products = self._load_products(product_ids)
        if category_ids is not None:
            coupon.applicable_categories = self._load_categories(category_ids)

        self.db.commit()
        self.db.refresh(coupon)
        return coupon

    def deactivate_coupon(self, coupon_id: int) -> bool:
        """Désactiver un coupon (les coupons ne sont jamais supprimés)"""
        coupon = self.get_by_id(coupon_id)
        if not coupon:
            return False
        coupon.is_active = False
        self.db.commit()
        return True

    def increment_usage(self, coupon_id: int) -> bool:
        """
        Incrémenter `used_count` de façon atomique.

        Une seule requête UPDATE conditionnelle : la limite est vérifiée par la
        base au moment de l'écriture, ce qui empêche le dépassement de
        `usage_limit` sous charge concurrente (plusieurs processus).
        Retourne False si aucune ligne n'a été modifiée.
        """
        result = self.db.execute(
            update(Coupon)
            .where(
                Coupon.id == coupon_id,
                or_(Coupon.usage_limit.is_(None), Coupon.used_count < Coupon.usage_limit)
            )
            .values(used_count=Coupon.used_count + 1)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount == 1

    def deactivate_expired(self, now: datetime) -> int:
        """Désactiver les coupons actifs dont la date de fin est dépassée"""
        result = self.db.execute(
            update(Coupon)
            .where(Coupon.is_active == True, Coupon.end_date < now)
            .values(is_active=False)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount or 0

    def _load_products(self, product_ids: Iterable[int]) -> List[Product]:
        ids = list(set(product_ids or ()))
        if not ids:
            return []
        return list(self.db.scalars(select(Product).where(Product.id.in_(ids))))

    def _load_categories(self, category_ids: Iterable[int]) -> List[Category]:
        ids = list(set(category_ids or ()))
        if not ids:
            return []
        return list(self.db.scalars(select(Category).where(Category.id.in_(ids))))
