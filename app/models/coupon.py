# ===================================
# Fichier: app/models/coupon.py
# ===================================
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, Optional, Tuple
import enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime, DECIMAL, ForeignKey, Table, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base

ZERO = Decimal("0.00")
CENT = Decimal("0.01")

# Tables d'association des restrictions
coupon_product_table = Table(
    "coupon_product",
    Base.metadata,
    Column("coupon_id", Integer, ForeignKey("coupon.id", ondelete="CASCADE"), primary_key=True),
    Column("product_id", Integer, ForeignKey("product.id", ondelete="CASCADE"), primary_key=True)
)

coupon_category_table = Table(
    "coupon_category",
    Base.metadata,
    Column("coupon_id", Integer, ForeignKey("coupon.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Integer, ForeignKey("category.id", ondelete="CASCADE"), primary_key=True)
)


class CouponType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class CouponStatus(str, enum.Enum):
    """Raison du résultat d'une évaluation de coupon"""
    APPLIED = "applied"
    NOT_FOUND = "not_found"
    INACTIVE = "inactive"
    NOT_STARTED = "not_started"
    EXPIRED = "expired"
    USAGE_EXHAUSTED = "usage_exhausted"
    BELOW_MINIMUM = "below_minimum"
    NO_APPLICABLE_ITEMS = "no_applicable_items"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite perd le fuseau : une date naïve est considérée comme UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_amount(value: Decimal) -> Decimal:
    """Arrondi monétaire à 2 décimales (demi supérieur)"""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class Coupon(Base):
    __tablename__ = "coupon"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(20), unique=True, index=True, nullable=False)
    description = Column(String(200), nullable=True)

    # Type et valeur de la remise
    discount_type = Column(String, nullable=False)  # CouponType
    value = Column(DECIMAL(10, 2), nullable=False)

    # Conditions d'utilisation
    minimum_order_amount = Column(DECIMAL(10, 2), nullable=False, default=ZERO)
    maximum_discount_amount = Column(DECIMAL(10, 2), nullable=True)  # Pour les pourcentages
    currency = Column(String(3), nullable=False, default="KES")

    # Limites d'utilisation
    usage_limit = Column(Integer, nullable=True)  # None = illimité
    used_count = Column(Integer, nullable=False, default=0)
    user_usage_limit = Column(Integer, nullable=False, default=1)  # Stocké, non appliqué

    # Ciblage informatif
    protection_types = Column(JSON, nullable=False, default=list)
    industries = Column(JSON, nullable=False, default=list)

    # Validité
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False, index=True)

    # État
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    is_public = Column(Boolean, nullable=False, default=True)
    created_by = Column(String, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Restrictions
    applicable_products = relationship("Product", secondary=coupon_product_table, lazy="selectin")
    applicable_categories = relationship("Category", secondary=coupon_category_table, lazy="selectin")

    def __repr__(self):
        return f"<Coupon(id={self.id}, code='{self.code}')>"

    @property
    def applicable_product_ids(self) -> set:
        return {product.id for product in self.applicable_products}

    @property
    def applicable_category_ids(self) -> set:
        return {category.id for category in self.applicable_categories}

    @property
    def has_restrictions(self) -> bool:
        return bool(self.applicable_products) or bool(self.applicable_categories)

    @property
    def formatted_value(self) -> str:
        """Valeur lisible : "20%" ou "KES 300.00" """
        if self.discount_type == CouponType.PERCENTAGE.value:
            return f"{to_decimal(self.value).normalize():f}%"
        return f"{self.currency or 'KES'} {round_amount(to_decimal(self.value)):,.2f}"

    def status(self, now: Optional[datetime] = None) -> CouponStatus:
        """Raison pour laquelle le coupon est (in)utilisable à l'instant `now`"""
        now = as_utc(now or utcnow())

        if not self.is_active:
            return CouponStatus.INACTIVE
        if self.start_date is None or as_utc(self.start_date) > now:
            return CouponStatus.NOT_STARTED
        if self.end_date is None or as_utc(self.end_date) < now:
            return CouponStatus.EXPIRED
        if self.usage_limit is not None and (self.used_count or 0) >= self.usage_limit:
            return CouponStatus.USAGE_EXHAUSTED
        return CouponStatus.APPLIED

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        """Vérifier si le coupon est utilisable (actif, dans sa période, non épuisé)"""
        return self.status(now) == CouponStatus.APPLIED

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = as_utc(now or utcnow())
        return self.end_date is not None and as_utc(self.end_date) < now

    def applicable_amount(self, order_amount, items: Iterable = ()) -> Decimal:
        """
        Montant de la commande éligible à la remise.

        Sans restriction : tout le montant. Avec restrictions : somme des lignes
        dont le produit ou la catégorie figure dans les restrictions, plafonnée
        au montant de la commande.
        """
        amount = to_decimal(order_amount)
        if not self.has_restrictions:
            return amount

        product_ids = self.applicable_product_ids
        category_ids = self.applicable_category_ids
        total = ZERO
        for item in items or ():
            if item.product_id in product_ids or (
                item.category_id is not None and item.category_id in category_ids
            ):
                total += to_decimal(item.amount)
        return min(total, amount)

    def evaluate(self, order_amount, items: Iterable = (),
                 now: Optional[datetime] = None) -> Tuple[CouponStatus, Decimal, Decimal]:
        """
        Évaluer le coupon contre une commande.

        Retourne `(raison, montant éligible, remise)`. La remise est arrondie à
        2 décimales et ne dépasse jamais le montant éligible.
        """
        amount = to_decimal(order_amount)

        status = self.status(now)
        if status != CouponStatus.APPLIED:
            return status, ZERO, ZERO

        if amount < to_decimal(self.minimum_order_amount):
            return CouponStatus.BELOW_MINIMUM, ZERO, ZERO

        applicable = self.applicable_amount(amount, items)
        if applicable <= 0:
            if self.has_restrictions:
                return CouponStatus.NO_APPLICABLE_ITEMS, ZERO, ZERO
            return CouponStatus.APPLIED, ZERO, ZERO

        value = to_decimal(self.value)
        if self.discount_type == CouponType.PERCENTAGE.value:
            discount = applicable * value / Decimal(100)
            if self.maximum_discount_amount is not None:
                discount = min(discount, to_decimal(self.maximum_discount_amount))
        elif self.discount_type == CouponType.FIXED.value:
            discount = value
        else:
            return CouponStatus.APPLIED, applicable, ZERO

        discount = max(ZERO, min(discount, applicable))
        return CouponStatus.APPLIED, applicable, round_amount(discount)

    def calculate_discount(self, order_amount, items: Iterable = (),
                           now: Optional[datetime] = None) -> Decimal:
        """Calculer le montant de la remise (0 si le coupon ne s'applique pas)"""
        try:
            return self.evaluate(order_amount, items, now)[2]
        except (InvalidOperation, TypeError, ValueError):
            return ZERO

    def increment_usage(self) -> None:
        """Comptabiliser une utilisation (aucun contrôle d'idempotence)"""
        self.used_count = (self.used_count or 0) + 1
