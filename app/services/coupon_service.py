# ===================================
# app/services/coupon_service.py
# ===================================
"""
Logique métier des coupons, appelée par le traitement des commandes :

* `compute_discount` évalue un code contre une commande sans rien modifier ;
* `redeem` comptabilise une utilisation après confirmation du paiement.

Le pipeline de commande garantit qu'une commande ne déclenche `redeem` qu'une
seule fois : le service ne fait aucun contrôle d'idempotence.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from app.models.coupon import Coupon, CouponStatus, CouponType, ZERO, as_utc, to_decimal, round_amount
from app.repositories.coupon_repo import CouponRepository
from app.schemas.coupon import CouponCreate, CouponUpdate, DiscountQuote, normalize_code
from app.services.exceptions import (
    CouponAlreadyExistsError,
    CouponNotFoundError,
    CouponUsageLimitReachedError,
    InvalidCouponError,
)

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    CouponStatus.APPLIED: "Coupon appliqué",
    CouponStatus.NOT_FOUND: "Code promo inconnu",
    CouponStatus.INACTIVE: "Ce coupon est désactivé",
    CouponStatus.NOT_STARTED: "Ce coupon n'est pas encore valable",
    CouponStatus.EXPIRED: "Ce coupon a expiré",
    CouponStatus.USAGE_EXHAUSTED: "Ce coupon a atteint sa limite d'utilisation",
    CouponStatus.BELOW_MINIMUM: "Montant minimum de commande non atteint",
    CouponStatus.NO_APPLICABLE_ITEMS: "Aucun article du panier n'est éligible",
}

RESTRICTION_FIELDS = {"applicable_product_ids", "applicable_category_ids"}
NULLABLE_FIELDS = {"description", "maximum_discount_amount", "usage_limit"}


class CouponService:
    """Service pour la logique métier des coupons"""

    def __init__(self, db: Session):
        self.db = db
        self.coupon_repo = CouponRepository(db)

    def compute_discount(self, code: str, order_amount, items: Iterable = (),
                         now: Optional[datetime] = None) -> DiscountQuote:
        """Calculer la remise d'un code pour une commande (aucun effet de bord)"""
        amount = to_decimal(order_amount)
        items = list(items or ())
        coupon = self.coupon_repo.get_by_code(code)

        if coupon is None:
            return self._quote(normalize_code(code), CouponStatus.NOT_FOUND, amount, ZERO, ZERO)

        status, applicable, discount = coupon.evaluate(amount, items, now=now)
        return self._quote(coupon.code, status, amount, applicable, discount)

    def redeem(self, code: str) -> Coupon:
        """
        Marquer le coupon comme utilisé (commande confirmée).
        Appeler deux fois pour la même commande compte deux utilisations.
        """
        coupon = self.coupon_repo.get_by_code(code)
        if coupon is None:
            raise CouponNotFoundError(normalize_code(code))

        if not self.coupon_repo.increment_usage(coupon.id):
            logger.warning(f"Utilisation refusée pour le coupon {coupon.code}: limite atteinte")
            raise CouponUsageLimitReachedError(coupon.code)

        self.db.refresh(coupon)
        logger.info(f"Coupon {coupon.code} utilisé ({coupon.used_count}/{coupon.usage_limit or '∞'})")
        return coupon

    def create_coupon(self, coupon_data: CouponCreate, created_by: str) -> Coupon:
        """Créer un coupon (code unique)"""
        if self.coupon_repo.get_by_code(coupon_data.code):
            raise CouponAlreadyExistsError(coupon_data.code)

        coupon_dict = coupon_data.dict(exclude=RESTRICTION_FIELDS)
        coupon_dict["created_by"] = created_by
        coupon = self.coupon_repo.create_coupon(
            coupon_dict,
            product_ids=coupon_data.applicable_product_ids,
            category_ids=coupon_data.applicable_category_ids,
        )
        logger.info(f"Coupon {coupon.code} créé par {created_by}")
        return coupon

    def update_coupon(self, coupon_id: int, coupon_update: CouponUpdate) -> Optional[Coupon]:
        """Mettre à jour un coupon ; retourne None s'il n'existe pas"""
        coupon = self.coupon_repo.get_by_id(coupon_id)
        if coupon is None:
            return None

        update_data = {
            field: value
            for field, value in coupon_update.dict(exclude_unset=True, exclude=RESTRICTION_FIELDS).items()
            if value is not None or field in NULLABLE_FIELDS
        }

        new_code = update_data.get("code")
        if new_code:
            existing = self.coupon_repo.get_by_code(new_code)
            if existing and existing.id != coupon_id:
                raise CouponAlreadyExistsError(new_code)

        self._check_merged_rules(coupon, update_data)

        coupon = self.coupon_repo.update_coupon(
            coupon_id,
            update_data,
            product_ids=coupon_update.applicable_product_ids,
            category_ids=coupon_update.applicable_category_ids,
        )
        if coupon:
            logger.info(f"Coupon {coupon.code} mis à jour")
        return coupon

    def deactivate_expired(self, now: datetime) -> int:
        count = self.coupon_repo.deactivate_expired(now)
        if count:
            logger.info(f"{count} coupon(s) expiré(s) désactivé(s)")
        return count

    @staticmethod
    def _check_merged_rules(coupon: Coupon, update_data: dict) -> None:
        """Règles croisées entre les champs modifiés et ceux déjà enregistrés"""
        discount_type = update_data.get("discount_type", coupon.discount_type)
        value = to_decimal(update_data.get("value", coupon.value))
        if discount_type == CouponType.PERCENTAGE.value and value > 100:
            raise InvalidCouponError("Percentage coupon value cannot exceed 100")

        start = as_utc(update_data.get("start_date", coupon.start_date))
        end = as_utc(update_data.get("end_date", coupon.end_date))
        if end < start:
            raise InvalidCouponError("End date must be after start date")

    @staticmethod
    def _quote(code: str, status: CouponStatus, amount: Decimal,
               applicable: Decimal, discount: Decimal) -> DiscountQuote:
        return DiscountQuote(
            code=code,
            is_valid=status == CouponStatus.APPLIED,
            status=status,
            order_amount=round_amount(amount),
            applicable_amount=round_amount(applicable),
            discount=discount,
            final_amount=round_amount(amount - discount),
            message=STATUS_MESSAGES[status],
        )
