# ===================================
# app/api/v1/coupons.py
# ===================================
from typing import Any, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import Principal, require_scope
from app.api.deps import get_pagination_params, to_http_exception
from app.repositories.coupon_repo import CouponRepository
from app.services.coupon_service import CouponService
from app.services.exceptions import StoreError
from app.schemas.common import MessageResponse, pagination_meta
from app.schemas.coupon import (
    Coupon,
    CouponCreate,
    CouponUpdate,
    CouponResponse,
    CouponsListResponse,
    DiscountRequest,
    DiscountQuoteResponse,
)

router = APIRouter()


@router.get("/", response_model=CouponsListResponse)
def list_coupons(
    pagination: tuple[int, int] = Depends(get_pagination_params),
    is_active: Optional[bool] = Query(None, description="Filtrer par état"),
    search: Optional[str] = Query(None, description="Recherche sur le code ou la description"),
    principal: Principal = Depends(require_scope("coupons:read")),
    db: Session = Depends(get_db)
) -> Any:
    """
    Lister les coupons (Admin)
    """
    skip, limit = pagination
    coupons, total = CouponRepository(db).get_coupons(
        skip=skip, limit=limit, is_active=is_active, search=search
    )
    return CouponsListResponse(
        data=[Coupon.from_orm(coupon) for coupon in coupons],
        **pagination_meta(total, skip, limit)
    )


@router.post("/validate", response_model=DiscountQuoteResponse)
def validate_coupon(
    request: DiscountRequest,
    db: Session = Depends(get_db)
) -> Any:
    """
    Évaluer un code promo pour un panier, sans l'utiliser
    """
    quote = CouponService(db).compute_discount(request.code, request.order_amount, request.items)
    return DiscountQuoteResponse(data=quote)


@router.post("/", response_model=CouponResponse, status_code=status.HTTP_201_CREATED)
def create_coupon(
    coupon_data: CouponCreate,
    principal: Principal = Depends(require_scope("coupons:write")),
    db: Session = Depends(get_db)
) -> Any:
    """
    Créer un coupon (Admin)
    """
    try:
        coupon = CouponService(db).create_coupon(coupon_data, created_by=principal.subject)
    except StoreError as exc:
        raise to_http_exception(exc)

    return CouponResponse(message="Coupon créé avec succès", data=Coupon.from_orm(coupon))


@router.get("/{coupon_id}", response_model=CouponResponse)
def get_coupon(
    coupon_id: int,
    principal: Principal = Depends(require_scope("coupons:read")),
    db: Session = Depends(get_db)
) -> Any:
    """
    Récupérer un coupon par son ID (Admin)
    """
    coupon = CouponRepository(db).get_by_id(coupon_id)
    if not coupon:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Coupon non trouvé"
        )
    return CouponResponse(message="Coupon récupéré avec succès", data=Coupon.from_orm(coupon))


@router.put("/{coupon_id}", response_model=CouponResponse)
def update_coupon(
    coupon_id: int,
    coupon_update: CouponUpdate,
    principal: Principal = Depends(require_scope("coupons:write")),
    db: Session = Depends(get_db)
) -> Any:
    """
    Mettre à jour un coupon (Admin)
    """
    try:
        coupon = CouponService(db).update_coupon(coupon_id, coupon_update)
    except StoreError as exc:
        raise to_http_exception(exc)

    if not coupon:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Coupon non trouvé"
        )
    return CouponResponse(message="Coupon mis à jour avec succès", data=Coupon.from_orm(coupon))


@router.delete("/{coupon_id}", response_model=MessageResponse)
def deactivate_coupon(
    coupon_id: int,
    principal: Principal = Depends(require_scope("coupons:write")),
    db: Session = Depends(get_db)
) -> Any:
    """
    Désactiver un coupon (Admin) ; les coupons ne sont jamais supprimés
    """
    if not CouponRepository(db).deactivate_coupon(coupon_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Coupon non trouvé"
        )
    return MessageResponse(message="Coupon désactivé avec succès")


@router.post("/{code}/redeem", response_model=CouponResponse)
def redeem_coupon(
    code: str,
    principal: Principal = Depends(require_scope("orders:write")),
    db: Session = Depends(get_db)
) -> Any:
    """
    Comptabiliser l'utilisation d'un coupon après confirmation d'une commande.
    À appeler une seule fois par commande confirmée.
    """
    try:
        coupon = CouponService(db).redeem(code)
    except StoreError as exc:
        raise to_http_exception(exc)

    return CouponResponse(message="Utilisation du coupon enregistrée", data=Coupon.from_orm(coupon))
