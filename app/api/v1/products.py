# ===================================
# app/api/v1/products.py
# ===================================
from typing import Any, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import Principal, require_scope
from app.api.deps import to_http_exception
from app.models.category import ProtectionType, Industry
from app.repositories.product_repo import ProductRepository, SORT_OPTIONS
from app.services.product_service import ProductService
from app.services.exceptions import StoreError
from app.schemas.common import MessageResponse, pagination_meta
from app.schemas.product import (
    Product,
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductsListResponse,
    BulkStockUpdate,
    BulkStockUpdateResponse,
)

router = APIRouter()


@router.get("/", response_model=ProductsListResponse)
def list_products(
    skip: int = Query(0, ge=0, description="Nombre d'éléments à ignorer"),
    limit: int = Query(12, ge=1, le=100, description="Nombre d'éléments à retourner"),
    search: Optional[str] = Query(None, description="Terme de recherche"),
    category_id: Optional[int] = Query(None, description="Filtrer par catégorie"),
    protection_type: Optional[ProtectionType] = Query(None, description="Filtrer par type de protection"),
    industry: Optional[Industry] = Query(None, description="Filtrer par industrie"),
    brand: Optional[str] = Query(None, description="Filtrer par marque"),
    min_price: Optional[float] = Query(None, ge=0, description="Prix minimum"),
    max_price: Optional[float] = Query(None, ge=0, description="Prix maximum"),
    in_stock: Optional[bool] = Query(None, description="En stock seulement"),
    on_sale: Optional[bool] = Query(None, description="En promotion seulement"),
    is_featured: Optional[bool] = Query(None, description="Produits mis en avant"),
    sort: str = Query("newest", description=f"Tri: {', '.join(SORT_OPTIONS)}"),
    db: Session = Depends(get_db)
) -> Any:
    """
    Récupérer la liste des produits avec filtres et pagination
    """
    products, total = ProductRepository(db).get_products(
        skip=skip,
        limit=limit,
        search=search,
        category_id=category_id,
        protection_type=protection_type.value if protection_type else None,
        industry=industry.value if industry else None,
        brand=brand,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        on_sale=on_sale,
        is_featured=is_featured,
        sort=sort
    )

    return ProductsListResponse(
        data=[Product.from_orm(product) for product in products],
        **pagination_meta(total, skip, limit)
    )


@router.get("/featured", response_model=ProductsListResponse)
def get_featured_products(
    limit: int = Query(8, ge=1, le=50, description="Nombre de produits à retourner"),
    db: Session = Depends(get_db)
) -> Any:
    """
    Récupérer les produits mis en avant
    """
    products, total = ProductRepository(db).get_products(limit=limit, is_featured=True)

    return ProductsListResponse(
        data=[Product.from_orm(product) for product in products],
        total=total,
        page=1,
        per_page=limit,
        has_more=False
    )


@router.get("/sale", response_model=ProductsListResponse)
def get_sale_products(
    limit: int = Query(12, ge=1, le=50, description="Nombre de produits à retourner"),
    db: Session = Depends(get_db)
) -> Any:
    """
    Récupérer les produits dont le prix barré est supérieur au prix
    """
    products, total = ProductRepository(db).get_products(limit=limit, on_sale=True)

    return ProductsListResponse(
        data=[Product.from_orm(product) for product in products],
        total=total,
        page=1,
        per_page=limit,
        has_more=total > limit
    )


@router.get("/admin/low-stock", response_model=ProductsListResponse)
def get_low_stock_products(
    threshold: int = Query(10, ge=0, description="Seuil de stock"),
    principal: Principal = Depends(require_scope("products:write")),
    db: Session = Depends(get_db)
) -> Any:
    """
    Produits actifs dont le stock est sous le seuil (Admin)
    """
    products = ProductRepository(db).get_low_stock_products(threshold)

    return ProductsListResponse(
        data=[Product.from_orm(product) for product in products],
        total=len(products),
        page=1,
        per_page=len(products),
        has_more=False
    )


@router.put("/admin/bulk-stock", response_model=BulkStockUpdateResponse)
def bulk_update_stock(
    payload: BulkStockUpdate,
    principal: Principal = Depends(require_scope("products:write")),
    db: Session = Depends(get_db)
) -> Any:
    """
    Mettre à jour le stock de plusieurs produits (Admin)
    """
    results = ProductService(db).bulk_update_stock(payload.updates)
    return BulkStockUpdateResponse(data=results)


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: int,
    db: Session = Depends(get_db)
) -> Any:
    """
    Récupérer un produit actif par son ID
    """
    product = ProductRepository(db).get_product_by_id(product_id)

    if not product or not product.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Produit non trouvé"
        )

    return ProductResponse(
        message="Produit récupéré avec succès",
        data=Product.from_orm(product)
    )


@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    product_data: ProductCreate,
    principal: Principal = Depends(require_scope("products:write")),
    db: Session = Depends(get_db)
) -> Any:
    """
    Créer un nouveau produit (Admin)
    """
    try:
        product = ProductService(db).create_product(product_data)
    except StoreError as exc:
        raise to_http_exception(exc)

    return ProductResponse(
        message="Produit créé avec succès",
        data=Product.from_orm(product)
    )


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    product_update: ProductUpdate,
    principal: Principal = Depends(require_scope("products:write")),
    db: Session = Depends(get_db)
) -> Any:
    """
    Mettre à jour un produit (Admin)
    """
    try:
        product = ProductService(db).update_product(product_id, product_update)
    except StoreError as exc:
        raise to_http_exception(exc)

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Produit non trouvé"
        )

    return ProductResponse(
        message="Produit mis à jour avec succès",
        data=Product.from_orm(product)
    )


@router.delete("/{product_id}", response_model=MessageResponse)
def delete_product(
    product_id: int,
    principal: Principal = Depends(require_scope("products:write")),
    db: Session = Depends(get_db)
) -> Any:
    """
    Supprimer un produit (soft delete, Admin)
    """
    if not ProductService(db).delete_product(product_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Produit non trouvé"
        )

    return MessageResponse(message="Produit supprimé avec succès")
