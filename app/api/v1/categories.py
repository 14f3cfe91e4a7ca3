# ===================================
# app/api/v1/categories.py
# ===================================
from typing import Any, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import Principal, require_scope
from app.api.deps import to_http_exception
from app.models.category import Category as CategoryModel, ProtectionType
from app.repositories.category_repo import CategoryRepository
from app.services.category_service import CategoryService
from app.services.exceptions import StoreError
from app.schemas.common import MessageResponse
from app.schemas.category import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
    CategoriesListResponse,
)

router = APIRouter()


def _list_response(categories) -> CategoriesListResponse:
    data = [Category.from_orm(category) for category in categories]
    grouped = {
        protection_type: [Category.from_orm(category) for category in items]
        for protection_type, items in CategoryModel.group_by_protection_type(categories).items()
    }
    return CategoriesListResponse(count=len(data), data=data, grouped_by_type=grouped)


@router.get("/", response_model=CategoriesListResponse)
def list_categories(
    protection_type: Optional[ProtectionType] = Query(None, description="Filtrer par type de protection"),
    industry: Optional[str] = Query(None, description="Filtrer par industrie"),
    db: Session = Depends(get_db)
) -> Any:
    """Récupérer les catégories actives, regroupées par type de protection"""
    categories = CategoryRepository(db).get_categories(
        protection_type=protection_type.value if protection_type else None,
        industry=industry
    )
    return _list_response(categories)


@router.get("/featured", response_model=CategoriesListResponse)
def list_featured_categories(db: Session = Depends(get_db)) -> Any:
    """Récupérer les catégories mises en avant"""
    return _list_response(CategoryRepository(db).get_categories(is_featured=True))


@router.get("/slug/{slug}", response_model=CategoryResponse)
def get_category_by_slug(slug: str, db: Session = Depends(get_db)) -> Any:
    """Récupérer une catégorie active par son slug"""
    category = CategoryRepository(db).get_by_slug(slug)
    if not category or not category.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Catégorie non trouvée"
        )
    return CategoryResponse(message="Catégorie récupérée avec succès", data=Category.from_orm(category))


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category(category_id: int, db: Session = Depends(get_db)) -> Any:
    """Récupérer une catégorie par ID"""
    category = CategoryRepository(db).get_by_id(category_id)
    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Catégorie non trouvée"
        )
    return CategoryResponse(message="Catégorie récupérée avec succès", data=Category.from_orm(category))


@router.post("/", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    category_data: CategoryCreate,
    principal: Principal = Depends(require_scope("categories:write")),
    db: Session = Depends(get_db)
) -> Any:
    """Créer une nouvelle catégorie (Admin)"""
    try:
        category = CategoryService(db).create_category(category_data)
    except StoreError as exc:
        raise to_http_exception(exc)

    return CategoryResponse(message="Catégorie créée avec succès", data=Category.from_orm(category))


@router.put("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: int,
    category_update: CategoryUpdate,
    principal: Principal = Depends(require_scope("categories:write")),
    db: Session = Depends(get_db)
) -> Any:
    """Mettre à jour une catégorie (Admin)"""
    try:
        category = CategoryService(db).update_category(category_id, category_update)
    except StoreError as exc:
        raise to_http_exception(exc)

    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Catégorie non trouvée"
        )
    return CategoryResponse(message="Catégorie mise à jour avec succès", data=Category.from_orm(category))


@router.delete("/{category_id}", response_model=MessageResponse)
def delete_category(
    category_id: int,
    principal: Principal = Depends(require_scope("categories:write")),
    db: Session = Depends(get_db)
) -> Any:
    """Supprimer une catégorie vide (Admin)"""
    try:
        deleted = CategoryService(db).delete_category(category_id)
    except StoreError as exc:
        raise to_http_exception(exc)

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Catégorie non trouvée"
        )
    return MessageResponse(message="Catégorie supprimée avec succès")
