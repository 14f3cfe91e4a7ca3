# ===================================
# app/schemas/category.py
# ===================================

from typing import Dict, List, Optional
from datetime import datetime
from pydantic import BaseModel, Field, validator

from app.models.category import ProtectionType, CATEGORY_INDUSTRIES


def _check_industry(v):
    if v is not None and v not in CATEGORY_INDUSTRIES:
        raise ValueError(f"Industry must be one of: {', '.join(CATEGORY_INDUSTRIES)}")
    return v


class CategoryBase(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    image_url: Optional[str] = None
    icon: Optional[str] = None
    parent_id: Optional[int] = None
    protection_type: ProtectionType
    industry: str = "All"
    is_featured: bool = False
    sort_order: int = 0

    class Config:
        use_enum_values = True

    @validator("name", pre=True)
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @validator("industry")
    def validate_industry(cls, v):
        return _check_industry(v)


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    image_url: Optional[str] = None
    icon: Optional[str] = None
    parent_id: Optional[int] = None
    protection_type: Optional[ProtectionType] = None
    industry: Optional[str] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    sort_order: Optional[int] = None

    class Config:
        use_enum_values = True

    @validator("name", pre=True)
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @validator("industry")
    def validate_industry(cls, v):
        return _check_industry(v)


class Category(BaseModel):
    id: int
    name: str
    slug: str
    url: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    icon: Optional[str] = None
    parent_id: Optional[int] = None
    is_root: bool = True
    protection_type: str
    industry: str
    is_active: bool
    is_featured: bool
    sort_order: int
    product_count: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CategoryResponse(BaseModel):
    success: bool = True
    message: str
    data: Category


class CategoriesListResponse(BaseModel):
    success: bool = True
    count: int
    data: List[Category]
    grouped_by_type: Dict[str, List[Category]] = {}
