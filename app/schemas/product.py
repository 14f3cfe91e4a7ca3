# ===================================
# app/schemas/product.py
# ===================================

from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field, validator

from app.models.category import ProtectionType, Industry


class ProductBase(BaseModel):
    name: str = Field(min_length=3, max_length=200)
    description: str = Field(min_length=10, max_length=2000)
    short_description: Optional[str] = Field(None, max_length=300)
    brand: str = Field(min_length=1)
    model: Optional[str] = None
    image_url: Optional[str] = None
    price: Decimal = Field(ge=Decimal("0.01"))
    compare_price: Optional[Decimal] = Field(None, ge=0)
    protection_type: ProtectionType
    industry: Industry
    category_id: int
    stock: int = Field(default=0, ge=0)
    low_stock_threshold: int = Field(default=10, ge=0)
    is_featured: bool = False

    class Config:
        use_enum_values = True

    @validator("name", "description", "brand", pre=True)
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class ProductCreate(ProductBase):
    sku: str = Field(min_length=1, max_length=64)

    @validator("sku", pre=True)
    def normalize_sku(cls, v):
        return v.strip().upper() if isinstance(v, str) else v


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = Field(None, min_length=10, max_length=2000)
    short_description: Optional[str] = Field(None, max_length=300)
    brand: Optional[str] = Field(None, min_length=1)
    model: Optional[str] = None
    image_url: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=Decimal("0.01"))
    compare_price: Optional[Decimal] = Field(None, ge=0)
    protection_type: Optional[ProtectionType] = None
    industry: Optional[Industry] = None
    category_id: Optional[int] = None
    stock: Optional[int] = Field(None, ge=0)
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None

    class Config:
        use_enum_values = True


class StockUpdate(BaseModel):
    product_id: int
    stock: int = Field(ge=0)


class BulkStockUpdate(BaseModel):
    updates: List[StockUpdate] = Field(min_length=1)


class StockUpdateResult(BaseModel):
    product_id: int
    success: bool
    name: Optional[str] = None
    new_stock: Optional[int] = None
    error: Optional[str] = None


class CategoryInfo(BaseModel):
    id: int
    name: str
    slug: str

    class Config:
        from_attributes = True


class Product(BaseModel):
    id: int
    sku: str
    name: str
    description: str
    short_description: Optional[str] = None
    brand: str
    model: Optional[str] = None
    image_url: Optional[str] = None
    price: Decimal
    compare_price: Optional[Decimal] = None
    currency: str
    discount_percentage: int = 0
    protection_type: str
    industry: str
    category_id: int
    category: Optional[CategoryInfo] = None
    stock: int
    low_stock_threshold: int
    is_active: bool
    is_featured: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProductResponse(BaseModel):
    success: bool = True
    message: str
    data: Product


class ProductsListResponse(BaseModel):
    success: bool = True
    data: List[Product]
    total: int
    page: int
    per_page: int
    has_more: bool


class BulkStockUpdateResponse(BaseModel):
    success: bool = True
    data: List[StockUpdateResult]
