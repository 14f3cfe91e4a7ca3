# ===================================
# app/schemas/coupon.py
# ===================================

import re
from typing import List, Optional
from datetime import datetime, timezone
from decimal import Decimal
from pydantic import BaseModel, Field, validator

from app.models.category import ProtectionType, Industry
from app.models.coupon import CouponType, CouponStatus

CODE_PATTERN = re.compile(r"^[A-Z0-9]{3,20}$")


def normalize_code(code: str) -> str:
    """Les codes sont stockés sans espaces et en majuscules"""
    return code.strip().upper()


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Dates naïves interprétées en UTC, dates avec fuseau converties en UTC"""
    if value is None:
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _check_code(value):
    if not isinstance(value, str):
        raise ValueError("Coupon code must be 3-20 alphanumeric characters")
    value = normalize_code(value)
    if not CODE_PATTERN.match(value):
        raise ValueError("Coupon code must be 3-20 alphanumeric characters")
    return value


class CouponBase(BaseModel):
    description: Optional[str] = Field(None, max_length=200)
    minimum_order_amount: Decimal = Field(default=Decimal("0"), ge=0)
    maximum_discount_amount: Optional[Decimal] = Field(None, gt=0)
    usage_limit: Optional[int] = Field(None, ge=1)
    user_usage_limit: int = Field(default=1, ge=1)
    protection_types: List[ProtectionType] = []
    industries: List[Industry] = []
    is_active: bool = True
    is_public: bool = True
    applicable_product_ids: List[int] = []
    applicable_category_ids: List[int] = []

    class Config:
        use_enum_values = True


class CouponCreate(CouponBase):
    code: str
    discount_type: CouponType
    value: Decimal
    start_date: datetime
    end_date: datetime

    @validator("code", pre=True)
    def validate_code(cls, v):
        return _check_code(v)

    @validator("value")
    def validate_value(cls, v, values):
        if v < Decimal("0.01"):
            raise ValueError("Coupon value must be positive")
        if values.get("discount_type") == CouponType.PERCENTAGE.value and v > 100:
            raise ValueError("Percentage coupon value cannot exceed 100")
        return v

    @validator("start_date", "end_date")
    def validate_dates(cls, v):
        return _as_utc(v)

    @validator("end_date")
    def validate_window(cls, v, values):
        start = values.get("start_date")
        if start is not None and v < start:
            raise ValueError("End date must be after start date")
        return v


class CouponUpdate(BaseModel):
    code: Optional[str] = None
    description: Optional[str] = Field(None, max_length=200)
    discount_type: Optional[CouponType] = None
    value: Optional[Decimal] = None
    minimum_order_amount: Optional[Decimal] = Field(None, ge=0)
    maximum_discount_amount: Optional[Decimal] = Field(None, gt=0)
    usage_limit: Optional[int] = Field(None, ge=1)
    user_usage_limit: Optional[int] = Field(None, ge=1)
    protection_types: Optional[List[ProtectionType]] = None
    industries: Optional[List[Industry]] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: Optional[bool] = None
    is_public: Optional[bool] = None
    applicable_product_ids: Optional[List[int]] = None
    applicable_category_ids: Optional[List[int]] = None

    class Config:
        use_enum_values = True

    @validator("code", pre=True)
    def validate_code(cls, v):
        if v is None:
            return v
        return _check_code(v)

    @validator("value")
    def validate_value(cls, v, values):
        if v is None:
            return v
        if v < Decimal("0.01"):
            raise ValueError("Coupon value must be positive")
        if values.get("discount_type") == CouponType.PERCENTAGE.value and v > 100:
            raise ValueError("Percentage coupon value cannot exceed 100")
        return v

    @validator("start_date", "end_date")
    def validate_dates(cls, v):
        return _as_utc(v)

    @validator("end_date")
    def validate_window(cls, v, values):
        start = values.get("start_date")
        if v is not None and start is not None and v < start:
            raise ValueError("End date must be after start date")
        return v


class Coupon(BaseModel):
    id: int
    code: str
    description: Optional[str] = None
    discount_type: str
    value: Decimal
    formatted_value: str
    minimum_order_amount: Decimal
    maximum_discount_amount: Optional[Decimal] = None
    currency: str
    usage_limit: Optional[int] = None
    used_count: int
    user_usage_limit: int
    protection_types: List[str] = []
    industries: List[str] = []
    applicable_product_ids: List[int] = []
    applicable_category_ids: List[int] = []
    start_date: datetime
    end_date: datetime
    is_active: bool
    is_public: bool
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OrderLineItem(BaseModel):
    product_id: int
    category_id: Optional[int] = None
    amount: Decimal = Field(ge=0)  # Total de la ligne (prix x quantité)


class DiscountRequest(BaseModel):
    code: str = Field(min_length=1)
    order_amount: Decimal = Field(ge=0)
    items: List[OrderLineItem] = []


class DiscountQuote(BaseModel):
    code: str
    is_valid: bool
    status: CouponStatus
    order_amount: Decimal
    applicable_amount: Decimal
    discount: Decimal
    final_amount: Decimal
    message: str


class CouponResponse(BaseModel):
    success: bool = True
    message: str
    data: Coupon


class CouponsListResponse(BaseModel):
    success: bool = True
    data: List[Coupon]
    total: int
    page: int
    per_page: int
    has_more: bool


class DiscountQuoteResponse(BaseModel):
    success: bool = True
    data: DiscountQuote
