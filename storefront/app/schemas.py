"""Pydantic schemas for the storefront API."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

from .models import OrderStatus

Role = Literal["CUSTOMER", "ADMIN"]

_EXPIRY_PATTERN = r"^(0[1-9]|1[0-2])/?([0-9]{4}|[0-9]{2})$"


def _non_blank(value: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        msg = "value must be non-empty"
        raise ValueError(msg)
    return cleaned


def _normalize_email(value: str) -> str:
    cleaned = value.strip().lower()
    if cleaned.count("@") != 1:
        msg = "invalid email format"
        raise ValueError(msg)
    local, domain = cleaned.split("@")
    if not local or not domain or "." not in domain:
        msg = "invalid email format"
        raise ValueError(msg)
    return cleaned


# Users -------------------------------------------------------------------------------------


class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(max_length=255)
    password: str = Field(min_length=6, max_length=128)
    role: Role = "CUSTOMER"

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        return _non_blank(value)

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str) -> str:
        return _normalize_email(value)


class UserLogin(BaseModel):
    email: str
    password: str = Field(min_length=6, max_length=128)

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str) -> str:
        return _normalize_email(value)


class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, min_length=6, max_length=128)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: Optional[str]) -> Optional[str]:
        return _non_blank(value) if value is not None else None

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: Optional[str]) -> Optional[str]:
        return _normalize_email(value) if value is not None else None


class RefreshRequest(BaseModel):
    refresh_token: Optional[str] = Field(default=None, alias="refreshToken")

    model_config = ConfigDict(populate_by_name=True)


class UserResponse(BaseModel):
    id: PositiveInt
    name: str
    email: str
    role: Role
    is_active: bool = Field(alias="isActive")
    created_at: datetime = Field(alias="createdAt")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class AuthResponse(BaseModel):
    user: UserResponse
    access_token: str = Field(alias="accessToken")
    refresh_token: str = Field(alias="refreshToken")

    model_config = ConfigDict(populate_by_name=True)


class TokenResponse(BaseModel):
    access_token: str = Field(alias="accessToken")

    model_config = ConfigDict(populate_by_name=True)


# Products ----------------------------------------------------------------------------------


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str = Field(default="", max_length=5000)
    price: Decimal = Field(ge=Decimal("0"), max_digits=12, decimal_places=2)
    category: str = Field(min_length=1, max_length=100)
    stock_quantity: int = Field(default=0, ge=0, alias="stockQuantity")
    images: list[str] = Field(default_factory=list)
    is_active: bool = Field(default=True, alias="isActive")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("name", "category")
    @classmethod
    def _strip(cls, value: str) -> str:
        return _non_blank(value)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=5000)
    price: Optional[Decimal] = Field(default=None, ge=Decimal("0"), max_digits=12, decimal_places=2)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    stock_quantity: Optional[int] = Field(default=None, ge=0, alias="stockQuantity")
    images: Optional[list[str]] = None
    is_active: Optional[bool] = Field(default=None, alias="isActive")

    model_config = ConfigDict(populate_by_name=True)


class ProductResponse(BaseModel):
    id: PositiveInt
    name: str
    description: str
    price: Decimal
    category: str
    stock_quantity: int = Field(alias="stockQuantity")
    images: list[str]
    is_active: bool = Field(alias="isActive")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    total_products: int = Field(alias="totalProducts")
    total_pages: int = Field(alias="totalPages")
    current_page: int = Field(alias="currentPage")

    model_config = ConfigDict(populate_by_name=True)


class ProductSummary(BaseModel):
    """Current catalog view of a product referenced from a cart or order line."""

    id: PositiveInt
    name: str
    price: Decimal
    is_active: bool = Field(alias="isActive")

    model_config = ConfigDict(populate_by_name=True)


# Cart --------------------------------------------------------------------------------------


class AddToCartRequest(BaseModel):
    product_id: PositiveInt = Field(alias="productId")
    quantity: PositiveInt

    model_config = ConfigDict(populate_by_name=True)


class CartItemUpdate(BaseModel):
    quantity: int = Field(ge=0)


class CartItemResponse(BaseModel):
    product_id: PositiveInt = Field(alias="productId")
    product_name: str = Field(alias="productName")
    product_price: Decimal = Field(alias="productPrice")
    quantity: PositiveInt
    total_item_price: Decimal = Field(alias="totalItemPrice")
    product: Optional[ProductSummary] = None

    model_config = ConfigDict(populate_by_name=True)


class CartResponse(BaseModel):
    id: PositiveInt
    user_id: PositiveInt = Field(alias="userId")
    items: list[CartItemResponse]
    total_price: Decimal = Field(alias="totalPrice")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True)


# Orders ------------------------------------------------------------------------------------


class OrderCreate(BaseModel):
    shipping_address: str = Field(min_length=1, max_length=1000, alias="shippingAddress")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("shipping_address")
    @classmethod
    def _strip_address(cls, value: str) -> str:
        return _non_blank(value)


class OrderUpdateStatus(BaseModel):
    status: OrderStatus


class OrderItemResponse(BaseModel):
    product_id: PositiveInt = Field(alias="productId")
    product_name: str = Field(alias="productName")
    quantity: PositiveInt
    price: Decimal
    total_item_price: Decimal = Field(alias="totalItemPrice")
    product: Optional[ProductSummary] = None

    model_config = ConfigDict(populate_by_name=True)


class OrderResponse(BaseModel):
    id: PositiveInt
    user_id: PositiveInt = Field(alias="userId")
    items: list[OrderItemResponse]
    total_amount: Decimal = Field(alias="totalAmount")
    status: OrderStatus
    shipping_address: str = Field(alias="shippingAddress")
    delivery_date: Optional[datetime] = Field(default=None, alias="deliveryDate")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True)


class OrderStatusResponse(BaseModel):
    status: OrderStatus


class OrderDeleteResponse(BaseModel):
    deleted: bool


class OrderEventResponse(BaseModel):
    type: str
    payload: str
    created_at: datetime = Field(alias="createdAt")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


# Payment -----------------------------------------------------------------------------------


class PaymentRequest(BaseModel):
    amount: Decimal = Field(gt=Decimal("0"), max_digits=12, decimal_places=2)
    card_number: str = Field(pattern=r"^[0-9]{16}$", alias="cardNumber")
    expiry_date: str = Field(pattern=_EXPIRY_PATTERN, alias="expiryDate")
    cvv: str = Field(pattern=r"^[0-9]{3}$")

    model_config = ConfigDict(populate_by_name=True)


class PaymentResponse(BaseModel):
    transaction_id: str = Field(alias="transactionId")
    status: Literal["success"]

    model_config = ConfigDict(populate_by_name=True)
