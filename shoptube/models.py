from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field


class SignupRequest(BaseModel):
    name: str = ""
    email: str = ""
    password: str = ""
    role: str = ""
    business_name: Optional[str] = None
    business_description: Optional[str] = None


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class CartItemCreate(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1)


class CartItemUpdate(BaseModel):
    quantity: int = Field(..., ge=1)


class WishlistItemCreate(BaseModel):
    product_id: str


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    stock: int = Field(..., ge=0)
    image_url: Optional[str] = None


class ProfileUpdate(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)


class BusinessUpdate(BaseModel):
    business_name: str = Field(..., min_length=1)
    description: Optional[str] = None


class PasswordUpdate(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=8)


class OrderStatusUpdate(BaseModel):
    status: str


class CheckoutLine(BaseModel):
    product_id: str
    quantity: int
    price_per_unit: Decimal


class CheckoutRequest(BaseModel):
    """Checkout form as posted by the browser. Amount, address and cart are
    checked by ``checkout.validate_checkout``."""

    user_id: Optional[str] = None
    full_name: str = ""
    email: str = ""
    phone_number: Optional[str] = None
    total_amount: Any = None
    address: Any = None
    cart_items: Any = None
