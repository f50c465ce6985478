from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, Field, PlainSerializer, PositiveInt, field_validator
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict

from .models import ROLE_USER
from .utils import sanitize_input


# Numeric(10,2) holds at most 8 integer digits
MAX_AMOUNT = Decimal("100000000")

# Stored as Decimal, sent to clients as a JSON number
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python. Unknown input keys are ignored."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        extra="ignore",
    )


def _require_text(value: str, field: str) -> str:
    cleaned = sanitize_input(value)
    if not cleaned:
        raise ValueError(f"{field} must not be empty")
    return cleaned


# ---- users / auth ----

class UserCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1)
    role: Literal["user", "seller"] = ROLE_USER

    @field_validator("role", mode="before")
    def default_role(cls, v):
        return ROLE_USER if v is None else v

    @field_validator("name")
    def clean_name(cls, v: str):
        return _require_text(v, "name")

    @field_validator("email")
    def clean_email(cls, v: str):
        v = v.strip()
        if "@" not in v:
            raise ValueError("email must contain '@'")
        return v


class LoginRequest(CamelModel):
    email: str
    password: str

    @field_validator("email")
    def strip_email(cls, v: str):
        return v.strip()


class UserRead(CamelModel):
    id: int
    name: str
    email: str
    role: str = ROLE_USER


class LoginResponse(CamelModel):
    token: str
    user: UserRead


class MessageResponse(CamelModel):
    message: str


# ---- catalog ----

class ProductCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., ge=Decimal("0"), lt=MAX_AMOUNT)
    description: Optional[str] = None
    image_url: Optional[str] = None
    stock: int = Field(default=0, ge=0)
    category: Optional[str] = None

    @field_validator("title")
    def clean_title(cls, v: str):
        return _require_text(v, "title")

    @field_validator("description", "category")
    def clean_text(cls, v: Optional[str]):
        return sanitize_input(v)


class ProductRead(CamelModel):
    id: int
    title: str
    price: Money
    description: Optional[str] = None
    image_url: Optional[str] = None
    seller_id: int
    stock: int
    category: Optional[str] = None


# ---- orders ----

class OrderItemIn(CamelModel):
    product_id: PositiveInt
    quantity: PositiveInt


class OrderCreate(CamelModel):
    items: List[OrderItemIn] = Field(..., min_length=1)
    # Client-supplied and stored as given (rounded to cents); not recomputed from prices
    total_amount: Decimal = Field(..., ge=Decimal("0"), lt=MAX_AMOUNT)
    address: str = Field(..., min_length=1, max_length=500)

    @field_validator("address")
    def clean_address(cls, v: str):
        return _require_text(v, "address")


class OrderItemRead(CamelModel):
    product_id: int
    quantity: int


class OrderRead(CamelModel):
    id: int
    user_id: int
    items: List[OrderItemRead] = []
    total_amount: Money
    address: str
    status: str
    created_at: datetime

    @field_validator("created_at")
    def assume_utc(cls, v: datetime):
        # SQLite hands back naive values; they were written as UTC
        return v.replace(tzinfo=timezone.utc) if v.tzinfo is None else v.astimezone(timezone.utc)


class OrderItemDetail(BaseModel):
    # productId carries the resolved product, or null when it no longer exists
    product: Optional[ProductRead] = Field(default=None, serialization_alias="productId")
    quantity: int

    model_config = ConfigDict(from_attributes=True)


class OrderDetail(OrderRead):
    items: List[OrderItemDetail] = []


class OrderPlaced(CamelModel):
    message: str
    order: OrderRead
