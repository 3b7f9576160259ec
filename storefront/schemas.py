"""
Pydantic Schemas for API Payloads and Local Forms

Three groups live here:
- Entities mirrored from the backend (User, Address, Category, Item, Order,
  OrderItem, Notification) and the paginated Page envelope
- Request payloads sent to the backend (create/update DTOs)
- Local form schemas checked before any request is made

The wire format is camelCase; Python code uses snake_case attributes.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from storefront.core.errors import ValidationFailure, describe_validation_error

ZIP_CODE_PATTERN = re.compile(r"^\d{5}-?\d{3}$")


class ApiModel(BaseModel):
    """Base model speaking camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_payload(self) -> dict[str, Any]:
        """Serialize for a request body, leaving out unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# =============================================================================
# ENUMS
# =============================================================================

class UserType(str, Enum):
    ADMIN = "ADMIN"
    CLIENT = "CLIENT"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    DEBIT = "DEBIT_CARD"
    CREDIT = "CREDIT_CARD"
    PIX = "PIX"


class OrderStatus(str, Enum):
    """Order status workflow."""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    DELIVERED = "DELIVERED"
    CANCELED = "CANCELED"


ORDER_STATUS_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELED: frozenset(),
}

STATUS_LABELS: dict[OrderStatus, str] = {
    OrderStatus.PENDING: "Pending",
    OrderStatus.CONFIRMED: "Confirmed",
    OrderStatus.DELIVERED: "Delivered",
    OrderStatus.CANCELED: "Canceled",
}

PAYMENT_LABELS: dict[PaymentMethod, str] = {
    PaymentMethod.CASH: "Cash",
    PaymentMethod.DEBIT: "Debit",
    PaymentMethod.CREDIT: "Credit",
    PaymentMethod.PIX: "PIX",
}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """Check whether an order may move from ``current`` to ``target``."""
    return target in ORDER_STATUS_TRANSITIONS[current]


# =============================================================================
# ENTITIES
# =============================================================================

class Address(ApiModel):
    id: int
    street: str
    number: str
    district: str
    city: str
    state: str
    zip_code: str
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def label(self) -> str:
        return f"{self.street}, {self.number} - {self.district}, {self.city}/{self.state}"


class User(ApiModel):
    id: int
    name: str
    email: str
    phone: str
    type: UserType = UserType.CLIENT
    addresses: Optional[List[Address]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.type == UserType.ADMIN


class Category(ApiModel):
    id: int
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Item(ApiModel):
    id: int
    name: str
    description: str = ""
    unit_price: float
    image_url: Optional[str] = None
    category_id: int
    available: bool = True


class OrderItem(ApiModel):
    """Line-item snapshot frozen when the order was created."""
    id: Optional[int] = None
    order_id: Optional[int] = None
    item_id: int
    item: Optional[Item] = None
    quantity: int
    unit_price: float
    subtotal: float


class Order(ApiModel):
    id: int
    client_id: int
    client: Optional[User] = None
    created_by_user_id: Optional[int] = None
    created_by: Optional[User] = None
    address_id: Optional[int] = None
    payment_method: PaymentMethod
    status: OrderStatus = OrderStatus.PENDING
    items: List[OrderItem] = Field(default_factory=list)
    total_amount: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def status_label(self) -> str:
        return STATUS_LABELS[self.status]

    @property
    def payment_label(self) -> str:
        return PAYMENT_LABELS[self.payment_method]


class Notification(ApiModel):
    id: int
    title: str
    body: str
    read: bool = False
    created_at: Optional[datetime] = None
    data: Optional[dict[str, Any]] = None


T = TypeVar("T")


class PageMeta(ApiModel):
    total: int = 0
    page: Optional[int] = None
    page_size: Optional[int] = None


class Page(ApiModel, Generic[T]):
    """Paginated listing envelope: ``{"data": [...], "meta": {"total": n}}``."""
    data: List[T] = Field(default_factory=list)
    meta: PageMeta = Field(default_factory=PageMeta)

    @property
    def total(self) -> int:
        return self.meta.total


class AuthResult(ApiModel):
    """Body of login and refresh responses."""
    access_token: str
    user: Optional[User] = None


# =============================================================================
# REQUEST PAYLOADS
# =============================================================================

class AddressCreate(ApiModel):
    street: str
    number: str
    district: str
    city: str
    state: str
    zip_code: str


class AddressUpdate(ApiModel):
    street: Optional[str] = None
    number: Optional[str] = None
    district: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class CategoryCreate(ApiModel):
    name: str
    description: Optional[str] = None


class CategoryUpdate(ApiModel):
    name: Optional[str] = None
    description: Optional[str] = None


class ItemCreate(ApiModel):
    name: str
    description: str = ""
    unit_price: float
    image_url: Optional[str] = None
    category_id: int
    available: bool = True


class ItemUpdate(ApiModel):
    name: Optional[str] = None
    description: Optional[str] = None
    unit_price: Optional[float] = None
    image_url: Optional[str] = None
    category_id: Optional[int] = None
    available: Optional[bool] = None


class UserCreate(ApiModel):
    name: str
    email: str
    password: str
    phone: str


class UserUpdate(ApiModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class OrderLine(ApiModel):
    item_id: int
    quantity: int = Field(..., ge=1)
    unit_price: float
    subtotal: float


class CreateOrderRequest(ApiModel):
    client_id: int
    address_id: int
    payment_method: PaymentMethod
    total_amount: float
    items: List[OrderLine] = Field(..., min_length=1)


class UpdateOrderRequest(ApiModel):
    client_id: Optional[int] = None
    confirmed_by_user_id: Optional[int] = None
    status: Optional[OrderStatus] = None


# =============================================================================
# LOCAL FORMS
# =============================================================================

def _min_length(value: str, size: int, message: str) -> str:
    value = value.strip()
    if len(value) < size:
        raise ValueError(message)
    return value


class LoginForm(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = (v or "").strip()
        if not re.match(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", v):
            raise ValueError("Invalid email")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must have at least 6 characters")
        return v


class SignupForm(LoginForm):
    name: str
    phone: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _min_length(v, 3, "Name must have at least 3 characters")

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return _min_length(v, 10, "Invalid phone number")


class AdminSignupForm(SignupForm):
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self) -> "AdminSignupForm":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class ProfileForm(BaseModel):
    name: str
    phone: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _min_length(v, 3, "Name must have at least 3 characters")

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return _min_length(v, 10, "Invalid phone number")


class AddressForm(BaseModel):
    street: str
    number: str
    district: str
    city: str
    state: str
    zip_code: str

    @field_validator("street")
    @classmethod
    def validate_street(cls, v: str) -> str:
        return _min_length(v, 3, "Street must have at least 3 characters")

    @field_validator("number")
    @classmethod
    def validate_number(cls, v: str) -> str:
        return _min_length(v, 1, "Number is required")

    @field_validator("district")
    @classmethod
    def validate_district(cls, v: str) -> str:
        return _min_length(v, 2, "District must have at least 2 characters")

    @field_validator("city")
    @classmethod
    def validate_city(cls, v: str) -> str:
        return _min_length(v, 2, "City must have at least 2 characters")

    @field_validator("state")
    @classmethod
    def validate_state(cls, v: str) -> str:
        v = v.strip().upper()
        if len(v) != 2:
            raise ValueError("State must have 2 characters")
        return v

    @field_validator("zip_code")
    @classmethod
    def validate_zip(cls, v: str) -> str:
        v = v.strip()
        if not ZIP_CODE_PATTERN.match(v):
            raise ValueError("Invalid zip code")
        return v

    def to_create(self) -> AddressCreate:
        return AddressCreate(**self.model_dump())


class CategoryForm(BaseModel):
    name: str
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _min_length(v, 2, "Category name must have at least 2 characters")


class ItemForm(BaseModel):
    name: str
    description: str = ""
    unit_price: float
    category_id: Optional[int] = Field(None, validate_default=True)
    available: bool = True
    image_url: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _min_length(v, 2, "Item name must have at least 2 characters")

    @field_validator("unit_price")
    @classmethod
    def validate_price(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Price must be greater than 0")
        return round(v, 2)

    @field_validator("category_id")
    @classmethod
    def validate_category(cls, v: Optional[int]) -> Optional[int]:
        if v is None:
            raise ValueError("Category is required")
        return v

    def to_create(self) -> ItemCreate:
        return ItemCreate(**self.model_dump())


FormT = TypeVar("FormT", bound=BaseModel)


def validate_form(form: type[FormT], **data: Any) -> FormT:
    """
    Run a local form schema before submitting anything.

    Raises:
        ValidationFailure: with one message per failing field
    """
    try:
        return form(**data)
    except ValidationError as exc:
        raise ValidationFailure(describe_validation_error(exc)) from exc
