"""
Pydantic Schemas for Request/Response Validation

The mobile client speaks camelCase JSON (``flightId``, ``seatNumber``);
every schema aliases its snake_case fields accordingly and accepts
either spelling on input. Response schemas read straight from ORM
objects.
"""

import re
from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from skycomfort.models import OrderStatus, PaymentMethod, PaymentStatus


EMAIL_PATTERN = re.compile(r"^[\w\.\+-]+@[\w\.-]+\.\w+$")


class CamelModel(BaseModel):
    """Base schema: camelCase aliases, snake_case accepted, ORM-readable."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# AUTH
# =============================================================================

class RegisterRequest(CamelModel):
    """Request schema for creating an account."""
    name: str = Field(..., min_length=1, max_length=100, examples=["Jane Passenger"])
    email: str = Field(..., max_length=255, examples=["jane@example.com"])
    username: str = Field(..., min_length=1, max_length=100, examples=["jane"])
    password: str = Field(..., min_length=6, max_length=128)
    flight_id: Optional[str] = Field(None, max_length=20, examples=["SC101"])
    seat_number: Optional[str] = Field(None, max_length=10, examples=["12A"])
    is_staff: bool = False

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email format")
        return v


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class RefreshTokenRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class ValidateTokenRequest(CamelModel):
    token: Optional[str] = None


class UserResponse(CamelModel):
    """Public view of a user. Never includes the password hash."""
    id: int
    name: str
    email: str
    username: str
    flight_id: Optional[str] = None
    seat_number: Optional[str] = None
    is_staff: bool
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =============================================================================
# SERVICES (CATALOG)
# =============================================================================

class ServiceCreate(CamelModel):
    """Request schema for adding a catalog item."""
    title: str = Field(..., min_length=1, max_length=200, examples=["Premium Coffee"])
    description: str = Field(..., min_length=1, examples=["Freshly brewed premium coffee"])
    price: float = Field(..., ge=0, examples=[4.99])
    type: str = Field(..., min_length=1, max_length=50, examples=["beverage"])
    image_url: Optional[str] = Field(None, max_length=500)
    availability: bool = True
    category: Optional[str] = Field(None, max_length=50, examples=["hot"])
    metadata: Optional[dict[str, Any]] = None


class ServiceUpdate(CamelModel):
    """Partial update; only fields present in the body are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    type: Optional[str] = Field(None, min_length=1, max_length=50)
    image_url: Optional[str] = Field(None, max_length=500)
    availability: Optional[bool] = None
    category: Optional[str] = Field(None, max_length=50)
    metadata: Optional[dict[str, Any]] = None

    @field_validator("title", "description", "price", "type", "availability")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class AvailabilityUpdate(CamelModel):
    availability: bool


class ServiceResponse(CamelModel):
    id: int
    title: str
    description: str
    price: float
    type: str
    image_url: Optional[str] = None
    availability: bool
    category: Optional[str] = None
    metadata: Optional[dict[str, Any]] = Field(
        None, validation_alias=AliasChoices("meta_data", "metadata")
    )
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =============================================================================
# ORDERS
# =============================================================================

class OrderItemCreate(CamelModel):
    """Single line of an order. The price is taken from the catalog."""
    service_id: int = Field(..., ge=1, examples=[1])
    quantity: int = Field(default=1, ge=1, le=99, examples=[2])
    notes: Optional[str] = Field(None, max_length=500)


class OrderCreate(CamelModel):
    """Request schema for placing an order."""
    flight_id: str = Field(..., min_length=1, max_length=20, examples=["SC101"])
    seat_number: str = Field(..., min_length=1, max_length=10, examples=["12A"])
    items: List[OrderItemCreate] = Field(..., min_length=1)
    user_id: Optional[int] = Field(None, ge=1)
    notes: Optional[str] = Field(None, max_length=500)


class OrderUpdate(CamelModel):
    """Partial order update submitted through sync."""
    status: Optional[OrderStatus] = None
    notes: Optional[str] = Field(None, max_length=500)
    seat_number: Optional[str] = Field(None, min_length=1, max_length=10)

    @field_validator("status", "seat_number")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class OrderStatusUpdate(CamelModel):
    status: OrderStatus


class OrderItemResponse(CamelModel):
    id: int
    order_id: int
    service_id: int
    quantity: int
    price: float
    notes: Optional[str] = None
    service: Optional[ServiceResponse] = None


# =============================================================================
# PAYMENTS
# =============================================================================

class PaymentCreate(CamelModel):
    """Request schema for recording a payment against an order."""
    order_id: int = Field(..., ge=1)
    transaction_id: str = Field(..., min_length=1, max_length=100, examples=["TR123456"])
    amount: float = Field(..., gt=0, examples=[20.98])
    payment_method: PaymentMethod = Field(..., examples=["credit_card"])
    last_four_digits: Optional[str] = Field(None, pattern=r"^\d{4}$")
    status: PaymentStatus = PaymentStatus.COMPLETED
    metadata: Optional[dict[str, Any]] = None


class PaymentStatusUpdate(CamelModel):
    status: PaymentStatus
    metadata: Optional[dict[str, Any]] = None


class PaymentResponse(CamelModel):
    id: int
    transaction_id: str
    amount: float
    status: PaymentStatus
    payment_method: PaymentMethod
    last_four_digits: Optional[str] = None
    order_id: int
    metadata: Optional[dict[str, Any]] = Field(
        None, validation_alias=AliasChoices("meta_data", "metadata")
    )
    created_at: Optional[datetime] = None


class OrderResponse(CamelModel):
    """Order with its lines and payments."""
    id: int
    flight_id: str
    seat_number: str
    status: OrderStatus
    total_amount: float
    user_id: int
    notes: Optional[str] = None
    items: List[OrderItemResponse] = []
    payments: List[PaymentResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =============================================================================
# SYNC
# =============================================================================

class SyncItem(CamelModel):
    """One offline mutation queued by the client."""
    entity_type: str = Field(..., min_length=1)
    entity_id: str = Field(..., min_length=1)
    operation: str = Field(..., min_length=1)
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("entity_id", mode="before")
    @classmethod
    def coerce_entity_id(cls, v: Union[str, int]) -> str:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class SyncRequest(CamelModel):
    """
    Items are kept raw so one malformed entry fails on its own instead
    of rejecting the whole batch.
    """
    user_id: Optional[int] = Field(None, ge=1)
    items: List[Any]


class SyncResult(CamelModel):
    success: bool
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    message: Optional[str] = None


# =============================================================================
# ENVELOPE
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    status: str = "error"
    message: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    message: str
    environment: str
    database: str
    timestamp: datetime


def envelope(data: Optional[dict[str, Any]] = None, results: Optional[int] = None) -> dict[str, Any]:
    """Build the standard success envelope."""
    body: dict[str, Any] = {"status": "success"}
    if results is not None:
        body["results"] = results
    if data is not None:
        body["data"] = data
    return body
