"""
SQLAlchemy Database Models

In-flight ordering entities:
- User: passengers and cabin staff
- Service: catalog items (meals, beverages, entertainment, comfort)
- Order / OrderItem: a passenger order and its price-snapshot lines
- Payment: card or account charges against an order

Orders and payments are never deleted, only status-transitioned.
"""

import enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from skycomfort.database import Base


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Persist enum values ("pending") rather than member names ("PENDING")."""
    return [member.value for member in enum_cls]


class OrderStatus(str, enum.Enum):
    """Order status workflow."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    """Payment status workflow."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, enum.Enum):
    """How a passenger pays."""
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    LOYALTY_POINTS = "loyalty_points"
    IN_FLIGHT_ACCOUNT = "in_flight_account"


class User(Base):
    """
    Passenger or staff account.

    The password column holds an argon2 hash and is never serialized.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    username = Column(String(100), nullable=False)
    password = Column(String(255), nullable=False)

    # Seat assignment for the current flight
    flight_id = Column(String(20), nullable=True, index=True)
    seat_number = Column(String(10), nullable=True)

    is_staff = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    orders = relationship("Order", back_populates="user")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<User #{self.id} - {self.email}{' (staff)' if self.is_staff else ''}>"


class Service(Base):
    """
    Catalog item a passenger can order.
    """
    __tablename__ = "services"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_services_price_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Float, nullable=False)
    type = Column(String(50), nullable=False, index=True)  # meal, beverage, entertainment, comfort
    image_url = Column(String(500), nullable=True)
    availability = Column(Boolean, default=True, nullable=False)
    category = Column(String(50), nullable=True, index=True)
    meta_data = Column("metadata", JSON, nullable=True)

    order_items = relationship("OrderItem", back_populates="service")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Service #{self.id} - {self.title} - {self.price:.2f}>"


class Order(Base):
    """
    A passenger order for one seat on one flight.

    total_amount is computed from the item price snapshots when the
    order is created and not recomputed afterwards.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    flight_id = Column(String(20), nullable=False, index=True)
    seat_number = Column(String(10), nullable=False)
    status = Column(
        Enum(OrderStatus, values_callable=_enum_values, name="order_status"),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True,
    )
    total_amount = Column(Float, nullable=False, default=0.0)
    notes = Column(Text, nullable=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    user = relationship("User", back_populates="orders")

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItem.id",
    )
    payments = relationship(
        "Payment",
        back_populates="order",
        lazy="selectin",
        order_by="Payment.id",
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Order #{self.id} - {self.flight_id}/{self.seat_number} - {self.status.value}>"


class OrderItem(Base):
    """
    One line of an order. price is the service price at order time.
    """
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=1)
    price = Column(Float, nullable=False)
    notes = Column(Text, nullable=True)

    order = relationship("Order", back_populates="items")
    service = relationship("Service", back_populates="order_items", lazy="selectin")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<OrderItem #{self.id} - order {self.order_id} - {self.quantity} x {self.price:.2f}>"


class Payment(Base):
    """
    A charge against an order.

    Completed payments move the order to processing; failed payments
    cancel it (see PaymentRepository).
    """
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    transaction_id = Column(String(100), nullable=False, unique=True, index=True)
    amount = Column(Float, nullable=False)
    status = Column(
        Enum(PaymentStatus, values_callable=_enum_values, name="payment_status"),
        default=PaymentStatus.PENDING,
        nullable=False,
        index=True,
    )
    payment_method = Column(
        Enum(PaymentMethod, values_callable=_enum_values, name="payment_method"),
        default=PaymentMethod.CREDIT_CARD,
        nullable=False,
    )
    last_four_digits = Column(String(4), nullable=True)
    meta_data = Column("metadata", JSON, nullable=True)

    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    order = relationship("Order", back_populates="payments")

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Payment {self.transaction_id} - {self.amount:.2f} - {self.status.value}>"
