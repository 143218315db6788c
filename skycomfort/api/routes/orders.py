"""
Order Endpoints

Passengers place and read their own orders; staff see every order and
move them through the kitchen/cabin workflow.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from skycomfort.api.deps import get_current_user, require_staff
from skycomfort.core.config import get_settings
from skycomfort.core.exceptions import AppError, NotFoundError, PermissionDeniedError, internal_error
from skycomfort.database import get_db
from skycomfort.models import Order, OrderStatus, User
from skycomfort.repositories.orders import OrderRepository
from skycomfort.schemas import ErrorResponse, OrderCreate, OrderResponse, OrderStatusUpdate, envelope

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/orders",
    tags=["Orders"],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


def _order_list(orders: list[Order]) -> dict[str, Any]:
    return envelope(
        {"orders": [OrderResponse.model_validate(o) for o in orders]},
        results=len(orders),
    )


def _single(order: Optional[Order]) -> dict[str, Any]:
    if order is None:
        raise NotFoundError("Order not found")
    return envelope({"order": OrderResponse.model_validate(order)})


# =============================================================================
# PASSENGER
# =============================================================================

@router.post("", status_code=201, summary="Place an order")
async def create_order(
    body: OrderCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """
    Place an order for the caller. Staff may place one for another
    passenger through ``userId``; passengers always order for themselves.

    Prices are copied from the catalog; the total is computed server-side.
    """
    order_data = {
        "flight_id": body.flight_id,
        "seat_number": body.seat_number,
        "user_id": (body.user_id if user.is_staff else None) or user.id,
        "notes": body.notes,
    }

    try:
        order = await OrderRepository(db).create_with_items(
            order_data, [item.model_dump() for item in body.items]
        )
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error creating order for flight {body.flight_id}: {e}")
        raise internal_error(e, "Error creating order", get_settings().expose_error_details)

    return _single(order)


@router.get("/user", summary="List the caller's orders")
async def my_orders(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    return _order_list(await OrderRepository(db).find_by_user(user.id))


@router.get("/{order_id}", summary="Get an order")
async def get_order(
    order_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    order = await OrderRepository(db).find_with_details(order_id)

    if order is not None and order.user_id != user.id and not user.is_staff:
        raise PermissionDeniedError("You do not have access to this order")

    return _single(order)


# =============================================================================
# STAFF
# =============================================================================

@router.get("", dependencies=[Depends(require_staff)], summary="List all orders")
async def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[OrderStatus] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    return _order_list(await OrderRepository(db).find_page(page, limit, status))


@router.get("/flight/{flight_id}", dependencies=[Depends(require_staff)], summary="List a flight's orders")
async def orders_by_flight(flight_id: str, db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    return _order_list(await OrderRepository(db).find_by_flight(flight_id))


@router.patch("/{order_id}/status", dependencies=[Depends(require_staff)], summary="Change an order's status")
async def update_order_status(
    order_id: int,
    body: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    try:
        order = await OrderRepository(db).update_status(order_id, body.status)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error updating status of order #{order_id}: {e}")
        raise internal_error(e, "Error updating order status", get_settings().expose_error_details)

    return _single(order)
