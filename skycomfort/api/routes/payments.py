"""
Payment Endpoints

The card itself is charged on the device through the payment bridge;
the server only records the outcome and moves the order along.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from skycomfort.api.deps import get_current_user, require_staff
from skycomfort.core.config import get_settings
from skycomfort.core.exceptions import AppError, NotFoundError, PermissionDeniedError, internal_error
from skycomfort.database import get_db
from skycomfort.models import Payment, User
from skycomfort.repositories.orders import OrderRepository
from skycomfort.repositories.payments import PaymentRepository
from skycomfort.schemas import ErrorResponse, PaymentCreate, PaymentResponse, PaymentStatusUpdate, envelope

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/payments",
    tags=["Payments"],
    dependencies=[Depends(get_current_user)],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


def _payment_list(payments: list[Payment]) -> dict[str, Any]:
    return envelope(
        {"payments": [PaymentResponse.model_validate(p) for p in payments]},
        results=len(payments),
    )


def _single(payment: Optional[Payment]) -> dict[str, Any]:
    if payment is None:
        raise NotFoundError("Payment not found")
    return envelope({"payment": PaymentResponse.model_validate(payment)})


async def _check_order_access(db: AsyncSession, order_id: int, user: User) -> None:
    """Passengers only touch payments of their own orders."""
    if user.is_staff:
        return
    order = await OrderRepository(db).find_by_id(order_id)
    if order is not None and order.user_id != user.id:
        raise PermissionDeniedError("You do not have access to this order")


@router.post("", status_code=201, summary="Record a payment")
async def create_payment(
    body: PaymentCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    await _check_order_access(db, body.order_id, user)

    data = body.model_dump()
    data["meta_data"] = data.pop("metadata")

    try:
        payment = await PaymentRepository(db).process_payment(data)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error recording payment {body.transaction_id}: {e}")
        raise internal_error(e, "Error processing payment", get_settings().expose_error_details)

    return _single(payment)


@router.get("/transaction/{transaction_id}", summary="Get a payment by transaction id")
async def payment_by_transaction(
    transaction_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    payment = await PaymentRepository(db).find_by_transaction_id(transaction_id)
    if payment is not None:
        await _check_order_access(db, payment.order_id, user)
    return _single(payment)


@router.get("/order/{order_id}", summary="List an order's payments")
async def payments_by_order(
    order_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    await _check_order_access(db, order_id, user)
    return _payment_list(await PaymentRepository(db).find_by_order_id(order_id))


@router.get("", dependencies=[Depends(require_staff)], summary="List all payments")
async def list_payments(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    return _payment_list(await PaymentRepository(db).find_page(page, limit))


@router.patch("/{payment_id}/status", dependencies=[Depends(require_staff)], summary="Change a payment's status")
async def update_payment_status(
    payment_id: int,
    body: PaymentStatusUpdate,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    try:
        payment = await PaymentRepository(db).update_payment_status(payment_id, body.status, body.metadata)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error updating status of payment #{payment_id}: {e}")
        raise internal_error(e, "Error updating payment status", get_settings().expose_error_details)

    return _single(payment)
