"""
Payment Repository

Recording a payment and moving its order along happen in the same
transaction:
    completed payment -> order "processing"
    failed payment    -> order "cancelled"
"""

import logging
from typing import Any, Optional

from sqlalchemy import select

from skycomfort.core.exceptions import NotFoundError, ValidationError
from skycomfort.models import Order, OrderStatus, Payment, PaymentStatus
from skycomfort.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

NEWEST_FIRST = [Payment.created_at.desc(), Payment.id.desc()]

# Order status a payment status forces on its parent order
ORDER_TRANSITIONS = {
    PaymentStatus.COMPLETED: OrderStatus.PROCESSING,
    PaymentStatus.FAILED: OrderStatus.CANCELLED,
}


class PaymentRepository(BaseRepository[Payment]):
    model = Payment

    async def find_by_transaction_id(self, transaction_id: str) -> Optional[Payment]:
        return await self.find_one(transaction_id=transaction_id)

    async def find_by_order_id(self, order_id: int) -> list[Payment]:
        return await self.find_all({"order_id": order_id}, order_by=NEWEST_FIRST)

    async def find_by_status(self, status: PaymentStatus) -> list[Payment]:
        return await self.find_all({"status": status}, order_by=NEWEST_FIRST)

    async def find_page(self, page: int = 1, limit: int = 10) -> list[Payment]:
        return await self.find_all(order_by=NEWEST_FIRST, offset=(page - 1) * limit, limit=limit)

    async def _get_order(self, order_id: int) -> Optional[Order]:
        result = await self.session.execute(select(Order).where(Order.id == order_id))
        return result.scalar_one_or_none()

    def _apply_transition(self, order: Order, status: PaymentStatus) -> None:
        new_status = ORDER_TRANSITIONS.get(status)
        if new_status is not None and order.status != new_status:
            logger.info(f"Order #{order.id} -> {new_status.value} (payment {status.value})")
            order.status = new_status

    async def process_payment(self, data: dict[str, Any]) -> Payment:
        """
        Record a payment and transition its order.

        Raises:
            NotFoundError: If the order does not exist
            ValidationError: If the transaction id was already recorded
        """
        try:
            order = await self._get_order(data["order_id"])
            if order is None:
                raise NotFoundError("Order not found")

            if await self.find_by_transaction_id(data["transaction_id"]) is not None:
                raise ValidationError("Transaction ID already exists")

            payment = Payment(**data)
            self.session.add(payment)
            self._apply_transition(order, payment.status)

            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self.session.refresh(payment)
        logger.info(
            f"Payment {payment.transaction_id} recorded for order #{payment.order_id} "
            f"- {payment.amount:.2f} - {payment.status.value}"
        )
        return payment

    async def update_payment_status(
        self,
        id: int,
        status: PaymentStatus,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Optional[Payment]:
        """
        Change a payment's status and transition its order.

        Returns:
            The updated payment, or None if it does not exist
        """
        try:
            payment = await self.find_by_id(id)
            if payment is None:
                return None

            payment.status = status
            if metadata is not None:
                payment.meta_data = metadata

            order = await self._get_order(payment.order_id)
            if order is not None:
                self._apply_transition(order, status)

            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        return await self.find_by_id(id)
