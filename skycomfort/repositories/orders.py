"""
Order Repository

Orders are created together with their items in a single transaction.
Each item's price is copied from the catalog at that moment, and the
order total is the sum of those snapshots.
"""

import logging
from typing import Any, Optional

from sqlalchemy import select

from skycomfort.core.exceptions import NotFoundError
from skycomfort.models import Order, OrderItem, OrderStatus, Service, User
from skycomfort.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

NEWEST_FIRST = [Order.created_at.desc(), Order.id.desc()]


class OrderRepository(BaseRepository[Order]):
    model = Order

    async def find_with_details(self, id: int) -> Optional[Order]:
        """Order with items, their services and payments loaded."""
        return await self.find_by_id(id)

    async def find_page(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[OrderStatus] = None,
    ) -> list[Order]:
        filters = {"status": status} if status else None
        return await self.find_all(
            filters,
            order_by=NEWEST_FIRST,
            offset=(page - 1) * limit,
            limit=limit,
        )

    async def find_by_user(self, user_id: int) -> list[Order]:
        return await self.find_all({"user_id": user_id}, order_by=NEWEST_FIRST)

    async def find_by_flight(self, flight_id: str) -> list[Order]:
        return await self.find_all({"flight_id": flight_id}, order_by=NEWEST_FIRST)

    async def find_by_status(self, status: OrderStatus) -> list[Order]:
        return await self.find_all({"status": status}, order_by=NEWEST_FIRST)

    async def update_status(self, id: int, status: OrderStatus) -> Optional[Order]:
        order = await self.update(id, {"status": status})
        if order is not None:
            logger.info(f"Order #{id} -> {status.value}")
        return order

    async def create_with_items(
        self,
        order_data: dict[str, Any],
        items: list[dict[str, Any]],
    ) -> Order:
        """
        Create an order and its items atomically.

        Args:
            order_data: flight_id, seat_number, user_id and optional notes
            items: dicts with service_id, quantity and optional notes

        Raises:
            NotFoundError: If the user or an item's service is missing.
                Nothing is persisted in that case.
        """
        try:
            user = await self.session.get(User, order_data["user_id"])
            if user is None:
                raise NotFoundError(f"User with ID {order_data['user_id']} not found")

            order = Order(**order_data, items=[], status=OrderStatus.PENDING, total_amount=0.0)
            self.session.add(order)
            await self.session.flush()

            total_amount = 0.0
            for item in items:
                result = await self.session.execute(
                    select(Service).where(Service.id == item["service_id"])
                )
                service = result.scalar_one_or_none()

                if service is None:
                    raise NotFoundError(f"Service with ID {item['service_id']} not found")

                quantity = item.get("quantity", 1)
                order.items.append(OrderItem(
                    service_id=service.id,
                    quantity=quantity,
                    price=service.price,
                    notes=item.get("notes"),
                ))
                total_amount += service.price * quantity

            order.total_amount = round(total_amount, 2)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            f"Order #{order.id} created for flight {order.flight_id} seat "
            f"{order.seat_number} - {len(items)} item(s) - {order.total_amount:.2f}"
        )
        return await self.find_with_details(order.id)
