"""
Offline Sync Service

The mobile client queues mutations while the aircraft is offline and
replays them in one batch. Every item runs in its own transaction and
reports its own result, so one bad item never aborts the rest.

Supported entity types:
    - orders: insert / update / delete (delete cancels, never removes)
    - user_selections: acknowledged only, nothing is stored server-side
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from skycomfort.core.config import get_settings
from skycomfort.core.exceptions import AppError, NotFoundError, PermissionDeniedError, ValidationError, internal_error
from skycomfort.models import OrderStatus, Service
from skycomfort.repositories.catalog import ServiceRepository
from skycomfort.repositories.orders import OrderRepository
from skycomfort.schemas import OrderCreate, OrderUpdate, SyncItem, SyncResult

logger = logging.getLogger(__name__)

ORDERS = "orders"
USER_SELECTIONS = "user_selections"


def _schema_message(exc: SchemaValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid sync item"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else first.get("msg", "Invalid sync item")


def parse_since(value: Optional[str]) -> Optional[datetime]:
    """Parse a client lastSync timestamp; None when absent or unparseable."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Ignoring unparseable lastSync value: {value!r}")
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


class SyncService:
    """Applies sync batches for one authenticated user."""

    def __init__(self, session: AsyncSession, user_id: int, is_staff: bool = False):
        self.orders = OrderRepository(session)
        self.services = ServiceRepository(session)
        self.user_id = user_id
        self.is_staff = is_staff

    async def sync(self, raw_items: list[Any], batch_user_id: Optional[int] = None) -> dict[str, Any]:
        """
        Apply every item and return the results plus the available catalog.
        """
        results: list[SyncResult] = []

        for raw in raw_items:
            results.append(await self._process(raw, self._owner_id(batch_user_id)))

        failed = sum(1 for r in results if not r.success)
        logger.info(f"Sync for user #{self.user_id}: {len(results)} item(s), {failed} failed")

        return {
            "syncResults": results,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "services": await self.services.find_by_availability(True),
        }

    def _owner_id(self, requested: Optional[int]) -> int:
        """Only staff may act on behalf of another passenger."""
        if requested is not None and self.is_staff:
            return requested
        return self.user_id

    async def updated_services(self, last_sync: Optional[str]) -> list[Service]:
        return await self.services.find_updated_since(parse_since(last_sync))

    async def _process(self, raw: Any, owner_id: int) -> SyncResult:
        entity_type = raw.get("entityType") if isinstance(raw, dict) else None
        entity_id = raw.get("entityId") if isinstance(raw, dict) else None
        if entity_type is not None:
            entity_type = str(entity_type)
        if entity_id is not None:
            entity_id = str(entity_id)

        try:
            item = SyncItem.model_validate(raw)

            if item.entity_type == ORDERS:
                await self._process_order(item, owner_id)
            elif item.entity_type == USER_SELECTIONS:
                pass
            else:
                raise ValidationError(f"Unknown entity type: {item.entity_type}")

            return SyncResult(success=True, entity_type=item.entity_type, entity_id=item.entity_id)

        except SchemaValidationError as e:
            message = _schema_message(e)
        except AppError as e:
            message = e.message
        except Exception as e:
            logger.exception(f"Sync item {entity_type}/{entity_id} failed: {e}")
            message = internal_error(e, "Error processing sync item", get_settings().expose_error_details).message

        return SyncResult(success=False, entity_type=entity_type, entity_id=entity_id, message=message)

    async def _process_order(self, item: SyncItem, owner_id: int) -> None:
        if item.operation == "insert":
            order = OrderCreate.model_validate(item.data)
            await self.orders.create_with_items(
                {
                    "flight_id": order.flight_id,
                    "seat_number": order.seat_number,
                    "user_id": (order.user_id if self.is_staff else None) or owner_id,
                    "notes": order.notes,
                },
                [i.model_dump() for i in order.items],
            )
        elif item.operation == "update":
            changes = OrderUpdate.model_validate(item.data).model_dump(exclude_unset=True)
            await self._update_order(item.entity_id, changes)
        elif item.operation == "delete":
            await self._update_order(item.entity_id, {"status": OrderStatus.CANCELLED})
        else:
            raise ValidationError(f"Unknown operation: {item.operation}")

    async def _update_order(self, entity_id: str, changes: dict[str, Any]) -> None:
        try:
            order_id = int(entity_id)
        except ValueError:
            raise ValidationError("Invalid order ID format")

        order = await self.orders.find_by_id(order_id)
        if order is None:
            raise NotFoundError("Order not found")
        if order.user_id != self.user_id and not self.is_staff:
            raise PermissionDeniedError("Order belongs to another user")

        if changes:
            await self.orders.update(order_id, changes)
