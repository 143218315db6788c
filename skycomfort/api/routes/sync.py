"""
Offline Sync Endpoints

    POST /api/sync                    replay queued client mutations
    GET  /api/sync/services?lastSync= catalog changes since the last sync
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from skycomfort.api.deps import get_current_user
from skycomfort.core.config import get_settings
from skycomfort.core.exceptions import AppError, internal_error
from skycomfort.database import get_db
from skycomfort.models import User
from skycomfort.schemas import ErrorResponse, ServiceResponse, SyncRequest, envelope
from skycomfort.services.sync import SyncService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/sync",
    tags=["Sync"],
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)


@router.post("", summary="Apply a batch of offline mutations")
async def sync_batch(
    body: SyncRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """
    Each item succeeds or fails on its own; the response lists one
    result per item plus the currently available catalog.
    """
    service = SyncService(db, user.id, user.is_staff)

    try:
        result = await service.sync(body.items, body.user_id)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error processing sync batch: {e}")
        raise internal_error(e, "Error processing sync request", get_settings().expose_error_details)

    result["services"] = [ServiceResponse.model_validate(s) for s in result["services"]]
    return envelope(result, results=len(result["syncResults"]))


@router.get("/services", summary="Catalog items changed since the last sync")
async def updated_services(
    last_sync: Optional[str] = Query(None, alias="lastSync"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    services = await SyncService(db, user.id, user.is_staff).updated_services(last_sync)

    return envelope(
        {
            "services": [ServiceResponse.model_validate(s) for s in services],
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        results=len(services),
    )
