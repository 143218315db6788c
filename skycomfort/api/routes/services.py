"""
Catalog (Service) Endpoints

Browsing is public; changes require a staff account.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from skycomfort.api.deps import require_staff
from skycomfort.core.config import get_settings
from skycomfort.core.exceptions import AppError, NotFoundError, internal_error
from skycomfort.database import get_db
from skycomfort.models import Service
from skycomfort.repositories.catalog import ServiceRepository
from skycomfort.schemas import (
    AvailabilityUpdate,
    ErrorResponse,
    ServiceCreate,
    ServiceResponse,
    ServiceUpdate,
    envelope,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/services",
    tags=["Services"],
    responses={404: {"model": ErrorResponse}},
)


def _service_list(services: list[Service]) -> dict[str, Any]:
    return envelope(
        {"services": [ServiceResponse.model_validate(s) for s in services]},
        results=len(services),
    )


def _single(service: Optional[Service]) -> dict[str, Any]:
    if service is None:
        raise NotFoundError("Service not found")
    return envelope({"service": ServiceResponse.model_validate(service)})


def _to_columns(data: dict[str, Any]) -> dict[str, Any]:
    if "metadata" in data:
        data["meta_data"] = data.pop("metadata")
    return data


# =============================================================================
# PUBLIC
# =============================================================================

@router.get("", summary="List catalog items")
async def list_services(
    available: Optional[bool] = Query(None),
    q: Optional[str] = Query(None, min_length=1, description="Search title and description"),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    repo = ServiceRepository(db)

    if q:
        services = await repo.search(q, available)
    elif available is not None:
        services = await repo.find_by_availability(available)
    else:
        services = await repo.find_newest()

    return _service_list(services)


@router.get("/type/{service_type}", summary="List catalog items of a type")
async def services_by_type(service_type: str, db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    return _service_list(await ServiceRepository(db).find_by_type(service_type))


@router.get("/category/{category}", summary="List catalog items in a category")
async def services_by_category(category: str, db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    return _service_list(await ServiceRepository(db).find_by_category(category))


@router.get("/{service_id}", summary="Get a catalog item")
async def get_service(service_id: int, db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    return _single(await ServiceRepository(db).find_by_id(service_id))


# =============================================================================
# STAFF
# =============================================================================

@router.post("", status_code=201, dependencies=[Depends(require_staff)], summary="Add a catalog item")
async def create_service(body: ServiceCreate, db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    try:
        service = await ServiceRepository(db).create(_to_columns(body.model_dump()))
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error creating service: {e}")
        raise internal_error(e, "Error creating service", get_settings().expose_error_details)

    logger.info(f"Service #{service.id} created: {service.title}")
    return _single(service)


@router.put("/{service_id}", dependencies=[Depends(require_staff)], summary="Update a catalog item")
async def update_service(
    service_id: int,
    body: ServiceUpdate,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    try:
        service = await ServiceRepository(db).update(
            service_id, _to_columns(body.model_dump(exclude_unset=True))
        )
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error updating service #{service_id}: {e}")
        raise internal_error(e, "Error updating service", get_settings().expose_error_details)

    return _single(service)


@router.delete(
    "/{service_id}",
    status_code=204,
    dependencies=[Depends(require_staff)],
    summary="Delete a catalog item",
)
async def delete_service(service_id: int, db: AsyncSession = Depends(get_db)) -> Response:
    try:
        deleted = await ServiceRepository(db).delete(service_id)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error deleting service #{service_id}: {e}")
        raise internal_error(e, "Error deleting service", get_settings().expose_error_details)

    if not deleted:
        raise NotFoundError("Service not found or could not be deleted")

    return Response(status_code=204)


@router.patch(
    "/{service_id}/availability",
    dependencies=[Depends(require_staff)],
    summary="Mark a catalog item (un)available",
)
async def update_availability(
    service_id: int,
    body: AvailabilityUpdate,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    try:
        service = await ServiceRepository(db).update_availability(service_id, body.availability)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error updating availability of service #{service_id}: {e}")
        raise internal_error(e, "Error updating service availability", get_settings().expose_error_details)

    return _single(service)
