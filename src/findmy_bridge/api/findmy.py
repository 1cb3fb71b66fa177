"""Find My routes."""

from typing import Any

from fastapi import APIRouter, Depends

from ..services import Services
from .deps import get_services
from .responses import failure_message, success

router = APIRouter(prefix="/icloud/findmy", tags=["findmy"])


@router.get("/friends")
async def get_friends(services: Services = Depends(get_services)) -> dict[str, Any]:
    friends = services.cache.get_all()
    return success(
        "Successfully fetched Find My friends locations!",
        [record.to_dict() for record in friends],
    )


@router.post("/friends/refresh")
async def refresh_friends(services: Services = Depends(get_services)) -> dict[str, Any]:
    with failure_message("Failed to refresh Find My friends locations!"):
        friends = await services.orchestrator.refresh_friends()
    return success(
        "Successfully refreshed Find My friends locations!",
        [record.to_dict() for record in friends],
    )


@router.get("/devices")
async def get_devices(services: Services = Depends(get_services)) -> dict[str, Any]:
    with failure_message("Failed to fetch Find My devices!"):
        devices = await services.reader.get_devices()
    return success("Successfully fetched Find My devices!", devices)


@router.post("/devices/refresh")
async def refresh_devices(services: Services = Depends(get_services)) -> dict[str, Any]:
    with failure_message("Failed to refresh Find My devices!"):
        devices = await services.orchestrator.refresh_devices()
    return success("Successfully refreshed Find My devices!", devices)
