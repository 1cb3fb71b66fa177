"""Contact routes backed by the helper's contacts private API."""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query

from ..errors import BadRequest
from ..services import Services
from .deps import get_services
from .responses import failure_message, success

router = APIRouter(prefix="/contact/private", tags=["contacts"])


@router.get("/handles")
async def get_handles(
    include_photos: bool = Query(False, alias="includePhotos"),
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    with failure_message("Failed to fetch handle contact info!"):
        data = await services.contacts.get_handles_contact_info(include_photos)
    return success("Successfully fetched handle contact info!", data)


@router.get("/suggested-names")
async def get_suggested_names(
    address: str | None = None,
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    with failure_message("Failed to fetch suggested names!"):
        data = await services.contacts.get_suggested_names(address)
    return success("Successfully fetched suggested names!", data)


@router.post("/imessage/check")
async def batch_check_imessage(
    body: dict[str, Any] | None = Body(None),
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    addresses = (body or {}).get("addresses")
    if not isinstance(addresses, list) or not all(isinstance(a, str) for a in addresses):
        raise BadRequest("addresses must be an array of strings!")

    with failure_message("Failed to check iMessage availability!"):
        data = await services.contacts.batch_check_imessage(addresses)
    return success("Successfully checked iMessage availability!", data)


@router.get("/{address}")
async def get_contact(address: str, services: Services = Depends(get_services)) -> dict[str, Any]:
    with failure_message("Failed to fetch contact details!"):
        data = await services.contacts.get_contact_for_handle(address)
    return success("Successfully fetched contact details!", data)


@router.get("/{address}/photo")
async def get_contact_photo(
    address: str,
    quality: str = "full",
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    with failure_message("Failed to fetch contact photo!"):
        data = await services.contacts.get_contact_photo(address, quality)
    return success("Successfully fetched contact photo!", data)


@router.get("/{address}/siblings")
async def get_handle_siblings(
    address: str, services: Services = Depends(get_services)
) -> dict[str, Any]:
    with failure_message("Failed to fetch handle siblings!"):
        data = await services.contacts.get_handle_siblings(address)
    return success("Successfully fetched handle siblings!", data)


@router.get("/{address}/availability")
async def get_contact_availability(
    address: str, services: Services = Depends(get_services)
) -> dict[str, Any]:
    with failure_message("Failed to fetch contact availability!"):
        data = await services.contacts.get_contact_availability(address)
    return success("Successfully fetched contact availability!", data)


@router.get("/{address}/business")
async def detect_business(
    address: str, services: Services = Depends(get_services)
) -> dict[str, Any]:
    with failure_message("Failed to detect business contact!"):
        data = await services.contacts.detect_business_contact(address)
    return success("Successfully detected business contact!", data)
