"""Contact actions sent to the helper."""

from typing import Any, Literal

from ..errors import BadRequest
from .findmy import RequestSender

PhotoQuality = Literal["full", "thumbnail"]


def _require(action: str, **values: Any) -> None:
    """Raise BadRequest if any required value is missing."""
    missing = [name for name, value in values.items() if value is None or value == ""]
    if missing:
        raise BadRequest(f"{action}: missing required field(s): {', '.join(missing)}")


class PrivateApiContacts:
    """Wraps the helper's contact lookup actions."""

    def __init__(self, sender: RequestSender) -> None:
        self.sender = sender

    async def get_handles_contact_info(self, include_photos: bool = False) -> dict[str, Any]:
        return await self.sender.send_request(
            "get-handles-contact-info", {"includePhotos": include_photos}
        )

    async def get_contact_for_handle(self, address: str) -> dict[str, Any]:
        action = "get-contact-for-handle"
        _require(action, address=address)
        return await self.sender.send_request(action, {"address": address})

    async def get_contact_photo(
        self, address: str, quality: PhotoQuality = "full"
    ) -> dict[str, Any]:
        action = "get-contact-photo"
        _require(action, address=address)
        return await self.sender.send_request(action, {"address": address, "quality": quality})

    async def batch_check_imessage(self, addresses: list[str]) -> dict[str, Any]:
        action = "batch-check-imessage"
        _require(action, addresses=addresses)
        return await self.sender.send_request(action, {"addresses": addresses})

    async def get_handle_siblings(self, address: str) -> dict[str, Any]:
        action = "get-handle-siblings"
        _require(action, address=address)
        return await self.sender.send_request(action, {"address": address})

    async def get_suggested_names(self, address: str | None = None) -> dict[str, Any]:
        return await self.sender.send_request(
            "get-suggested-names", {"address": address} if address else {}
        )

    async def get_contact_availability(self, address: str) -> dict[str, Any]:
        action = "get-contact-availability"
        _require(action, address=address)
        return await self.sender.send_request(action, {"address": address})

    async def detect_business_contact(self, address: str) -> dict[str, Any]:
        action = "detect-business-contact"
        _require(action, address=address)
        return await self.sender.send_request(action, {"address": address})
