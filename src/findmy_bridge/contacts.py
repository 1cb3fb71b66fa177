"""Feature-gated contact lookups served over HTTP."""

from typing import Any

from .errors import FeatureDisabled, PrivateApiUnavailable
from .privateapi import PrivateApiContacts, RequestSender


def extract_data(result: dict[str, Any] | None, fallback: Any = None) -> Any:
    """Unwrap the ``data`` field of a helper response.

    The helper double-wraps empty results (``{"data": {"data": []}}``), so a
    nested ``data`` key wins when present.
    """
    payload = (result or {}).get("data")
    if isinstance(payload, dict) and "data" in payload:
        inner = payload["data"]
        return fallback if inner is None else inner
    return fallback if payload is None else payload


class ContactsInterface:
    """Contact lookups, available only when the contacts private API is on."""

    def __init__(self, sender: RequestSender, enabled: bool = False) -> None:
        self.sender = sender
        self.enabled = enabled
        self.api = PrivateApiContacts(sender)

    def _check_available(self) -> None:
        if not self.enabled:
            raise FeatureDisabled(
                "Contact Private API is not enabled! Enable it in the server settings."
            )
        if not self.sender.is_connected:
            raise PrivateApiUnavailable("Private API helper is not connected")

    async def get_handles_contact_info(self, include_photos: bool = False) -> Any:
        self._check_available()
        return extract_data(await self.api.get_handles_contact_info(include_photos), [])

    async def get_contact_for_handle(self, address: str) -> Any:
        self._check_available()
        return extract_data(await self.api.get_contact_for_handle(address))

    async def get_contact_photo(self, address: str, quality: str = "full") -> Any:
        self._check_available()
        quality = "thumbnail" if quality == "thumbnail" else "full"
        return extract_data(await self.api.get_contact_photo(address, quality))

    async def batch_check_imessage(self, addresses: list[str]) -> Any:
        self._check_available()
        return extract_data(await self.api.batch_check_imessage(addresses), {})

    async def get_handle_siblings(self, address: str) -> Any:
        self._check_available()
        return extract_data(await self.api.get_handle_siblings(address))

    async def get_suggested_names(self, address: str | None = None) -> Any:
        self._check_available()
        return extract_data(await self.api.get_suggested_names(address), [])

    async def get_contact_availability(self, address: str) -> Any:
        self._check_available()
        return extract_data(await self.api.get_contact_availability(address))

    async def detect_business_contact(self, address: str) -> Any:
        self._check_available()
        return extract_data(await self.api.detect_business_contact(address))
