"""Find My actions sent to the helper."""

from typing import Any, Protocol


class RequestSender(Protocol):
    """Anything that can send an action to the helper."""

    @property
    def is_connected(self) -> bool: ...

    async def send_request(self, action: str, data: Any = None) -> dict[str, Any]: ...


class PrivateApiFindMy:
    """Wraps the helper's Find My actions."""

    REFRESH_FRIENDS = "refresh-findmy-friends"

    def __init__(self, sender: RequestSender) -> None:
        self.sender = sender

    async def refresh_friends(self) -> dict[str, Any]:
        """Ask the helper for fresh friend locations.

        Returns:
            ``{"data": {"locations": [...]}}``. The helper may put
            ``locations`` at the top level or under ``data``; both are
            accepted.
        """
        response = await self.sender.send_request(self.REFRESH_FRIENDS)
        data = response.get("data")
        if isinstance(data, dict) and "locations" in data:
            locations = data.get("locations")
        else:
            locations = response.get("locations")
        return {"data": {"locations": locations or []}}
