"""Response envelopes and error mapping for the HTTP API."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from ..errors import BadRequest, FeatureDisabled


class ApiError(Exception):
    """An error that maps directly onto an HTTP error envelope."""

    def __init__(self, status: int, message: str, error: str | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.message = message
        self.error = error


def success(message: str, data: Any = None) -> dict[str, Any]:
    """Build the standard success envelope. ``data`` may legitimately be None."""
    return {"status": 200, "message": message, "data": data}


@contextmanager
def failure_message(message: str) -> Iterator[None]:
    """Re-raise unexpected errors as a 500 carrying `message`.

    Errors that already map onto a status (bad input, disabled features)
    pass through unchanged.
    """
    try:
        yield
    except (ApiError, BadRequest, FeatureDisabled):
        raise
    except Exception as e:
        raise ApiError(500, message, str(e) or e.__class__.__name__) from e


def _error_response(status: int, message: str, error: str | None) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={"status": status, "message": message, "error": error},
    )


async def api_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, ApiError)
    return _error_response(exc.status, exc.message, exc.error)


async def bad_request_handler(request: Request, exc: Exception) -> JSONResponse:
    return _error_response(400, "Bad Request", str(exc))


async def feature_disabled_handler(request: Request, exc: Exception) -> JSONResponse:
    return _error_response(403, "Forbidden", str(exc))
