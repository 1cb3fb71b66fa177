"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import APIRouter, Depends, FastAPI

from .. import __version__
from ..errors import BadRequest, FeatureDisabled
from ..services import Services
from . import contacts, findmy
from .deps import get_services
from .responses import (
    ApiError,
    api_error_handler,
    bad_request_handler,
    feature_disabled_handler,
    success,
)

API_PREFIX = "/api/v1"

health_router = APIRouter(tags=["health"])


@health_router.get("/health")
async def health(services: Services = Depends(get_services)) -> dict[str, Any]:
    return success(
        "OK",
        {
            "helper_connected": services.helper.is_connected,
            "helper_process": services.helper.helper_process,
            "private_api": services.config.enable_private_api,
            "friends": len(services.cache),
        },
    )


def create_app(services: Services, manage_lifecycle: bool = True) -> FastAPI:
    """Build the HTTP API around `services`.

    Args:
        services: Shared bridge components.
        manage_lifecycle: Start and stop the helper server with the app.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if manage_lifecycle:
            await services.start()
        try:
            yield
        finally:
            if manage_lifecycle:
                await services.stop()

    app = FastAPI(title="findmy-bridge", version=__version__, lifespan=lifespan)
    app.state.services = services

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(BadRequest, bad_request_handler)
    app.add_exception_handler(FeatureDisabled, feature_disabled_handler)

    app.include_router(health_router)
    app.include_router(findmy.router, prefix=API_PREFIX)
    app.include_router(contacts.router, prefix=API_PREFIX)
    return app
