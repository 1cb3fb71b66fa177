"""Find My friends location cache, device snapshots, and refresh control."""

from .app import AppController, RefreshTiming
from .cache import FriendLocationCache
from .devices import DeviceCacheReader
from .items import item_model_display_name, item_to_device
from .models import LocationRecord, LocationStatus, parse_locations
from .refresh import RefreshOrchestrator

__all__ = [
    "AppController",
    "DeviceCacheReader",
    "FriendLocationCache",
    "LocationRecord",
    "LocationStatus",
    "RefreshOrchestrator",
    "RefreshTiming",
    "item_model_display_name",
    "item_to_device",
    "parse_locations",
]
