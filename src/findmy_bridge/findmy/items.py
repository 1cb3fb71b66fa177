"""Normalisation of Find My items (AirTags, accessories) into the device shape."""

from typing import Any

AIRTAG_PRODUCT_TYPE = "b389"


def item_model_display_name(item: dict[str, Any] | None) -> str:
    """Human-readable model name for an item."""
    product_type = (item or {}).get("productType") or {}
    type_code = product_type.get("type")

    if type_code == AIRTAG_PRODUCT_TYPE:
        return "AirTag"

    info = product_type.get("productInformation") or {}
    if info.get("modelName"):
        return info["modelName"]

    return type_code or "Unknown"


def item_to_device(item: dict[str, Any] | None) -> dict[str, Any]:
    """Map an item snapshot entry onto the device record shape.

    Items are always treated as accessories that belong to someone else's
    primary device, so the capability flags are fixed.
    """
    item = item or {}
    role = item.get("role") or {}

    return {
        "id": item.get("identifier"),
        "name": item.get("name"),
        "deviceDisplayName": role.get("emoji"),
        "modelDisplayName": item_model_display_name(item),
        "address": item.get("address"),
        "location": item.get("location"),
        "crowdSourcedLocation": item.get("crowdSourcedLocation"),
        "role": item.get("role"),
        "serialNumber": item.get("serialNumber"),
        "productIdentifier": item.get("productIdentifier"),
        "productType": item.get("productType"),
        "groupIdentifier": item.get("groupIdentifier"),
        "groupName": item.get("groupName"),
        "capabilities": item.get("capabilities"),
        "isAppleAudioAccessory": item.get("isAppleAudioAccessory"),
        "lostModeEnabled": bool(item.get("lostModeMetadata")),
        "lostModeCapable": True,
        "locationEnabled": True,
        "isConsideredAccessory": True,
        "locationCapable": True,
        "fmlyShare": False,
        "thisDevice": False,
        "isMac": False,
        "prsId": "owner",
        "batteryStatus": "Unknown",
        "audioChannels": [],
    }
