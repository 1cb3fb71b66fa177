"""Bridge configuration.

Values are resolved from, lowest precedence first: dataclass defaults, the
JSON file at ~/.findmy-bridge/config.json, and FINDMY_* environment variables.
"""

import json
import logging
import os
import platform
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".findmy-bridge" / "config.json"
DEFAULT_FINDMY_DIR = Path.home() / "Library" / "Caches" / "com.apple.findmy.fmipcore"

MIN_HELPER_PORT = 45670
MAX_PORT = 65535

# macOS major version that introduced the Find My private API path
MIN_PRIVATE_API_MACOS = 11


def default_helper_port(uid: int | None = None) -> int:
    """Per-user helper port: 45670 for the first macOS user (uid 501)."""
    if uid is None:
        uid = os.getuid() if hasattr(os, "getuid") else 501
    return min(max(MIN_HELPER_PORT + uid - 501, MIN_HELPER_PORT), MAX_PORT)


def detect_macos_major() -> int:
    """Major macOS version, or 0 when not running on macOS."""
    release = platform.mac_ver()[0]
    if not release:
        return 0
    try:
        return int(release.split(".")[0])
    except ValueError:
        return 0


@dataclass
class BridgeConfig:
    """Configuration for the bridge server.

    Attributes:
        findmy_dir: Directory holding the Find My *.data snapshot files.
        enable_private_api: Whether friend refreshes go through the helper.
        enable_contacts_private_api: Whether contact routes are served.
        http_host: Bind address of the HTTP API.
        http_port: Listen port of the HTTP API.
        helper_host: Bind address the helper connects to.
        helper_port: Listen port the helper connects to.
        rpc_timeout: Seconds to wait for a helper transaction.
        app_name: Name of the Find My application.
        quit_delay: Seconds to wait after quitting the app.
        launch_delay: Seconds to wait after launching the app.
        show_delay: Seconds the app stays in the foreground.
        log_dir: Directory for the JSONL event log (None for the default).
        macos_version: Major macOS version; detected when None.
    """

    findmy_dir: Path | None = None
    enable_private_api: bool = False
    enable_contacts_private_api: bool = False
    http_host: str = "127.0.0.1"
    http_port: int = 1234
    helper_host: str = "localhost"
    helper_port: int | None = None
    rpc_timeout: float = 30.0
    app_name: str = "FindMy"
    quit_delay: float = 3.0
    launch_delay: float = 5.0
    show_delay: float = 15.0
    log_dir: Path | None = None
    macos_version: int | None = None

    def __post_init__(self) -> None:
        if self.findmy_dir is None:
            self.findmy_dir = DEFAULT_FINDMY_DIR
        self.findmy_dir = Path(self.findmy_dir).expanduser()

        if self.log_dir is not None:
            self.log_dir = Path(self.log_dir).expanduser()

        if self.helper_port is None:
            self.helper_port = default_helper_port()

        if self.macos_version is None:
            self.macos_version = detect_macos_major()

        if self.rpc_timeout <= 0:
            raise ValueError("rpc_timeout must be positive")
        if min(self.quit_delay, self.launch_delay, self.show_delay) < 0:
            raise ValueError("app refresh delays cannot be negative")

    @property
    def private_api_supported(self) -> bool:
        """Whether this macOS version can use the Find My private API."""
        assert self.macos_version is not None
        return self.macos_version >= MIN_PRIVATE_API_MACOS


_BOOL_TRUE = {"1", "true", "yes", "on"}


def _coerce(raw: Any, target: Any) -> Any:
    """Coerce a raw JSON or environment value to a config field type."""
    kind = str(target)
    if "bool" in kind:
        if isinstance(raw, bool):
            return raw
        return str(raw).strip().lower() in _BOOL_TRUE
    if "Path" in kind:
        return Path(str(raw)).expanduser()
    if "int" in kind:
        return int(raw)
    if "float" in kind:
        return float(raw)
    return str(raw)


def _parse_config(data: dict[str, Any]) -> dict[str, Any]:
    """Pick known config keys out of parsed JSON data."""
    values: dict[str, Any] = {}
    for f in fields(BridgeConfig):
        if f.name not in data or data[f.name] is None:
            continue
        try:
            values[f.name] = _coerce(data[f.name], f.type)
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid value for %s: %r", f.name, data[f.name])
    return values


def load_config_file(config_path: Path | None = None) -> dict[str, Any]:
    """Read overrides from the JSON config file, if any."""
    path = config_path or DEFAULT_CONFIG_PATH

    if not path.exists():
        logger.debug("No config file at %s, using defaults", path)
        return {}

    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.warning("Invalid JSON in %s: %s. Using defaults.", path, e)
        return {}
    except OSError as e:
        logger.warning("Cannot read %s: %s. Using defaults.", path, e)
        return {}

    if not isinstance(data, dict):
        logger.warning("Config file %s is not a JSON object. Using defaults.", path)
        return {}

    return _parse_config(data)


def config_from_env(environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Read overrides from FINDMY_<FIELD> environment variables."""
    env = os.environ if environ is None else environ
    return _parse_config(
        {
            f.name: env[f"FINDMY_{f.name.upper()}"]
            for f in fields(BridgeConfig)
            if f"FINDMY_{f.name.upper()}" in env
        }
    )


def load_config(
    config_path: Path | None = None,
    environ: dict[str, str] | None = None,
) -> BridgeConfig:
    """Build a BridgeConfig from the config file and environment."""
    values = load_config_file(config_path)
    values.update(config_from_env(environ))
    return BridgeConfig(**values)
