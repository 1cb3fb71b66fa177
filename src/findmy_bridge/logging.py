"""JSONL event log for operational observability."""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

DEFAULT_LOG_DIR = Path.home() / ".findmy-bridge" / "logs"


@dataclass
class LogEntry:
    """A single log entry."""

    timestamp: str
    event: str
    action: str | None = None
    transaction_id: str | None = None
    handles: list[str] | None = None
    count: int | None = None
    duration_ms: float | None = None
    error: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict, excluding None values."""
        data = asdict(self)
        return {k: v for k, v in data.items() if v is not None and v != {} and v != []}


class JSONLLogger:
    """Logger that writes structured logs in JSONL format."""

    def __init__(
        self,
        log_dir: str | Path | None = None,
        filename: str = "events.jsonl",
        max_size_mb: float = 10.0,
    ) -> None:
        if log_dir is None:
            log_dir = DEFAULT_LOG_DIR
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.filename = filename
        self.max_size_bytes = int(max_size_mb * 1024 * 1024)

    @property
    def log_path(self) -> Path:
        """Current log file path."""
        return self.log_dir / self.filename

    def _rotate_if_needed(self) -> None:
        """Rotate log file if it exceeds max size."""
        if not self.log_path.exists():
            return

        if self.log_path.stat().st_size >= self.max_size_bytes:
            timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
            rotated_name = f"{self.log_path.stem}_{timestamp}.jsonl"
            self.log_path.rename(self.log_dir / rotated_name)

    def _write(self, entry: LogEntry) -> None:
        self._rotate_if_needed()

        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry.to_dict()) + "\n")

    def log(
        self,
        event: str,
        *,
        action: str | None = None,
        transaction_id: str | None = None,
        handles: list[str] | None = None,
        count: int | None = None,
        duration_ms: float | None = None,
        error: str | None = None,
        **extra: Any,
    ) -> None:
        """Log an event."""
        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            event=event,
            action=action,
            transaction_id=transaction_id,
            handles=handles,
            count=count,
            duration_ms=duration_ms,
            error=error,
            extra=extra if extra else {},
        )
        self._write(entry)

    def log_friends_updated(self, handles: list[str], *, source: str) -> None:
        """Log which friend handles changed in the location cache."""
        self.log("friends_updated", handles=handles, count=len(handles), source=source)

    def log_refresh(
        self,
        kind: str,
        count: int | None,
        duration_ms: float,
        *,
        error: str | None = None,
    ) -> None:
        """Log the outcome of a friends or devices refresh."""
        self.log(f"refresh_{kind}", count=count, duration_ms=duration_ms, error=error)

    def log_transaction_timeout(self, action: str, transaction_id: str, timeout: float) -> None:
        self.log(
            "transaction_timeout",
            action=action,
            transaction_id=transaction_id,
            timeout=timeout,
        )


# Global logger instance
_logger: JSONLLogger | None = None


def get_logger() -> JSONLLogger:
    """Get the global logger instance."""
    global _logger
    if _logger is None:
        _logger = JSONLLogger()
    return _logger


def configure_logger(log_dir: str | Path | None = None, max_size_mb: float = 10.0) -> JSONLLogger:
    """Configure and return the global logger."""
    global _logger
    _logger = JSONLLogger(log_dir=log_dir, max_size_mb=max_size_mb)
    return _logger
