"""Exception hierarchy for the bridge."""


class BridgeError(Exception):
    """Base class for all bridge errors."""


class BadRequest(BridgeError):
    """The caller supplied invalid input."""


class MalformedCacheFile(BridgeError):
    """A Find My snapshot file exists but is not a JSON array."""

    def __init__(self, kind: str, reason: str) -> None:
        self.kind = kind
        self.reason = reason
        super().__init__(f"Failed to read FindMy {kind} cache file! {reason}")


class FeatureDisabled(BridgeError):
    """A private API feature is switched off in the configuration."""


class PrivateApiUnavailable(FeatureDisabled):
    """The private API is enabled but the helper is not connected."""


class UnsupportedPlatform(BridgeError):
    """The running macOS version does not support the requested feature."""


class HelperError(BridgeError):
    """The helper answered a transaction with an error."""


class HelperNotConnected(HelperError):
    """No helper connection is available to send a request on."""


class TransactionTimeout(HelperError):
    """The helper did not answer a transaction in time."""


class AppleScriptError(BridgeError):
    """An osascript invocation exited with a non-zero status."""
