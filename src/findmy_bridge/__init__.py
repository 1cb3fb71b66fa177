"""findmy-bridge: Find My locations and Contacts metadata over HTTP."""

__version__ = "0.1.0"
