"""
Exception hierarchy for the PowerSchool client.
Dangling references are not errors: resolvers return None or [] for them.
"""
from typing import Any, Dict, Optional


class PowerSchoolError(Exception):
    """Base class for every error raised by this package."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigError(PowerSchoolError):
    """Raised when the config file is invalid or a required setting is missing."""


class FetchError(PowerSchoolError):
    """Raised when a student data fetch cannot produce a complete snapshot."""


class TransportError(FetchError):
    """Raised when the service could not be reached or answered with an HTTP error."""


class AuthenticationError(TransportError):
    """Raised when the service rejects the API credentials (HTTP 401)."""


class MalformedPayloadError(FetchError):
    """Raised when the service result lacks the expected top-level structure."""


class RecordDecodeError(MalformedPayloadError):
    """Raised when a collection element cannot be decoded into a record at all."""

    def __init__(self, collection: str, index: int, reason: str):
        super().__init__(
            f"Cannot decode {collection}[{index}]: {reason}",
            details={"collection": collection, "index": index},
        )
        self.collection = collection
        self.index = index


class UnboundRecordError(PowerSchoolError):
    """Raised when a record resolves a relation without being bound to a cache."""
