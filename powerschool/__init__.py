"""
Client for PowerSchool's public-portal service: log in, fetch a student's data
and navigate it through a per-fetch relational cache.
"""
from powerschool.client import PowerSchoolAPI, PowerSchoolUser, PublicPortalTransport, Transport
from powerschool.core.cache import RelationalCache
from powerschool.core.exceptions import (
    AuthenticationError,
    ConfigError,
    FetchError,
    MalformedPayloadError,
    PowerSchoolError,
    RecordDecodeError,
    TransportError,
    UnboundRecordError,
)
from powerschool.models import StudentInfo

__all__ = [
    "AuthenticationError",
    "ConfigError",
    "FetchError",
    "MalformedPayloadError",
    "PowerSchoolAPI",
    "PowerSchoolError",
    "PowerSchoolUser",
    "PublicPortalTransport",
    "RecordDecodeError",
    "RelationalCache",
    "StudentInfo",
    "Transport",
    "TransportError",
    "UnboundRecordError",
]
