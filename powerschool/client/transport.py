"""
Transport for PowerSchool's public-portal JSON service.
Authenticates with the installation's API credentials (HTTP digest), posts one
operation per request and returns the decoded result. Knows nothing about
records or caching.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests
from requests.auth import HTTPDigestAuth

from powerschool.core.exceptions import AuthenticationError, TransportError
from powerschool.core.retry import execute_with_retry

SERVICE_PATH = "/pearson-rest/services/PublicPortalServiceJSON"
DEFAULT_API_USERNAME = "pearson"
DEFAULT_API_PASSWORD = "m0bApP5"


class Transport(ABC):
    """Base class for anything that can talk to the public-portal service."""

    @abstractmethod
    def login(self, username: str, password: str) -> Dict[str, Any]:
        """Call loginToPublicPortal. Returns the result mapping (holding `return`)."""
        pass

    @abstractmethod
    def get_student_data(self, request: Dict[str, Any]) -> Dict[str, Any]:
        """Call getStudentData. Returns the result mapping (holding `return`)."""
        pass

    def close(self) -> None:
        """Release network resources."""
        pass


class PublicPortalTransport(Transport):
    def __init__(
        self,
        url: str,
        api_username: str = DEFAULT_API_USERNAME,
        api_password: str = DEFAULT_API_PASSWORD,
        timeout: float = 30.0,
        max_attempts: int = 3,
        backoff_base: float = 1.5,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.url = url.rstrip("/")
        self.endpoint = f"{self.url}{SERVICE_PATH}"
        self.timeout = timeout
        self.max_attempts = max(1, int(max_attempts))
        self.backoff_base = backoff_base
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self._session = session or requests.Session()
        self._session.auth = HTTPDigestAuth(api_username, api_password)
        self._session.headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json",
        })

    def login(self, username: str, password: str) -> Dict[str, Any]:
        return self.call("loginToPublicPortal", {"username": username, "password": password})

    def get_student_data(self, request: Dict[str, Any]) -> Dict[str, Any]:
        return self.call("getStudentData", request)

    def call(self, operation: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """Post one operation and return its result, unwrapping an `<operation>Response` envelope."""
        self.logger.debug(f"Calling {operation} at {self.endpoint}")
        try:
            response = execute_with_retry(
                lambda: self._session.post(self.endpoint, json={operation: arguments}, timeout=self.timeout),
                max_attempts=self.max_attempts,
                base_delay=self.backoff_base,
                retry_exceptions=(requests.exceptions.ConnectionError, requests.exceptions.Timeout),
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{operation} request failed: {e}") from e

        if response.status_code == 401:
            raise AuthenticationError(
                f"{operation} rejected the API credentials (HTTP 401)",
                details={"status_code": 401},
            )
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise TransportError(
                f"{operation} failed with HTTP {response.status_code}",
                details={"status_code": response.status_code},
            ) from e

        try:
            body = response.json()
        except ValueError as e:
            raise TransportError(f"{operation} returned a body that is not JSON") from e
        if not isinstance(body, dict):
            raise TransportError(f"{operation} returned {type(body).__name__}, expected an object")

        envelope = body.get(f"{operation}Response")
        if isinstance(envelope, dict):
            body = envelope
        self.logger.debug(f"{operation} answered with keys: {list(body.keys())}")
        return body

    def close(self) -> None:
        self._session.close()
