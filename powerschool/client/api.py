"""
Entry point to a PowerSchool installation: set up the transport and log in.
"""
import logging
from typing import Mapping, Optional

from powerschool.core.config import Config
from powerschool.core.exceptions import MalformedPayloadError
from powerschool.models import PowerSchoolSession, as_list

from .transport import DEFAULT_API_PASSWORD, DEFAULT_API_USERNAME, PublicPortalTransport, Transport
from .user import PowerSchoolUser


class PowerSchoolAPI:
    """Wrapper around one installation, for logging into user accounts."""

    def __init__(
        self,
        url: str,
        api_username: str = DEFAULT_API_USERNAME,
        api_password: str = DEFAULT_API_PASSWORD,
        timeout: float = 30.0,
        max_attempts: int = 3,
        transport: Optional[Transport] = None,
    ):
        self.url = url
        self.api_username = api_username
        self.api_password = api_password
        self.timeout = timeout
        self.max_attempts = max_attempts
        self._transport = transport
        self.logger = logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_config(cls, config: Config, transport: Optional[Transport] = None) -> "PowerSchoolAPI":
        """Build from the `powerschool` section of the YAML config."""
        section = config.get_section("powerschool")
        return cls(
            url=config.require("powerschool", "url"),
            api_username=section.get("api_username") or DEFAULT_API_USERNAME,
            api_password=section.get("api_password") or DEFAULT_API_PASSWORD,
            timeout=float(section.get("timeout", 30)),
            max_attempts=int(section.get("max_attempts", 3)),
            transport=transport,
        )

    def setup(self) -> "PowerSchoolAPI":
        """Prepare the transport. Returns the API again so calls can be chained."""
        if self._transport is None:
            self.logger.debug(f"Setting up transport for {self.url}")
            self._transport = PublicPortalTransport(
                self.url,
                api_username=self.api_username,
                api_password=self.api_password,
                timeout=self.timeout,
                max_attempts=self.max_attempts,
            )
        return self

    @property
    def transport(self) -> Transport:
        return self.setup()._transport

    def login(self, username: str, password: str) -> Optional[PowerSchoolUser]:
        """
        Log into a user's account.
        Returns the user, or None if the service rejected the credentials.
        Raises TransportError if the service could not be reached.
        """
        result = self.transport.login(username, password)
        returned = result.get("return") if isinstance(result, Mapping) else None
        if not isinstance(returned, Mapping):
            raise MalformedPayloadError("loginToPublicPortal result has no return object")

        session_data = returned.get("userSessionVO")
        if not isinstance(session_data, Mapping):
            messages = [
                m.get("description") or m.get("title")
                for m in as_list(returned.get("messageVOs"))
                if isinstance(m, Mapping)
            ]
            self.logger.warning(f"Login failed for {username}: {messages or 'no session returned'}")
            return None

        session = PowerSchoolSession.model_validate(session_data)
        self.logger.info(f"Logged in as {username} (user {session.user_id})")
        return PowerSchoolUser(session, self)

    def close(self) -> None:
        if self._transport is not None:
            self._transport.close()

    def __repr__(self) -> str:
        return f"PowerSchoolAPI(url={self.url!r})"