from typing import (
    Optional,
    Dict,
    Callable,
    Any,
    Awaitable,
    Union,
)
from urllib.parse import urlparse
from .core import FtpClient
from .auth import Basic, Guest
from .config import Limits, Timeout, Zones
from .settings import SSL

HookType = Callable[..., Awaitable[Any]]
AuthType = Union[Basic, Guest]


class FtpMeta:
    """
    Factory for metadata clients that share one configuration.

    Checks the endpoint and settings once, then hands out as many clients as
    you need. Each client is its own control connection with its own session,
    so the "SIZE needs binary mode" discovery made on one connection never
    leaks into another.
    """

    def __init__(
        self,
        endpoint: str,
        auth: Optional[AuthType] = None,
        limits: Optional[Limits] = None,
        timeout: Optional[Timeout] = None,
        zones: Optional[Zones] = None,
        ssl: Optional[SSL] = None,
        hooks: Optional[Dict[str, HookType]] = None,
        encoding: str = "utf-8",
    ) -> None:
        """Set up connection parameters and shared configuration.

        Args:
            endpoint: FTP URL like ftp://server.com or ftps://secure.com
            auth: Basic credentials, a Guest key, or None for plain anonymous
            limits: Dereference depth and other limits
            timeout: How long to wait for connections and socket operations
            zones: Time zone conversion between server and caller
            ssl: SSL/TLS settings for secure connections
            hooks: Custom callbacks for monitoring and logging
            encoding: Text encoding for the control connection

        Raises:
            TypeError: If endpoint isn't a string
            ValueError: If the endpoint scheme or host is wrong, or auth isn't supported
        """
        if not isinstance(endpoint, str):
            raise TypeError("Endpoint must be a string.")

        # Parse the FTP URL to extract connection details
        url = urlparse(endpoint)

        if url.scheme not in {"ftp", "ftps"}:
            raise ValueError("Endpoint must start with 'ftp://' or 'ftps://'.")

        if not url.hostname:
            raise ValueError("Endpoint must include a host name.")

        # Store connection info from URL
        self.endpoint: str = endpoint
        self.host: Optional[str] = url.hostname
        self.port: int = url.port or (21 if url.scheme == "ftp" else 990)
        self.secure: bool = url.scheme == "ftps"

        # Set up configuration with sensible defaults
        self.limits: Limits = limits or Limits()
        self.timeout: Timeout = timeout or Timeout()
        self.zones: Zones = zones or Zones()
        self.ssl: SSL = ssl or SSL()
        self.hooks: Dict[str, HookType] = hooks or {}
        self.encoding: str = encoding
        self.auth: Optional[AuthType] = auth

        if self.auth is not None and not isinstance(self.auth, (Basic, Guest)):
            raise ValueError("FTP only supports Basic or Guest authentication")

    def client(self) -> FtpClient:
        """Create a client using the shared configuration.

        Returns:
            FtpClient: Ready-to-connect client instance
        """
        return FtpClient(
            endpoint=self.endpoint,
            auth=self.auth,
            limits=self.limits,
            timeout=self.timeout,
            zones=self.zones,
            ssl=self.ssl,
            hooks=self.hooks,
            encoding=self.encoding,
        )
