import datetime
import warnings
from dataclasses import dataclass
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

# A zone can be given by name, as a ready tzinfo, or as an hour offset
ZoneSpec = Union[str, float, int, datetime.tzinfo]


@dataclass
class Limits:
    """
    Limits applied to metadata resolution.

    Symbolic links on a remote server can point at other links, and nothing
    stops them from forming a loop. The depth limit bounds how many hops a
    single dereference is allowed to follow before giving up and reporting
    the link as unresolvable.

    Attributes:
        depth: Maximum number of link-to-link hops followed by one dereference.
               Reaching it is a normal "not resolvable" outcome, not an error.
    """

    depth: int = 20  # Maximum link-to-link hops per dereference

    def __post_init__(self) -> None:
        """
        Validate limit configuration after initialization.

        Raises:
            ValueError: If the depth is not a positive integer.
        """
        if isinstance(self.depth, bool) or not isinstance(self.depth, int):
            raise ValueError("Dereference depth must be an integer")

        if self.depth <= 0:
            raise ValueError("Dereference depth must be positive")

        if self.depth > 100:
            warnings.warn(
                f"Dereference depth ({self.depth}) is unusually high. "
                "Every hop costs a directory listing on the server."
            )


@dataclass
class Timeout:
    """
    Timeout configuration for the control connection.

    These only apply to the transport. Metadata operations themselves never
    add timeouts of their own; a slow server just means a slow answer.

    Attributes:
        connect: Time to wait for the TCP connection and greeting.
        read: Time to wait on any single socket read or write.
    """

    connect: float = 5.0  # Time to wait for connection establishment
    read: float = 30.0  # Time to wait on a single socket operation

    def __post_init__(self) -> None:
        """
        Validate timeout configuration after initialization.

        Raises:
            ValueError: If a timeout value is not positive.
        """
        if self.connect <= 0:
            raise ValueError("Connect timeout must be positive")
        if self.read <= 0:
            raise ValueError("Read timeout must be positive")


def zone(value: Optional[ZoneSpec]) -> Optional[datetime.tzinfo]:
    """Turn a zone name, hour offset or tzinfo into a tzinfo (None stays None)."""
    if value is None or isinstance(value, datetime.tzinfo):
        return value

    if isinstance(value, bool):
        raise ValueError("Time zone cannot be a boolean")

    if isinstance(value, (int, float)):
        if not -24 < value < 24:
            raise ValueError(f"Time zone offset out of range: {value} hours")
        return datetime.timezone(datetime.timedelta(hours=value))

    if isinstance(value, str):
        try:
            return ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as error:
            raise ValueError(f"Unknown time zone: {value}") from error

    raise ValueError(f"Unsupported time zone value: {value!r}")


@dataclass
class Zones:
    """
    Time zone conversion between the server's clock and yours.

    MDTM and MFMT timestamps carry no zone; RFC 3659 says they are UTC, but
    plenty of servers report their own local time instead. Tell this class
    what the server uses and what you want back and it will shift times in
    both directions.

    With neither side configured no conversion happens at all: timestamps
    come back naive, exactly as the server sent them. As soon as one side is
    configured, the other defaults to UTC and results are timezone-aware.

    Attributes:
        server: Zone the server reports times in (name, hour offset or tzinfo).
        local: Zone you want times converted to (name, hour offset or tzinfo).
    """

    server: Optional[ZoneSpec] = None  # Zone of timestamps on the wire
    local: Optional[ZoneSpec] = None  # Zone of timestamps handed to callers

    def __post_init__(self) -> None:
        """
        Resolve zone specs into tzinfo objects.

        Raises:
            ValueError: If a zone name is unknown or an offset is out of range.
        """
        self.server = zone(self.server)
        self.local = zone(self.local)

    @property
    def identity(self) -> bool:
        return self.server is None and self.local is None

    def inbound(self, moment: datetime.datetime) -> datetime.datetime:
        """Convert a naive server timestamp into the caller's zone.

        Args:
            moment: Timestamp exactly as parsed from the server

        Returns:
            datetime: Unchanged when unconfigured, otherwise aware in the local zone
        """
        if self.identity:
            return moment

        server = self.server or datetime.timezone.utc
        local = self.local or datetime.timezone.utc
        return moment.replace(tzinfo=server).astimezone(local)

    def outbound(self, moment: datetime.datetime) -> datetime.datetime:
        """Convert a caller timestamp into the naive server time to send.

        Naive input is taken to be in the local zone.

        Args:
            moment: Timestamp supplied by the caller

        Returns:
            datetime: Unchanged when unconfigured, otherwise naive server time
        """
        if self.identity:
            return moment

        server = self.server or datetime.timezone.utc
        local = self.local or datetime.timezone.utc
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=local)
        return moment.astimezone(server).replace(tzinfo=None)
