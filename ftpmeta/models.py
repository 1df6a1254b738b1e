import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Protocol

# Reserved "no valid result" values handed back instead of raising
UNKNOWN = -1
MINIMUM = datetime.datetime.min


class Kind(Enum):
    """What a directory entry points at."""

    FILE = "file"
    DIRECTORY = "dir"
    LINK = "link"


class TransferType(Enum):
    """Transfer types understood by the TYPE command."""

    BINARY = "I"
    ASCII = "A"


class Feature(Enum):
    """
    Optional server features advertised through FEAT.

    Only the ones this library makes decisions on are listed here. Anything
    else the server advertises is still recorded by the capability set, it
    just has no enum member to ask about.
    """

    SIZE = "SIZE"
    MDTM = "MDTM"
    MFMT = "MFMT"
    MLSD = "MLSD"
    UTF8 = "UTF8"


@dataclass
class Reply:
    """
    A single parsed reply from the control connection.

    Attributes:
        success: True for positive replies (1xx, 2xx and 3xx).
        code: Three digit reply code as sent by the server.
        message: Reply text with the code stripped. Multi-line replies
                 are joined with newlines.
    """

    success: bool
    code: str
    message: str


@dataclass
class Entry:
    """
    One item of a remote directory listing.

    Entries come out of a directory lister and may be filled in further by
    link resolution (size and modified time). They are handed back to the
    caller and never cached.

    Attributes:
        path: Full remote path of the item. Link resolution compares it
              against link targets verbatim.
        kind: File, directory or symbolic link.
        target: Full path a link points at. Must be set for links.
        size: Size in bytes, or UNKNOWN (-1) when the listing had none.
        modified: Last modification time if known.
    """

    path: str
    kind: Kind
    target: Optional[str] = None  # Only meaningful for links
    size: int = UNKNOWN  # Size in bytes, -1 when unknown
    modified: Optional[datetime.datetime] = None  # Last modification time
    enriched: bool = field(default=False, repr=False, compare=False)


@dataclass
class SizeReply:
    """
    Outcome of a SIZE query.

    Attributes:
        reply: The last reply received, or None when nothing was sent.
        size: Parsed size, or the caller's default on any failure.
    """

    reply: Optional[Reply]
    size: int


class Commands(Protocol):
    """Command/reply side of the control connection."""

    async def execute(self, command: str) -> Reply: ...

    async def transfer(self, mode: TransferType) -> None: ...


class Lister(Protocol):
    """Lists a remote directory into entries (order not guaranteed)."""

    async def listing(self, directory: str) -> List[Entry]: ...


class Features(Protocol):
    """Answers whether the server advertised a feature."""

    def has(self, feature: Feature) -> bool: ...
