import asyncio
import datetime
import warnings
from contextlib import asynccontextmanager
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    Optional,
    TypeVar,
)

from . import links, times
from . import size as sizing
from .config import Limits, Zones
from .guard import Guard, drive
from .models import Commands, Entry, Features, Lister, SizeReply, UNKNOWN
from .paths import encode as encoder, require

T = TypeVar("T")
HookType = Callable[..., Awaitable[Any]]
EncoderType = Callable[[str], str]


class Session:
    """
    Metadata operations over one FTP control connection.

    A session ties together the pieces a connection is made of (something to
    send commands through, something to list directories with, and the set
    of features the server advertised) and runs the metadata operations on
    top of them: link dereferencing, file sizes, and modification times.

    Every operation is a coroutine. Each command/reply exchange holds the
    session's guard, so two operations never talk over each other on the
    wire, no matter whether they were awaited on the connection's loop or
    called through the blocking facade from another thread:

        size = await session.size("/pub/file.bin")
        size = session.blocking.size("/pub/file.bin")

    The session also owns the one piece of state a connection accumulates:
    whether the server needs binary transfer type for SIZE. A fresh session
    always starts without it.
    """

    def __init__(
        self,
        commands: Commands,
        lister: Lister,
        features: Features,
        encode: EncoderType = encoder,
        limits: Optional[Limits] = None,
        zones: Optional[Zones] = None,
        hooks: Optional[Dict[str, HookType]] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        """Build a session over already connected collaborators.

        Args:
            commands: Sends commands and switches transfer type
            lister: Lists remote directories
            features: Knows what the server advertised
            encode: Turns paths into their on-the-wire form
            limits: Dereference depth and similar limits
            zones: Time zone conversion between server and caller
            hooks: Async callbacks; "call" fires at the start of each operation
            loop: Event loop the connection lives on, used by the blocking facade
        """
        self.commands = commands
        self.lister = lister
        self.features = features
        self.encode = encode
        self.limits: Limits = limits or Limits()
        self.zones: Zones = zones or Zones()
        self.hooks: Dict[str, HookType] = hooks or {}
        self.loop = loop

        self.guard = Guard()
        self.binary: bool = False  # Server refuses SIZE in ASCII mode; never reset
        self.stale: bool = False  # An exchange was abandoned mid-reply
        self.blocking = Blocking(self)

    @asynccontextmanager
    async def exclusive(self) -> AsyncIterator["Session"]:
        """Hold the connection for one exchange.

        Cancelling a caller while it still waits for its turn is harmless.
        Cancelling it in the middle of an exchange leaves a reply on the way
        that nobody will read, so the session is marked stale and refuses
        further work until the caller reconnects.

        Raises:
            ConnectionError: If the session was left stale by an earlier cancellation
        """
        await self.guard.acquire()
        try:
            if self.stale:
                raise ConnectionError(
                    "Control connection is out of sync after a cancelled command. Reconnect first."
                )
            yield self
        except asyncio.CancelledError:
            self.stale = True
            warnings.warn("Command cancelled while awaiting its reply; the session must be reconnected")
            raise
        finally:
            self.guard.release()

    async def trace(self, name: str, *args: Any) -> None:
        """Run the "call" hook for an operation, if one is set."""
        if "call" in self.hooks:
            try:
                await self.hooks["call"](name, args)
            except Exception as error:
                warnings.warn(f"Call hook failed: {error}")

    async def dereference(self, entry: Entry, depth: Optional[int] = None) -> Optional[Entry]:
        """Follow a symbolic link to the entry it finally points at.

        Args:
            entry: Link entry, usually taken from a directory listing
            depth: Maximum link-to-link hops, defaults to limits.depth

        Returns:
            Entry: Terminal entry with size and modified time filled in, or None
                   if the target doesn't exist or the chain is too deep

        Raises:
            ValueError: If the entry isn't a link with a target
        """
        links.check(entry)
        depth = self.limits.depth if depth is None else depth
        links.bound(depth)
        await self.trace("dereference", entry.path, depth)
        return await links.dereference(self, entry, depth)

    async def size(self, path: str, default: int = UNKNOWN) -> int:
        """Size of a remote file in bytes, or default if it can't be had.

        Raises:
            ValueError: If the path is blank
        """
        return (await self.query_size(path, default)).size

    async def query_size(self, path: str, default: int = UNKNOWN) -> SizeReply:
        """Like size() but also hands back the server's last reply."""
        require(path)
        await self.trace("size", path, default)
        return await sizing.query(self, path, default)

    async def modified(self, path: str) -> datetime.datetime:
        """Modification time of a remote file, or MINIMUM if unavailable.

        Raises:
            ValueError: If the path is blank
        """
        require(path)
        await self.trace("modified", path)
        return await times.modified(self, path)

    async def touch(self, path: str, moment: datetime.datetime) -> bool:
        """Set the modification time of a remote file.

        Returns:
            bool: Whether the server accepted it

        Raises:
            ValueError: If the path is blank or the timestamp missing
        """
        require(path)
        times.check(moment)
        await self.trace("touch", path, moment)
        return await times.touch(self, path, moment)

    def wait(self, work: Awaitable[T]) -> T:
        """Drive one of the coroutines above to completion for a blocking caller."""
        return drive(work, self.loop)


class Blocking:
    """
    Blocking twin of a session.

    Same operations, same arguments, same results; each call just runs the
    session's coroutine to completion before returning. Calls made here and
    coroutines awaited elsewhere share the session's guard.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def dereference(self, entry: Entry, depth: Optional[int] = None) -> Optional[Entry]:
        return self.session.wait(self.session.dereference(entry, depth))

    def size(self, path: str, default: int = UNKNOWN) -> int:
        return self.session.wait(self.session.size(path, default))

    def query_size(self, path: str, default: int = UNKNOWN) -> SizeReply:
        return self.session.wait(self.session.query_size(path, default))

    def modified(self, path: str) -> datetime.datetime:
        return self.session.wait(self.session.modified(path))

    def touch(self, path: str, moment: datetime.datetime) -> bool:
        return self.session.wait(self.session.touch(path, moment))
