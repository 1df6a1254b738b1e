import asyncio
import warnings
from pathlib import PurePosixPath
from typing import (
    Optional,
    Dict,
    Union,
    Callable,
    Iterable,
    List,
    Set,
    Any,
    Awaitable,
)
from urllib.parse import urlparse
import aioftp
from .auth import Basic, Guest
from .config import Limits, Timeout, Zones
from .models import Entry, Feature, Kind, Reply, TransferType, UNKNOWN
from .session import Session
from .settings import SSL
from . import times

HookType = Callable[..., Awaitable[Any]]
AuthType = Union[Basic, Guest]

# MLSD "type" facts some servers use to mark symbolic links
LINKS = ("os.unix=slink", "os.unix=symlink")


class Capabilities:
    """
    Features a server advertised in its FEAT reply.

    Only the feature keyword is kept (the first word of each line), so
    "MDTM" and "SIZE" are recorded the same way whatever parameters the
    server lists after them.
    """

    def __init__(self, names: Iterable[Union[str, Feature]] = ()) -> None:
        self.names: Set[str] = {
            (name.value if isinstance(name, Feature) else str(name)).upper()
            for name in names
        }

    @classmethod
    def parse(cls, lines: Iterable[str]) -> "Capabilities":
        """Build the set from the body lines of a FEAT reply.

        Args:
            lines: Lines between the "211-" opener and the "211 End" closer

        Returns:
            Capabilities: Every keyword found
        """
        names = []
        for line in lines:
            words = line.strip().split()
            if words:
                names.append(words[0])
        return cls(names)

    def has(self, feature: Feature) -> bool:
        return feature.value in self.names

    def __len__(self) -> int:
        return len(self.names)


def message(info: List[str]) -> str:
    """Join the text of a (possibly multi-line) reply, minus separators."""
    lines = []
    for line in info:
        if line[:1] in (" ", "-"):
            line = line[1:]
        lines.append(line.strip())
    return "\n".join(lines).strip()


class FtpClient:
    """
    The control connection, built on aioftp.

    This is the piece that actually talks to a server: it connects and logs
    in, finds out which features the server has, sends commands and reads
    replies, switches transfer type, and turns directory listings into
    entries. Once connected it hands out a Session that runs the metadata
    operations over it:

        async with FtpClient("ftp://ftp.example.com", auth=Basic("me", "secret")) as session:
            entry = await session.dereference(link)
            when = await session.modified("/pub/file.bin")

    Works with plain FTP and implicit FTPS (ftps:// on port 990).
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
        """Set up the client; nothing is sent until connect().

        Args:
            endpoint: FTP server URL like "ftp://myserver.com:2121" or "ftps://secure.com"
            auth: Basic credentials, a Guest key for anonymous login, or None
            limits: Dereference depth for the session
            timeout: Connect and socket timeouts for the transport
            zones: Time zone conversion for MDTM/MFMT and listing times
            ssl: SSL/TLS config for secure connections (FTPS)
            hooks: Async callbacks for "connect", "command", "call" and "error"
            encoding: Text encoding for the control connection
        """
        # Parse endpoint URL to extract connection details
        url = urlparse(endpoint)
        self.endpoint = endpoint
        self.host = url.hostname
        self.port = url.port or (21 if url.scheme == "ftp" else 990)
        self.secure = url.scheme == "ftps"

        # Store config for client behavior
        self.auth = auth
        self.limits = limits or Limits()
        self.timeout = timeout or Timeout()
        self.zones = zones or Zones()
        self.ssl = ssl or SSL()
        self.hooks = hooks or {}
        self.encoding = encoding

        # Connection state management
        self.connection: Optional[aioftp.Client] = None
        self.capabilities: Capabilities = Capabilities()
        self.session: Optional[Session] = None

    async def connect(self) -> Session:
        """Connect, log in, read FEAT, and start a fresh session.

        Returns:
            Session: Metadata operations bound to this connection

        Raises:
            ConnectionError: If we can't connect, authenticate, or the server rejects us
        """
        if self.session is not None:
            return self.session

        try:
            self.connection = aioftp.Client(
                socket_timeout=self.timeout.read,
                connection_timeout=self.timeout.connect,
                encoding=self.encoding,
                ssl=(
                    self.ssl.context
                    if (self.secure and self.ssl.context)
                    else (True if self.secure else None)
                ),
            )

            # Connect to server with timeout protection
            await asyncio.wait_for(
                self.connection.connect(self.host, self.port),
                timeout=self.timeout.connect,
            )

            # Authenticate with credentials, a guest key, or plain anonymous
            if isinstance(self.auth, Basic):
                await self.connection.login(self.auth.user, self.auth.password)
            elif isinstance(self.auth, Guest):
                await self.connection.login("anonymous", self.auth.key)
            else:
                await self.connection.login()

            self.capabilities = await self.features()

        except asyncio.TimeoutError:
            self.drop()
            raise ConnectionError(f"Connection to {self.host}:{self.port} timed out")
        except Exception as error:
            self.drop()
            raise ConnectionError(f"Failed to connect to FTP server: {error}")

        self.session = Session(
            commands=self,
            lister=self,
            features=self.capabilities,
            limits=self.limits,
            zones=self.zones,
            hooks=self.hooks,
            loop=asyncio.get_running_loop(),
        )

        # Run connect hook for custom initialization
        if "connect" in self.hooks:
            try:
                await self.hooks["connect"](self.session)
            except Exception as error:
                warnings.warn(f"Connect hook failed: {error}")

        return self.session

    def drop(self) -> None:
        """Close the half-open transport after a failed connect."""
        if self.connection is not None:
            self.connection.close()
            self.connection = None

    async def features(self) -> Capabilities:
        """Ask the server what it supports.

        Servers without FEAT simply get an empty set, which turns SIZE and
        MDTM based lookups into their "not available" results.
        """
        try:
            code, info = await self.connection.command("FEAT", "2xx")
        except aioftp.StatusCodeError:
            return Capabilities()
        # First line is "211-Features:", last is "211 End"
        return Capabilities.parse(info[1:-1])

    def ensure(self) -> aioftp.Client:
        if not self.connection:
            raise RuntimeError("Client not connected. Use within 'async with' block.")
        return self.connection

    async def execute(self, command: str) -> Reply:
        """Send one command and read its complete reply.

        Args:
            command: Command line without the trailing CRLF

        Returns:
            Reply: Parsed reply; negative replies are not raised

        Raises:
            RuntimeError: If the client isn't connected
            ConnectionError: If the connection drops mid-exchange
        """
        connection = self.ensure()

        try:
            await connection.command(command)
            code, info = await connection.parse_response()
        except OSError as error:
            await self.report(error)
            raise

        reply = Reply(
            success=code[:1] in ("1", "2", "3"),
            code=str(code),
            message=message(info),
        )

        if "command" in self.hooks:
            try:
                await self.hooks["command"](command, reply)
            except Exception as error:
                warnings.warn(f"Command hook failed: {error}")

        return reply

    async def transfer(self, mode: TransferType) -> None:
        """Switch the transfer type (TYPE I or TYPE A)."""
        reply = await self.execute(f"TYPE {mode.value}")
        if not reply.success:
            warnings.warn(f"Transfer type change to {mode.name} failed: {reply.code} {reply.message}")

    async def listing(self, directory: str) -> List[Entry]:
        """List a remote directory as entries.

        Args:
            directory: Remote directory to list

        Returns:
            List of entries; empty if the server refused the listing

        Raises:
            RuntimeError: If the client isn't connected
        """
        connection = self.ensure()
        entries = []

        try:
            async for path, info in connection.list(PurePosixPath(directory)):
                entry = self.entry(directory, path, info)
                if entry is not None:
                    entries.append(entry)
        except aioftp.StatusCodeError as error:
            warnings.warn(f"Directory listing failed: {error}")
            return []

        return entries

    def entry(self, directory: str, path: PurePosixPath, info: Dict[str, str]) -> Optional[Entry]:
        """Map aioftp's fact dictionary for one listed item onto an Entry."""
        fact = str(info.get("type", "file"))
        lowered = fact.lower()

        if lowered in ("cdir", "pdir"):
            return None

        target = None
        _, _, destination = fact.partition(":")
        if "link_dst" in info:
            # LIST output: "name -> destination", type is that of the link itself
            kind = Kind.LINK
            target = self.target(directory, info["link_dst"])
        elif lowered.startswith(LINKS) and destination:
            kind = Kind.LINK
            target = self.target(directory, destination)
        elif lowered == "dir":
            kind = Kind.DIRECTORY
        else:
            kind = Kind.FILE

        size = str(info.get("size", ""))
        modified = times.parse(info.get("modify"))
        if modified is not None:
            try:
                modified = self.zones.inbound(modified)
            except OverflowError:
                modified = None

        return Entry(
            path=str(path),
            kind=kind,
            target=target,
            size=int(size) if size.isdigit() and kind is not Kind.LINK else UNKNOWN,
            modified=modified,
        )

    def target(self, directory: str, destination: str) -> str:
        """Full path of a link destination, relative ones taken from the listed directory."""
        destination = str(destination).strip().rstrip("\"").rstrip("/") or "/"
        return str(PurePosixPath(directory) / destination)

    async def report(self, error: Exception) -> None:
        if "error" in self.hooks:
            try:
                await self.hooks["error"](error)
            except Exception:
                pass  # Hook failures shouldn't mask the real error

    async def close(self) -> None:
        """Say goodbye to the server and drop the session.

        Errors while quitting are only warned about, the connection is
        dropped either way.
        """
        if self.connection:
            try:
                await self.connection.quit()
            except Exception as error:
                warnings.warn(f"Error during FTP client cleanup: {error}")
            finally:
                self.connection = None
        self.session = None

    async def __aenter__(self) -> Session:
        return await self.connect()

    async def __aexit__(self, type, value, trace) -> None:
        await self.close()

    def stats(self) -> Dict[str, Union[str, int, bool, None]]:
        """Get status info about the client and its connection.

        Returns:
            Dict with connection and session details
        """
        return {
            "connected": self.connection is not None,
            "host": self.host,
            "port": self.port,
            "secure": self.secure,
            "features": len(self.capabilities),
            "binary": self.session.binary if self.session else False,
            "stale": self.session.stale if self.session else False,
            "encoding": self.encoding,
        }
