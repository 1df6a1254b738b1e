import re
from typing import Optional, TYPE_CHECKING

from .models import Feature, Reply, SizeReply, TransferType, UNKNOWN
from .paths import require

if TYPE_CHECKING:
    from .session import Session

# What servers say when they refuse SIZE in ASCII mode (lower-cased)
ASCII = (
    "not allowed in ascii",
    "size not allowed in ascii",
    "n'est pas autorisé en mode ascii",
)

NUMBER = re.compile(r"[+-]?[0-9]+")


def rejected(message: Optional[str]) -> bool:
    """Check whether a failure message is a known "SIZE not allowed in ASCII mode" text."""
    if not message:
        return False
    text = message.lower()
    return any(known in text for known in ASCII)


def number(message: Optional[str], default: int) -> int:
    """Parse a SIZE reply message as a base-10 integer, falling back to default."""
    text = (message or "").strip()
    if not NUMBER.fullmatch(text):
        return default
    return int(text)


async def query(session: "Session", path: str, default: int = UNKNOWN) -> SizeReply:
    """
    Ask the server for the size of a file, in bytes.

    Some servers refuse SIZE while the connection is in ASCII transfer type.
    The first time that happens on a session, the session remembers it for
    good, switches to binary and asks once more. From then on every size
    query switches to binary up front, so a connection never retries more
    than once over its whole lifetime.

    Nothing about a missing file or an unhelpful server raises here; all of
    those come back as the caller's default.

    Args:
        session: Session owning the connection and the sticky ASCII flag
        path: Remote file path
        default: Size to report when the real one can't be obtained

    Returns:
        SizeReply: The last reply seen (None if nothing was sent) and the size

    Raises:
        ValueError: If the path is blank
    """
    require(path)

    if not session.features.has(Feature.SIZE):
        return SizeReply(reply=None, size=default)

    command = f"SIZE {session.encode(path)}"
    reply: Optional[Reply] = None

    async with session.exclusive():
        while True:
            if session.binary:
                await session.commands.transfer(TransferType.BINARY)

            reply = await session.commands.execute(command)
            if reply.success:
                return SizeReply(reply=reply, size=number(reply.message, default))

            # Only ever flips once per session, which bounds the retry
            if not session.binary and rejected(reply.message):
                session.binary = True
                continue

            return SizeReply(reply=reply, size=default)
