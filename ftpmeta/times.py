import datetime
import re
import warnings
from typing import Optional, TYPE_CHECKING

from .models import MINIMUM
from .paths import require

if TYPE_CHECKING:
    from .session import Session

# YYYYMMDDHHMMSS with an optional fractional part, as used by MDTM and MFMT
STAMP = re.compile(r"(\d{14})(?:\.(\d+))?")


def parse(text: Optional[str]) -> Optional[datetime.datetime]:
    """Parse a server timestamp like ``20240131235959`` or ``20240131235959.250``.

    Args:
        text: Reply message or listing fact holding the timestamp

    Returns:
        datetime: Naive timestamp, or None if the text isn't one
    """
    match = STAMP.fullmatch((text or "").strip())
    if not match:
        return None

    digits, fraction = match.groups()
    try:
        moment = datetime.datetime.strptime(digits, "%Y%m%d%H%M%S")
    except ValueError:
        return None

    if fraction:
        # Anything past microseconds is dropped
        moment = moment.replace(microsecond=int(fraction[:6].ljust(6, "0")))
    return moment


def stamp(moment: datetime.datetime) -> str:
    """Format a timestamp the way MFMT expects it (seconds precision)."""
    return (
        f"{moment.year:04d}{moment.month:02d}{moment.day:02d}"
        f"{moment.hour:02d}{moment.minute:02d}{moment.second:02d}"
    )


def check(moment) -> None:
    if moment is None:
        raise ValueError("Modification time is required")

    if not isinstance(moment, datetime.datetime):
        raise ValueError("Modification time must be a datetime")


async def modified(session: "Session", path: str) -> datetime.datetime:
    """
    Get the last modification time of a remote file with MDTM.

    The server's answer is converted through the session's time zone
    settings. When the server refuses, or sends something that isn't a
    timestamp, the result is MINIMUM rather than an exception.

    Args:
        session: Session owning the connection
        path: Remote file path

    Returns:
        datetime: Modification time, or MINIMUM if it isn't available

    Raises:
        ValueError: If the path is blank
    """
    require(path)

    async with session.exclusive():
        reply = await session.commands.execute(f"MDTM {session.encode(path)}")

    if not reply.success:
        return MINIMUM

    moment = parse(reply.message)
    if moment is None:
        return MINIMUM

    try:
        return session.zones.inbound(moment)
    except OverflowError:
        return MINIMUM


async def touch(session: "Session", path: str, moment: datetime.datetime) -> bool:
    """
    Set the last modification time of a remote file with MFMT.

    The timestamp goes through the inverse time zone conversion first and
    is sent with seconds precision.

    Args:
        session: Session owning the connection
        path: Remote file path
        moment: New modification time

    Returns:
        bool: True if the server accepted the change, False otherwise

    Raises:
        ValueError: If the path is blank, the timestamp is missing, or it
                    falls outside the calendar once converted to server time
    """
    require(path)
    check(moment)

    try:
        remote = session.zones.outbound(moment)
    except OverflowError as error:
        raise ValueError(f"Modification time {moment} is out of range in the server time zone") from error

    command = f"MFMT {stamp(remote)} {session.encode(path)}"

    async with session.exclusive():
        reply = await session.commands.execute(command)

    if not reply.success:
        warnings.warn(f"Setting modification time failed for {path}: {reply.code} {reply.message}")
        return False

    return True
