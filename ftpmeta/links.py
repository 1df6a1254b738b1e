from typing import Iterable, Optional, TYPE_CHECKING

from .models import Entry, Feature, Kind, MINIMUM, UNKNOWN
from .paths import parent

if TYPE_CHECKING:
    from .session import Session


def find(entries: Iterable[Entry], target: str) -> Optional[Entry]:
    """First entry whose full path is exactly the target, in listing order."""
    for entry in entries:
        if entry.path == target:
            return entry
    return None


def check(entry: Entry) -> None:
    """Make sure an entry can be dereferenced at all.

    Raises:
        ValueError: If the entry isn't a link, or the link has no target
    """
    if entry is None or entry.kind is not Kind.LINK:
        raise ValueError("Only symbolic links can be dereferenced. Check that the entry kind is LINK.")

    if entry.target is None:
        raise ValueError("The link target is missing. Check it before dereferencing the link.")


def bound(depth) -> None:
    if isinstance(depth, bool) or not isinstance(depth, int) or depth <= 0:
        raise ValueError("Dereference depth must be a positive integer")


async def dereference(session: "Session", entry: Entry, depth: int) -> Optional[Entry]:
    """
    Follow a symbolic link to the file or directory it finally points at.

    Each step lists the directory holding the current target and looks for
    an entry with exactly that path. Links pointing at links are followed
    until a non-link shows up, the target can't be found, or the number of
    link-to-link hops reaches ``depth``. The hop count belongs to this call
    alone, so link cycles always end after ``depth`` listings.

    The entry that is finally reached gets its modification time (when the
    server has MDTM) and, for files with no size in the listing, its size
    (when the server has SIZE) filled in before it is returned.

    Args:
        session: Session owning the connection
        entry: The link to follow
        depth: Maximum number of link-to-link hops

    Returns:
        Entry: The terminal entry, or None if the link can't be resolved

    Raises:
        ValueError: If the entry isn't a link with a target, or depth isn't positive
    """
    bound(depth)

    hops = 0
    current = entry

    while True:
        check(current)
        target = current.target

        async with session.exclusive():
            entries = await session.lister.listing(parent(target))

        found = find(entries, target)
        if found is None:
            return None

        if found.kind is not Kind.LINK:
            return await enrich(session, found)

        hops += 1
        if hops >= depth:
            return None

        current = found


async def enrich(session: "Session", entry: Entry) -> Entry:
    """Fill in modification time and size on a terminal entry, in place."""
    if not entry.enriched and session.features.has(Feature.MDTM):
        moment = await session.modified(entry.path)
        if moment != MINIMUM:
            entry.modified = moment

    if entry.kind is Kind.FILE and entry.size < 0 and session.features.has(Feature.SIZE):
        entry.size = await session.size(entry.path, UNKNOWN)

    entry.enriched = True
    return entry
