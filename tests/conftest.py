"""Shared fixtures: an in-memory server that plays every collaborator role."""

import asyncio
import threading
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

import pytest

from ftpmeta import Capabilities, Entry, Feature, Kind, Reply, Session, TransferType
from ftpmeta.paths import parent

ASCII_REFUSAL = "SIZE not allowed in ASCII mode"


class FakeServer:
    """Commands, lister and capability set backed by dictionaries.

    Every command and listing is recorded. ``refusals`` is how many SIZE
    commands get the ASCII-mode refusal before the server starts answering.
    ``delay`` makes each exchange take a little while so overlapping callers
    would show up in ``overlaps``.
    """

    def __init__(
        self,
        entries: Iterable[Entry] = (),
        features: Iterable[Feature] = (Feature.SIZE, Feature.MDTM, Feature.MFMT),
        sizes: Optional[Dict[str, object]] = None,
        times: Optional[Dict[str, str]] = None,
        refusals: int = 0,
        delay: float = 0.0,
        readonly: bool = False,
    ) -> None:
        self.entries = list(entries)
        self.capabilities = Capabilities(features)
        self.sizes = dict(sizes or {})
        self.times = dict(times or {})
        self.refusals = refusals
        self.delay = delay
        self.readonly = readonly

        self.commands: List[str] = []
        self.types: List[TransferType] = []
        self.listings: List[str] = []
        self.mode = TransferType.ASCII

        self.mutex = threading.Lock()
        self.inflight = 0
        self.overlaps = 0

    def has(self, feature: Feature) -> bool:
        return self.capabilities.has(feature)

    def enter(self) -> None:
        with self.mutex:
            self.inflight += 1
            if self.inflight > 1:
                self.overlaps += 1

    def leave(self) -> None:
        with self.mutex:
            self.inflight -= 1

    async def execute(self, command: str) -> Reply:
        self.enter()
        try:
            self.commands.append(command)
            if self.delay:
                await asyncio.sleep(self.delay)
            return self.answer(command)
        finally:
            self.leave()

    async def transfer(self, mode: TransferType) -> None:
        self.types.append(mode)
        self.mode = mode

    async def listing(self, directory: str) -> List[Entry]:
        self.enter()
        try:
            self.listings.append(directory)
            if self.delay:
                await asyncio.sleep(self.delay)
            # Fresh copies, the resolver fills them in
            return [replace(entry) for entry in self.entries if parent(entry.path) == directory]
        finally:
            self.leave()

    def answer(self, command: str) -> Reply:
        verb, _, rest = command.partition(" ")

        if verb == "SIZE":
            if self.refusals > 0:
                self.refusals -= 1
                return Reply(False, "550", ASCII_REFUSAL)
            if rest in self.sizes:
                return Reply(True, "213", str(self.sizes[rest]))
            return Reply(False, "550", f"{rest}: No such file or directory")

        if verb == "MDTM":
            if rest in self.times:
                return Reply(True, "213", self.times[rest])
            return Reply(False, "550", f"{rest}: No such file or directory")

        if verb == "MFMT":
            stamp, _, path = rest.partition(" ")
            if self.readonly:
                return Reply(False, "550", "Permission denied")
            self.times[path] = stamp
            return Reply(True, "213", f"Modify={stamp}; {path}")

        return Reply(False, "502", "Command not implemented")

    def sent(self, verb: str) -> List[str]:
        return [command for command in self.commands if command.startswith(verb + " ")]


def link(path: str, target: Optional[str]) -> Entry:
    return Entry(path=path, kind=Kind.LINK, target=target)


def chain(count: int, directory: str = "/data") -> List[Entry]:
    """``count`` links each pointing at the next, the last one at a file."""
    entries = [
        link(f"{directory}/l{index}", f"{directory}/l{index + 1}")
        for index in range(count - 1)
    ]
    entries.append(link(f"{directory}/l{count - 1}", f"{directory}/file"))
    entries.append(Entry(path=f"{directory}/file", kind=Kind.FILE))
    return entries


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def session(server: FakeServer) -> Session:
    return Session(server, server, server)
