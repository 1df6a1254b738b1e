"""Tests for symbolic link dereferencing."""

import datetime

import pytest

from ftpmeta import Entry, Feature, Kind, Limits, Session
from ftpmeta.links import find

from conftest import FakeServer, chain, link


class TestDereference:
    """Following links to their terminal entry."""

    @pytest.mark.asyncio
    async def test_chain_longer_than_depth_is_unresolvable(self):
        # start -> l0 -> ... -> l4 -> file: six links, five link-to-link hops
        server = FakeServer(chain(5), sizes={"/data/file": 10})
        session = Session(server, server, server)

        assert await session.dereference(link("/start", "/data/l0"), depth=5) is None

    @pytest.mark.asyncio
    async def test_chain_within_depth_resolves_and_enriches(self):
        server = FakeServer(
            chain(5),
            sizes={"/data/file": 1234},
            times={"/data/file": "20240102030405"},
        )
        session = Session(server, server, server)

        entry = await session.dereference(link("/start", "/data/l0"), depth=6)

        assert entry is not None
        assert entry.path == "/data/file"
        assert entry.kind is Kind.FILE
        assert entry.size == 1234
        assert entry.modified == datetime.datetime(2024, 1, 2, 3, 4, 5)

    @pytest.mark.asyncio
    async def test_direct_link_to_file(self, server, session):
        server.entries = [Entry(path="/pub/real.txt", kind=Kind.FILE, size=7)]

        entry = await session.dereference(link("/pub/alias", "/pub/real.txt"), depth=1)

        assert entry.path == "/pub/real.txt"
        assert server.listings == ["/pub"]

    @pytest.mark.asyncio
    async def test_depth_defaults_to_session_limit(self):
        server = FakeServer(chain(3))
        session = Session(server, server, server, limits=Limits(depth=2))

        assert await session.dereference(link("/start", "/data/l0")) is None

        session.limits = Limits(depth=4)
        assert (await session.dereference(link("/start", "/data/l0"))).path == "/data/file"

    @pytest.mark.asyncio
    async def test_cycle_terminates(self, server, session):
        server.entries = [link("/loop/a", "/loop/b"), link("/loop/b", "/loop/a")]

        assert await session.dereference(link("/loop/a", "/loop/b"), depth=7) is None
        assert len(server.listings) == 7

    @pytest.mark.asyncio
    async def test_missing_target_returns_none(self, server, session):
        server.entries = [Entry(path="/pub/other", kind=Kind.FILE)]

        assert await session.dereference(link("/pub/alias", "/pub/gone")) is None

    @pytest.mark.asyncio
    async def test_target_is_matched_verbatim(self, server, session):
        server.entries = [Entry(path="/pub/file", kind=Kind.FILE)]

        assert await session.dereference(link("/pub/alias", "/pub//file")) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", [Kind.FILE, Kind.DIRECTORY])
    async def test_non_link_fails_validation(self, server, session, kind):
        for depth in (None, 1, 50):
            with pytest.raises(ValueError):
                await session.dereference(Entry(path="/pub/x", kind=kind, target="/pub/y"), depth)

        assert server.listings == []

    @pytest.mark.asyncio
    async def test_link_without_target_fails_validation(self, server, session):
        with pytest.raises(ValueError):
            await session.dereference(link("/pub/alias", None))

        assert server.listings == []

    @pytest.mark.asyncio
    async def test_intermediate_link_without_target_fails_validation(self, server, session):
        server.entries = [link("/pub/broken", None)]

        with pytest.raises(ValueError):
            await session.dereference(link("/pub/alias", "/pub/broken"))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("depth", [0, -1, True, 2.5])
    async def test_depth_must_be_positive_integer(self, session, depth):
        with pytest.raises(ValueError):
            await session.dereference(link("/pub/alias", "/pub/file"), depth)

    def test_blocking_form(self, server, session):
        server.entries = [Entry(path="/pub/file", kind=Kind.FILE)]
        server.sizes["/pub/file"] = 3

        entry = session.blocking.dereference(link("/pub/alias", "/pub/file"))

        assert entry.size == 3


class TestEnrichment:
    """Filling in size and modified time on the terminal entry."""

    @pytest.mark.asyncio
    async def test_no_capabilities_means_no_commands(self):
        server = FakeServer(
            [Entry(path="/pub/file", kind=Kind.FILE)],
            features=(),
            sizes={"/pub/file": 5},
            times={"/pub/file": "20240102030405"},
        )
        session = Session(server, server, server)

        entry = await session.dereference(link("/pub/alias", "/pub/file"))

        assert entry.size == -1
        assert entry.modified is None
        assert server.commands == []

    @pytest.mark.asyncio
    async def test_known_size_is_kept(self, server, session):
        server.entries = [Entry(path="/pub/file", kind=Kind.FILE, size=99)]
        server.sizes["/pub/file"] = 5

        entry = await session.dereference(link("/pub/alias", "/pub/file"))

        assert entry.size == 99
        assert server.sent("SIZE") == []

    @pytest.mark.asyncio
    async def test_directory_gets_time_but_no_size(self, server, session):
        server.entries = [Entry(path="/pub/dir", kind=Kind.DIRECTORY)]
        server.times["/pub/dir"] = "20230506070809"

        entry = await session.dereference(link("/pub/alias", "/pub/dir"))

        assert entry.kind is Kind.DIRECTORY
        assert entry.modified == datetime.datetime(2023, 5, 6, 7, 8, 9)
        assert server.sent("SIZE") == []

    @pytest.mark.asyncio
    async def test_unavailable_time_leaves_listing_time(self, server, session):
        listed = datetime.datetime(2020, 1, 1)
        server.entries = [Entry(path="/pub/file", kind=Kind.FILE, modified=listed)]

        entry = await session.dereference(link("/pub/alias", "/pub/file"))

        assert entry.modified == listed
        assert server.sent("MDTM") == ["MDTM /pub/file"]

    @pytest.mark.asyncio
    async def test_size_only_server(self):
        server = FakeServer(
            [Entry(path="/pub/file", kind=Kind.FILE)],
            features=(Feature.SIZE,),
            sizes={"/pub/file": 42},
        )
        session = Session(server, server, server)

        entry = await session.dereference(link("/pub/alias", "/pub/file"))

        assert entry.size == 42
        assert server.sent("MDTM") == []

    @pytest.mark.asyncio
    async def test_already_enriched_entry_skips_mdtm(self):
        listed = datetime.datetime(2020, 1, 1)
        server = FakeServer(
            [Entry(path="/pub/file", kind=Kind.FILE, modified=listed, enriched=True)],
            sizes={"/pub/file": 64},
            times={"/pub/file": "20240102030405"},
        )
        session = Session(server, server, server)

        entry = await session.dereference(link("/pub/alias", "/pub/file"))

        assert server.sent("MDTM") == []
        assert server.sent("SIZE") == ["SIZE /pub/file"]
        assert entry.modified == listed
        assert entry.size == 64

    @pytest.mark.asyncio
    async def test_resolved_entry_is_marked_enriched(self, server, session):
        server.entries = [Entry(path="/pub/file", kind=Kind.FILE)]

        entry = await session.dereference(link("/pub/alias", "/pub/file"))

        assert entry.enriched is True


class TestFind:
    def test_first_match_wins(self):
        first = Entry(path="/a/x", kind=Kind.FILE, size=1)
        second = Entry(path="/a/x", kind=Kind.FILE, size=2)

        assert find([Entry(path="/a/y", kind=Kind.FILE), first, second], "/a/x") is first

    def test_no_match(self):
        assert find([], "/a/x") is None
