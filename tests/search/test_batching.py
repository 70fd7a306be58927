import asyncio

import pytest

from wiki_bridge.config import SearchConfig
from wiki_bridge.exceptions import NoDesirableBatches, TransportError
from wiki_bridge.models import Direction
from wiki_bridge.search.batching import BatchManager, pack_titles
from wiki_bridge.utils.wiki_helpers import encoded_titles_length

from tests.fakes import FakeLinkSource


class TestPackTitles:
    """Greedy packing of titles into request-sized groups."""

    def test_short_titles_split_by_count(self):
        titles = [f"T{i:04d}" for i in range(120)]

        groups = pack_titles(titles, max_titles=50, max_encoded_length=1500)

        assert [len(g) for g in groups] == [50, 50, 20]
        assert [t for g in groups for t in g] == titles

    def test_long_titles_split_by_encoded_length(self):
        titles = [f"Article number {i} with a fairly long descriptive title" for i in range(60)]

        groups = pack_titles(titles, max_titles=50, max_encoded_length=1500)

        assert len(groups) > 2
        assert [t for g in groups for t in g] == titles
        for group in groups:
            assert len(group) <= 50
            assert encoded_titles_length(group) < 1500

    def test_non_ascii_titles_use_encoded_length(self):
        # Each "é" encodes to 6 characters
        titles = ["é" * 40 for _ in range(20)]

        groups = pack_titles(titles, max_titles=50, max_encoded_length=1500)

        for group in groups:
            assert encoded_titles_length(group) < 1500
        assert sum(len(g) for g in groups) == 20

    def test_oversized_title_gets_its_own_group(self):
        titles = ["a", "x" * 2000, "b"]

        groups = pack_titles(titles, max_titles=50, max_encoded_length=1500)

        assert groups == [["a"], ["x" * 2000], ["b"]]

    def test_empty_input(self):
        assert pack_titles([], max_titles=50, max_encoded_length=1500) == []


class TestBatchManagerFetch:
    """Fetch scheduling, pagination and exhaustion."""

    @pytest.mark.asyncio
    async def test_cursor_is_passed_back_verbatim(self):
        source = FakeLinkSource({"Hub": ["A", "B", "C"]}, page_size=1)
        manager = BatchManager(source, Direction.FORWARD)
        manager.add_articles(["Hub"])

        assert await manager.fetch() == {"Hub": ["A"]}
        assert await manager.fetch() == {"Hub": ["B"]}

        assert source.calls[0]["cursor"] is None
        assert source.calls[1]["cursor"] == source.calls[0]["returned_cursor"]
        assert manager.active_batches[0].cursor == source.calls[1]["returned_cursor"]

    @pytest.mark.asyncio
    async def test_exhausted_batch_leaves_rotation_and_fills_missing_titles(self):
        source = FakeLinkSource({"Hub": ["A", "B"]}, page_size=1)
        manager = BatchManager(source, Direction.FORWARD)
        manager.add_articles(["Hub", "Leaf"])

        first = await manager.fetch()
        assert first == {"Hub": ["A"]}
        assert manager.last_batch is manager.active_batches[0]

        last = await manager.fetch()
        assert last == {"Hub": ["B"], "Leaf": []}
        assert manager.no_desirable_batches()
        assert manager.complete()
        assert manager.last_batch is None

    @pytest.mark.asyncio
    async def test_batches_are_fetched_round_robin(self):
        graph = {"A": ["a1", "a2", "a3"], "B": ["b1", "b2", "b3"]}
        source = FakeLinkSource(graph, page_size=1)
        manager = BatchManager(source, Direction.FORWARD, SearchConfig(max_batch_titles=1))
        manager.add_articles(["A", "B"])

        for _ in range(4):
            await manager.fetch()

        assert [call["titles"] for call in source.calls] == [["A"], ["B"], ["A"], ["B"]]

    @pytest.mark.asyncio
    async def test_backward_direction_uses_backlinks(self):
        source = FakeLinkSource({"Parent": ["Child"]})
        manager = BatchManager(source, Direction.BACKWARD)
        manager.add_articles(["Child"])

        assert await manager.fetch() == {"Child": ["Parent"]}
        assert source.calls[0]["direction"] == "backward"

    @pytest.mark.asyncio
    async def test_concurrent_fetches_are_serialized(self):
        graph = {"A": ["a1", "a2"], "B": ["b1", "b2"]}
        source = FakeLinkSource(graph, page_size=1)
        manager = BatchManager(source, Direction.FORWARD, SearchConfig(max_batch_titles=1))
        manager.add_articles(["A", "B"])

        results = await asyncio.gather(manager.fetch(), manager.fetch(), manager.fetch())

        assert source.max_in_flight == 1
        assert len(source.calls) == 3
        assert results[0] == {"A": ["a1"]}
        assert results[1] == {"B": ["b1"]}
        assert manager.request_count == 3

    @pytest.mark.asyncio
    async def test_fetch_with_nothing_left_raises(self):
        manager = BatchManager(FakeLinkSource({}), Direction.FORWARD)

        assert manager.complete()
        with pytest.raises(NoDesirableBatches):
            await manager.fetch()

    @pytest.mark.asyncio
    async def test_parked_batch_is_revived_when_rotation_is_empty(self):
        source = FakeLinkSource({"Hub": ["A", "B"]}, page_size=1)
        manager = BatchManager(source, Direction.FORWARD)
        manager.add_articles(["Hub"])
        await manager.fetch()
        manager.mark_last_batch_undesirable()
        assert manager.no_desirable_batches() and not manager.complete()

        assert await manager.fetch() == {"Hub": ["B"]}
        assert source.calls[1]["cursor"] == source.calls[0]["returned_cursor"]
        assert manager.complete()

    @pytest.mark.asyncio
    async def test_transport_error_leaves_batch_untouched(self):
        source = FakeLinkSource({"Hub": ["A", "B"]}, page_size=1, fail_on_call=2)
        manager = BatchManager(source, Direction.FORWARD)
        manager.add_articles(["Hub"])
        await manager.fetch()
        cursor = manager.active_batches[0].cursor

        with pytest.raises(TransportError):
            await manager.fetch()

        assert len(manager.active_batches) == 1
        assert manager.active_batches[0].cursor == cursor


class TestBatchManagerDemotion:
    """Parking batches as undesirable."""

    @pytest.mark.asyncio
    async def test_mark_last_batch_undesirable(self):
        source = FakeLinkSource({"Hub": ["A", "B"]}, page_size=1)
        manager = BatchManager(source, Direction.FORWARD)
        manager.add_articles(["Hub"])
        await manager.fetch()

        manager.mark_last_batch_undesirable()
        assert manager.active_batches == []
        assert len(manager.undesirable_batches) == 1
        assert manager.no_desirable_batches()
        assert not manager.complete()

        # Idempotent once the candidate is cleared
        manager.mark_last_batch_undesirable()
        assert len(manager.undesirable_batches) == 1

    @pytest.mark.asyncio
    async def test_exhausted_batch_is_not_a_demotion_candidate(self):
        source = FakeLinkSource({"Hub": ["A"], "Other": ["B", "C"]}, page_size=5)
        manager = BatchManager(source, Direction.FORWARD, SearchConfig(max_batch_titles=1))
        manager.add_articles(["Hub", "Other"])
        await manager.fetch()

        manager.mark_last_batch_undesirable()

        assert manager.undesirable_batches == []
        assert [b.titles for b in manager.active_batches] == [["Other"]]

    def test_mark_without_fetch_is_noop(self):
        manager = BatchManager(FakeLinkSource({}), Direction.FORWARD)
        manager.add_articles(["A"])

        manager.mark_last_batch_undesirable()

        assert len(manager.active_batches) == 1
        assert manager.undesirable_batches == []

    def test_mark_all_batches_undesirable(self):
        manager = BatchManager(FakeLinkSource({}), Direction.FORWARD, SearchConfig(max_batch_titles=2))
        manager.add_articles(["A", "B", "C", "D", "E"])
        assert len(manager.active_batches) == 3

        manager.mark_all_batches_undesirable()

        assert manager.no_desirable_batches()
        assert manager.active_count == 0
        assert manager.undesirable_count == 3
        assert len(manager.undesirable_batches) == 3
        assert not manager.complete()
