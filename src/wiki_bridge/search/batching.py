"""
Batching and pagination of link requests for one search direction.

Titles are packed into batches that fit a single API request. Batches are
fetched round-robin, one page at a time, and a batch stays in rotation until
its cursor runs out or it is parked as undesirable.
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, List, Optional

from wiki_bridge.config import SearchConfig
from wiki_bridge.exceptions import NoDesirableBatches
from wiki_bridge.models import Direction, LinkMap
from wiki_bridge.utils.wiki_helpers import SEPARATOR_ENCODED_LENGTH, encode_uri_component
from wiki_bridge.wikipedia.link_source import LinkSource

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Batch:
    """Titles queried together in one request, plus where the last page left off."""
    titles: List[str] = field(default_factory=list)
    cursor: Optional[Any] = None
    pages_fetched: int = 0


def pack_titles(titles: List[str], max_titles: int, max_encoded_length: int) -> List[List[str]]:
    """
    Greedily pack titles into groups, preserving order.

    Each group holds at most max_titles titles and its pipe-joined,
    percent-encoded form stays under max_encoded_length characters. A title
    too long to share a group is placed in a group of its own.
    """
    groups: List[List[str]] = []
    current: List[str] = []
    current_length = 0

    for title in titles:
        title_length = len(encode_uri_component(title))
        if current:
            added = SEPARATOR_ENCODED_LENGTH + title_length
            if len(current) < max_titles and current_length + added < max_encoded_length:
                current.append(title)
                current_length += added
                continue
            groups.append(current)
        current = [title]
        current_length = title_length

    if current:
        groups.append(current)
    return groups


class BatchManager:
    """
    Serializes link fetches for one direction against a LinkSource.

    Active batches are fetched in cyclic order. A batch that keeps returning
    pages stays active with its new cursor; a fully paged batch leaves the
    rotation. Batches parked as undesirable only come back when nothing else
    is left to fetch.
    """

    def __init__(self, link_source: LinkSource, direction: Direction, config: Optional[SearchConfig] = None):
        self.link_source = link_source
        self.direction = direction
        self.config = config or SearchConfig()

        self._active: Deque[Batch] = deque()
        self._undesirable: List[Batch] = []
        # Most recently fetched batch that is still active (demotion target)
        self._last_batch: Optional[Batch] = None

        self._lock = asyncio.Lock()
        self.request_count = 0

    @property
    def active_batches(self) -> List[Batch]:
        return list(self._active)

    @property
    def undesirable_batches(self) -> List[Batch]:
        return list(self._undesirable)

    @property
    def last_batch(self) -> Optional[Batch]:
        return self._last_batch

    @property
    def active_count(self) -> int:
        return len(self._active)

    @property
    def undesirable_count(self) -> int:
        return len(self._undesirable)

    def add_articles(self, titles: List[str]) -> List[Batch]:
        """Package titles into new batches at the end of the active rotation."""
        new_batches = [
            Batch(titles=group)
            for group in pack_titles(list(titles), self.config.max_batch_titles, self.config.max_encoded_length)
        ]
        self._active.extend(new_batches)
        if new_batches:
            logger.debug(f"{self.direction.value}: queued {len(titles)} titles in {len(new_batches)} batches")
        return new_batches

    async def fetch(self) -> LinkMap:
        """
        Fetch the next page of links for the next batch in rotation.

        Callers arriving while a fetch is outstanding wait for it to finish
        and then perform their own fetch.
        """
        async with self._lock:
            if self.complete():
                raise NoDesirableBatches(f"No {self.direction.value} batches left to fetch")

            if not self._active:
                revived = self._undesirable.pop()
                logger.debug(f"{self.direction.value}: reviving parked batch of {len(revived.titles)} titles")
                self._active.append(revived)

            batch = self._active[0]
            self.request_count += 1
            page = await self.link_source.fetch_links(self.direction, batch.titles, batch.cursor)
            batch.pages_fetched += 1

            link_map = dict(page.link_map)
            in_rotation = self._remove_active(batch)

            if page.cursor is not None:
                batch.cursor = page.cursor
                if in_rotation:
                    self._active.append(batch)
                    self._last_batch = batch
            else:
                # Fully paged: whatever is still missing has no links at all
                for title in batch.titles:
                    link_map.setdefault(title, [])
                self._last_batch = None
                logger.debug(
                    f"{self.direction.value}: batch of {len(batch.titles)} titles exhausted "
                    f"after {batch.pages_fetched} pages"
                )

            return link_map

    def _remove_active(self, batch: Batch) -> bool:
        try:
            self._active.remove(batch)
        except ValueError:
            return False
        return True

    def mark_last_batch_undesirable(self):
        """Park the most recently fetched batch if it is still active."""
        if self._last_batch is None:
            return
        if self._remove_active(self._last_batch):
            self._undesirable.append(self._last_batch)
        self._last_batch = None

    def mark_all_batches_undesirable(self):
        """Park every active batch."""
        logger.debug(f"{self.direction.value}: parking all {len(self._active)} active batches")
        self._undesirable.extend(self._active)
        self._active.clear()
        self._last_batch = None

    def complete(self) -> bool:
        return not self._active and not self._undesirable

    def no_desirable_batches(self) -> bool:
        return not self._active
