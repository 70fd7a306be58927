"""
One direction of the bidirectional search.

The tree is stored flat: a title -> parent map plus side maps for depth and
the fringe. Titles are only ever added, and their parent and depth never
change after insertion.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Set

from wiki_bridge.config import SearchConfig
from wiki_bridge.exceptions import DeadEnd, InvalidTitle
from wiki_bridge.models import Direction
from wiki_bridge.search.batching import BatchManager
from wiki_bridge.wikipedia.link_source import LinkSource

logger = logging.getLogger(__name__)


class ExplorationTree:
    """Frontier grown from a single root title by following links in one direction."""

    def __init__(
        self,
        root_title: str,
        direction: Direction,
        link_source: LinkSource,
        config: Optional[SearchConfig] = None,
    ):
        self.root_title = root_title
        self.direction = direction
        self.config = config or SearchConfig()

        self.parents: Dict[str, Optional[str]] = {root_title: None}  # root has no parent
        self.depths: Dict[str, int] = {root_title: 0}
        self.fringe: Set[str] = {root_title}
        self.layer_sizes: List[int] = [1]
        self.size = 1

        # Inserted titles waiting to be packaged into batches
        self.to_explore: List[str] = []
        self.consecutive_low_yield = 0

        self.batches = BatchManager(link_source, direction, self.config)
        self.batches.add_articles([root_title])

        self._explore_lock = asyncio.Lock()

    @property
    def fringe_size(self) -> int:
        return len(self.fringe)

    async def explore(self) -> List[str]:
        """
        Expand the tree by one page of links.

        Returns:
            Titles inserted by this step, in insertion order

        Raises:
            DeadEnd: nothing left to fetch in this direction
            TransportError: the link source failed
        """
        async with self._explore_lock:
            if self.batches.no_desirable_batches():
                self.diversify()

            if self.batches.complete():
                raise DeadEnd(f"Ran into a dead end exploring the {self.direction.value} tree from '{self.root_title}'")

            link_map = await self.batches.fetch()

            new_titles: List[str] = []
            for parent, children in link_map.items():
                if parent not in self.parents:
                    logger.warning(f"{self.direction.value}: ignoring links for unknown title '{parent}'")
                    continue

                self.fringe.discard(parent)
                child_depth = self.depths[parent] + 1

                for child in children:
                    if child in self.parents:
                        continue
                    self._insert(child, parent, child_depth)
                    new_titles.append(child)

            self._apply_yield_policy(len(new_titles))
            return new_titles

    def _insert(self, title: str, parent: str, depth: int):
        self.parents[title] = parent
        self.depths[title] = depth
        self.fringe.add(title)
        self.to_explore.append(title)

        while len(self.layer_sizes) <= depth:
            self.layer_sizes.append(0)
        self.layer_sizes[depth] += 1
        self.size += 1

    def _apply_yield_policy(self, new_count: int):
        if new_count >= self.config.low_yield_threshold:
            self.consecutive_low_yield = 0
            return

        self.batches.mark_last_batch_undesirable()
        self.consecutive_low_yield += 1

        if self.consecutive_low_yield >= self.config.low_yield_limit:
            logger.debug(f"{self.direction.value}: {self.consecutive_low_yield} low-yield steps in a row, parking all batches")
            self.consecutive_low_yield = 0
            self.batches.mark_all_batches_undesirable()

    def diversify(self):
        """Package every queued title into fresh batches."""
        logger.info(f"{self.direction.value} injecting {len(self.to_explore)} titles")
        self.batches.add_articles(self.to_explore)
        self.to_explore = []

    def contains_page(self, title: str) -> bool:
        return title in self.parents

    def depth_of(self, title: str) -> int:
        if title not in self.depths:
            raise InvalidTitle(title)
        return self.depths[title]

    def path_to_root(self, title: str) -> List[str]:
        """Ancestors of title, nearest parent first, ending with the root title."""
        if not self.contains_page(title):
            raise InvalidTitle(title)

        path = []
        while self.parents[title] is not None:
            title = self.parents[title]
            path.append(title)
        return path
