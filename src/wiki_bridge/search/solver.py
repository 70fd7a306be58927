"""
Bidirectional search orchestration.

Grows a forward tree from the start title and a backward tree from the end
title, always expanding the one with the smaller fringe, until a single
expansion step inserts a title the other tree already holds.
"""

import inspect
import logging
import time
from typing import Awaitable, Callable, List, Optional, Tuple, Union

from wiki_bridge.config import SearchConfig
from wiki_bridge.exceptions import DeadEnd, TransportError
from wiki_bridge.models import Direction, FailureReason, SearchProgress, SolveResponse
from wiki_bridge.search.tree import ExplorationTree
from wiki_bridge.utils.wiki_helpers import format_path
from wiki_bridge.wikipedia.link_source import LinkSource

logger = logging.getLogger(__name__)

# (forward_size, forward_histogram, backward_size, backward_histogram, solved)
ProgressCallback = Callable[[int, List[int], int, List[int], bool], Union[None, Awaitable[None]]]


class BidirectionalSolver:
    """
    Finds a path between two articles using as few link requests as possible.

    The collision chosen is the shortest among those found in the same
    expansion step; it is not guaranteed to be the globally shortest path.
    """

    def __init__(self, link_source: LinkSource, config: Optional[SearchConfig] = None):
        self.link_source = link_source
        self.config = config or SearchConfig()
        self.forward_tree: Optional[ExplorationTree] = None
        self.backward_tree: Optional[ExplorationTree] = None

    async def find_path(
        self,
        start: str,
        end: str,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> List[str]:
        """
        Find a path from start to end.

        Returns:
            Titles from start to end, inclusive

        Raises:
            DeadEnd: one side ran out of links to follow
            TransportError: a link request failed
        """
        if start == end:
            return [start]

        forward = ExplorationTree(start, Direction.FORWARD, self.link_source, self.config)
        backward = ExplorationTree(end, Direction.BACKWARD, self.link_source, self.config)
        self.forward_tree, self.backward_tree = forward, backward

        collision = None
        steps = 0
        while collision is None:
            await self._report(progress_callback, solved=False)

            if forward.fringe_size <= backward.fringe_size:
                explore_tree, compare_tree = forward, backward
            else:
                explore_tree, compare_tree = backward, forward

            new_titles = await explore_tree.explore()
            steps += 1
            logger.debug(
                f"Step {steps}: {explore_tree.direction.value} +{len(new_titles)} titles, "
                f"fringe size = {explore_tree.fringe_size}"
            )

            collision = self._best_collision(new_titles, compare_tree)

        await self._report(progress_callback, solved=True)

        path = list(reversed(forward.path_to_root(collision))) + [collision] + backward.path_to_root(collision)
        logger.info(f"Collision at '{collision}' after {steps} steps: {format_path(path)}")
        return path

    def _best_collision(self, new_titles: List[str], compare_tree: ExplorationTree) -> Optional[str]:
        best: Optional[Tuple[int, str]] = None
        for title in new_titles:
            if not compare_tree.contains_page(title):
                continue
            distance = len(self.forward_tree.path_to_root(title)) + len(self.backward_tree.path_to_root(title))
            if best is None or distance < best[0]:
                best = (distance, title)
        return best[1] if best else None

    def progress(self, solved: bool = False) -> Optional[SearchProgress]:
        """Snapshot of both trees, or None before a search has started."""
        if self.forward_tree is None or self.backward_tree is None:
            return None
        return SearchProgress(
            forward_size=self.forward_tree.size,
            forward_histogram=list(self.forward_tree.layer_sizes),
            backward_size=self.backward_tree.size,
            backward_histogram=list(self.backward_tree.layer_sizes),
            solved=solved,
        )

    async def _report(self, progress_callback: Optional[ProgressCallback], solved: bool):
        if progress_callback is None:
            return
        snapshot = self.progress(solved)
        result = progress_callback(
            snapshot.forward_size,
            snapshot.forward_histogram,
            snapshot.backward_size,
            snapshot.backward_histogram,
            snapshot.solved,
        )
        if inspect.isawaitable(result):
            await result

    @property
    def request_count(self) -> int:
        return sum(
            tree.batches.request_count
            for tree in (self.forward_tree, self.backward_tree)
            if tree is not None
        )

    async def solve(
        self,
        start: str,
        end: str,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> SolveResponse:
        """
        Find a path and report the outcome without raising for "no path found".

        Dead ends and transport failures both come back as a response without
        a path; the failure field tells them apart.
        """
        start_time = time.time()
        logger.info(f"Finding path from '{start}' to '{end}'")

        path = None
        failure = None
        error_message = None
        try:
            path = await self.find_path(start, end, progress_callback)
        except DeadEnd as e:
            logger.warning(f"No path found, dead end: {e.message}")
            failure, error_message = FailureReason.DEAD_END, e.message
        except TransportError as e:
            logger.error(f"No path found, link request failed: {e.message}")
            failure, error_message = FailureReason.TRANSPORT_ERROR, e.message

        elapsed_ms = (time.time() - start_time) * 1000
        logger.info(f"Search finished in {elapsed_ms:.1f}ms using {self.request_count} requests")

        return SolveResponse(
            start_page=start,
            target_page=end,
            path=path,
            path_length=len(path) - 1 if path else None,
            failure=failure,
            error_message=error_message,
            request_count=self.request_count,
            computation_time_ms=elapsed_ms,
        )


async def solve(
    link_source: LinkSource,
    start: str,
    end: str,
    progress_callback: Optional[ProgressCallback] = None,
    config: Optional[SearchConfig] = None,
) -> SolveResponse:
    """Convenience wrapper running one search with a fresh solver."""
    return await BidirectionalSolver(link_source, config).solve(start, end, progress_callback)
