from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from wiki_bridge.models import Direction, LinkPage


class LinkSource(ABC):
    """
    Abstract capability to fetch one page of links for a batch of titles.

    Implementations must not be driven concurrently; the search engine issues
    at most one request at a time. Failures are raised as TransportError.
    """

    @abstractmethod
    async def fetch_forward_links(self, titles: List[str], cursor: Optional[Any] = None) -> LinkPage:
        """Fetch pages that the given titles link to."""
        pass

    @abstractmethod
    async def fetch_backward_links(self, titles: List[str], cursor: Optional[Any] = None) -> LinkPage:
        """Fetch pages that link to the given titles."""
        pass

    async def fetch_links(self, direction: Direction, titles: List[str], cursor: Optional[Any] = None) -> LinkPage:
        if direction == Direction.FORWARD:
            return await self.fetch_forward_links(titles, cursor)
        return await self.fetch_backward_links(titles, cursor)

    async def resolve_titles(self, titles: List[str]) -> Dict[str, str]:
        """
        Map each input title to the canonical title searches should use.
        Sources without normalization or redirects return titles unchanged.
        """
        return {title: title for title in titles}
