"""
MediaWiki API link source.
Fetches one page of links or backlinks per call, handing the API's
continuation object back to the caller as an opaque cursor.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from wiki_bridge.config import WikiConfig
from wiki_bridge.exceptions import TransportError
from wiki_bridge.models import LinkPage
from wiki_bridge.utils.wiki_helpers import build_article_url, join_titles
from wiki_bridge.wikipedia.link_source import LinkSource

logger = logging.getLogger(__name__)

# The API refuses more titles than this in a single query
MAX_TITLES_PER_QUERY = 50


class MediaWikiLinkSource(LinkSource):
    """
    LinkSource backed by a MediaWiki api.php endpoint.

    Key constraints:
    - Max 50 titles per request
    - Serial requests only (guarded by a lock)
    - Pagination through the 'continue' object, returned as the cursor
    - No retries: any failure raises TransportError
    """

    def __init__(self, config: Optional[WikiConfig] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config or WikiConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._lock = asyncio.Lock()
        self.request_count = 0

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            headers={"User-Agent": self.config.user_agent, "Accept-Encoding": "gzip"},
            timeout=self.config.timeout_seconds,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the HTTP client if not using the context manager."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _make_request(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Make a single API request. Only one request is ever in flight."""
        if not self._client:
            raise RuntimeError("Link source not initialized. Use 'async with' context manager.")

        params = {"action": "query", "format": "json", "formatversion": "2", **params}

        async with self._lock:
            self.request_count += 1
            logger.debug(f"API request #{self.request_count}: {params}")
            try:
                response = await self._client.get(self.config.api_url, params=params)
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPError as e:
                logger.error(f"Request to {self.config.hostname} failed: {e}")
                raise TransportError(f"MediaWiki API request failed: {e}") from e
            except ValueError as e:
                raise TransportError(f"MediaWiki API returned invalid JSON: {e}") from e

        if "error" in data:
            info = data["error"].get("info", data["error"])
            raise TransportError(f"MediaWiki API error: {info}")
        return data

    async def fetch_forward_links(self, titles: List[str], cursor: Optional[Any] = None) -> LinkPage:
        params = {
            "prop": "links",
            "titles": join_titles(titles),
            "pllimit": "max",
            "plnamespace": "0",
        }
        return await self._fetch_link_page(params, "links", cursor)

    async def fetch_backward_links(self, titles: List[str], cursor: Optional[Any] = None) -> LinkPage:
        params = {
            "prop": "linkshere",
            "titles": join_titles(titles),
            "lhlimit": "max",
            "lhprop": "title",
            "lhshow": "!redirect",
            "lhnamespace": "0",
        }
        return await self._fetch_link_page(params, "linkshere", cursor)

    async def _fetch_link_page(self, params: Dict[str, Any], link_property: str, cursor: Optional[Any]) -> LinkPage:
        if cursor:
            params.update(cursor)

        data = await self._make_request(params)

        link_map: Dict[str, List[str]] = {}
        for page in data.get("query", {}).get("pages", []):
            if link_property not in page:
                continue
            link_map[page["title"]] = [link["title"] for link in page[link_property]]

        next_cursor = data.get("continue")
        logger.debug(f"Got {link_property} for {len(link_map)} pages (more: {next_cursor is not None})")
        return LinkPage(link_map=link_map, cursor=next_cursor)

    async def resolve_titles(self, titles: List[str]) -> Dict[str, str]:
        """
        Resolve normalization and redirects for multiple titles.
        Returns: {input_title: canonical_title}
        """
        resolved = {}

        for i in range(0, len(titles), MAX_TITLES_PER_QUERY):
            batch = titles[i:i + MAX_TITLES_PER_QUERY]
            data = await self._make_request({"titles": join_titles(batch), "redirects": "1", "prop": "info"})
            query = data.get("query", {})

            renames = {}
            for norm in query.get("normalized", []):
                renames[norm["from"]] = norm["to"]
            redirects = {r["from"]: r["to"] for r in query.get("redirects", [])}

            for title in batch:
                canonical = renames.get(title, title)
                resolved[title] = redirects.get(canonical, canonical)

            for page in query.get("pages", []):
                if page.get("missing"):
                    logger.warning(f"Page does not exist on {self.config.hostname}: '{page.get('title')}'")

        return resolved

    def article_url(self, title: str) -> str:
        return build_article_url(self.config.hostname, title)
