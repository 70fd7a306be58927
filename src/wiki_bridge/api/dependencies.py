from fastapi import Request

from wiki_bridge.config import SearchConfig
from wiki_bridge.wikipedia import LinkSource


async def get_link_source(request: Request) -> LinkSource:
    """Dependency provider to get the shared LinkSource instance."""
    return request.app.state.link_source


async def get_search_config(request: Request) -> SearchConfig:
    """Dependency provider to get the search configuration."""
    return request.app.state.search_config
