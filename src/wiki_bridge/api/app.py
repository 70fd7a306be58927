import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from wiki_bridge.api.solver import router as solver_router
from wiki_bridge.config import ApiConfig, SearchConfig, WikiConfig
from wiki_bridge.logging_config import setup_logging
from wiki_bridge.wikipedia import LinkSource, MediaWikiLinkSource

logger = logging.getLogger(__name__)


def create_app(
    link_source: Optional[LinkSource] = None,
    search_config: Optional[SearchConfig] = None,
) -> FastAPI:
    """
    Build the HTTP API.

    Args:
        link_source: Link source shared by every request. If None, a
            MediaWikiLinkSource configured from the environment is opened for
            the lifetime of the application.
        search_config: Batching and yield policy. If None, read from the environment.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.search_config = search_config or SearchConfig.from_env()
        if link_source is not None:
            app.state.link_source = link_source
            yield
            return

        wiki_config = WikiConfig.from_env()
        logger.info(f"Opening MediaWiki link source for {wiki_config.hostname}")
        async with MediaWikiLinkSource(wiki_config) as source:
            app.state.link_source = source
            yield
        logger.info("MediaWiki link source closed")

    app = FastAPI(title="wiki_bridge", lifespan=lifespan)
    app.include_router(solver_router)
    return app


def run():
    """Serve the API with uvicorn using settings from the environment."""
    config = ApiConfig.from_env()
    setup_logging(level=config.log_level)
    uvicorn.run(create_app(), host=config.host, port=config.port, log_config=None)
