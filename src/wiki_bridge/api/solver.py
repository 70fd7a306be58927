import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from wiki_bridge.api.dependencies import get_link_source, get_search_config
from wiki_bridge.config import SearchConfig
from wiki_bridge.exceptions import TransportError
from wiki_bridge.models import FailureReason, SolveRequest, SolveResponse
from wiki_bridge.search import BidirectionalSolver
from wiki_bridge.wikipedia import LinkSource

router = APIRouter(prefix="/api/solver", tags=["solver"])
logger = logging.getLogger(__name__)


@router.post("/path", response_model=SolveResponse)
async def find_path(
    request: SolveRequest,
    link_source: LinkSource = Depends(get_link_source),
    search_config: SearchConfig = Depends(get_search_config),
) -> SolveResponse:
    """
    Find a chain of links from the start page to the target page.

    Grows a forward tree from the start page and a backlink tree from the
    target page until they meet.
    """
    start, target = request.start_page, request.target_page

    try:
        canonical = await link_source.resolve_titles([start, target])
    except TransportError as e:
        logger.error(f"Title resolution failed: {e.message}")
        raise HTTPException(status_code=502, detail=e.message)
    start, target = canonical[start], canonical[target]

    response = await BidirectionalSolver(link_source, search_config).solve(start, target)

    if response.failure == FailureReason.TRANSPORT_ERROR:
        raise HTTPException(status_code=502, detail=f"Link request failed: {response.error_message}")
    if response.failure == FailureReason.DEAD_END:
        raise HTTPException(status_code=404, detail=f"No path found: {response.error_message}")

    logger.info(
        f"Path found: {start} -> {target} "
        f"({response.path_length} steps, {response.request_count} requests, {response.computation_time_ms:.1f}ms)"
    )
    return response


@router.get("/health")
async def health() -> Dict[str, Any]:
    return {"status": "ok"}
