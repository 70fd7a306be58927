"""
Data models shared by the search engine, the link sources and the API.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Annotated

from pydantic import BaseModel, Field, field_validator


class Direction(str, Enum):
    """Which way links are followed when expanding a tree."""
    FORWARD = "forward"    # pages the title links to
    BACKWARD = "backward"  # pages linking to the title


class FailureReason(str, Enum):
    DEAD_END = "dead_end"
    TRANSPORT_ERROR = "transport_error"


LinkMap = Dict[str, List[str]]


class LinkPage(BaseModel):
    """One page of links returned by a single remote request."""
    link_map: LinkMap = Field(default_factory=dict, description="Parent title -> ordered child titles (parents with no links on this page are omitted)")
    cursor: Optional[Any] = Field(None, description="Opaque continuation token; None once the batch is fully paged")


class SearchProgress(BaseModel):
    """Snapshot of both trees, reported after every expansion step."""
    forward_size: int
    forward_histogram: List[int]
    backward_size: int
    backward_histogram: List[int]
    solved: bool = False


class SolveRequest(BaseModel):
    """Request model for finding a connecting path."""
    start_page: Annotated[str, Field(min_length=1)] = Field(..., description="Starting article title")
    target_page: Annotated[str, Field(min_length=1)] = Field(..., description="Target article title")

    @field_validator("start_page", "target_page")
    @classmethod
    def titles_must_be_non_blank(cls, v: str):
        if not v.strip():
            raise ValueError("Page titles must be non-empty")
        return v.strip()


class SolveResponse(BaseModel):
    """Result of a search, successful or not."""
    start_page: str
    target_page: str
    path: Optional[List[str]] = Field(None, description="Titles from start to target, None when no path was found")
    path_length: Optional[int] = Field(None, description="Number of links followed along the path")
    failure: Optional[FailureReason] = Field(None, description="Why no path was found")
    error_message: Optional[str] = None
    request_count: int = Field(0, description="Remote link requests issued by both trees")
    computation_time_ms: float = Field(..., description="Wall time spent searching in milliseconds")

    @property
    def found(self) -> bool:
        return self.path is not None
