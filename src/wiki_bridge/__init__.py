"""
wiki_bridge - find a chain of links between two wiki articles.

Two exploration trees, one following links forward from the start article and
one following backlinks from the target, are grown a page of links at a time
until they meet.
"""

from .exceptions import WikiBridgeException, TransportError, DeadEnd, InvalidTitle
from .models import Direction, LinkPage, SolveResponse
from .search import BidirectionalSolver, solve

__all__ = [
    "WikiBridgeException",
    "TransportError",
    "DeadEnd",
    "InvalidTitle",
    "Direction",
    "LinkPage",
    "SolveResponse",
    "BidirectionalSolver",
    "solve",
]
