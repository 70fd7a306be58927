# Bidirectional exploration engine

from .batching import Batch, BatchManager, pack_titles
from .tree import ExplorationTree
from .solver import BidirectionalSolver, ProgressCallback, solve

__all__ = [
    "Batch",
    "BatchManager",
    "pack_titles",
    "ExplorationTree",
    "BidirectionalSolver",
    "ProgressCallback",
    "solve",
]
