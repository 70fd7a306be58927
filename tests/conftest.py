"""
Pytest configuration and shared fixtures.
"""

import logging
from typing import Dict, List

import pytest

from tests.fakes import FakeLinkSource

# Configure logging for tests
logging.basicConfig(level=logging.INFO)


@pytest.fixture
def penguin_graph() -> Dict[str, List[str]]:
    """Forward links between Hydrogen and Penguin with a couple of detours."""
    return {
        "Hydrogen": ["Algae", "Water", "Star"],
        "Water": ["Ocean"],
        "Star": ["Sun"],
        "Algae": ["Marine biology", "Photosynthesis"],
        "Marine biology": ["Penguin", "Whale"],
        "Ocean": ["Whale"],
        "Whale": ["Krill"],
    }


@pytest.fixture
def penguin_source(penguin_graph) -> FakeLinkSource:
    return FakeLinkSource(penguin_graph)
