"""
Custom exceptions for the wiki_bridge search engine.
"""

class WikiBridgeException(Exception):
    """Base exception for the application."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class TransportError(WikiBridgeException):
    """Raised when a link source fetch fails. Never retried."""
    pass

class DeadEnd(WikiBridgeException):
    """Raised when a tree has nothing left to explore and no collision was found."""
    pass

class NoDesirableBatches(WikiBridgeException):
    """Raised when a BatchManager is asked to fetch with no batches left at all."""
    pass

class InvalidTitle(WikiBridgeException):
    """Raised when a title is looked up in a tree that never inserted it."""
    def __init__(self, title: str):
        self.title = title
        super().__init__(f"'{title}' is not in the exploration tree")
