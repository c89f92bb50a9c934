"""Exception hierarchy shared by the graph engine, crawler and CLI."""

from __future__ import annotations


class DepGraphError(Exception):
    """Base exception for depgraph operations."""
    pass


class InvalidInputError(DepGraphError):
    """Raised for an empty or malformed class name, before any fetch."""
    pass


class ProviderError(DepGraphError):
    """Raised when the class-metadata source cannot answer a request."""

    def __init__(self, message: str, name: str = ""):
        self.name = name
        super().__init__(message)


class CrawlAbortedError(DepGraphError):
    """Raised when a crawl was superseded by a newer one before committing."""

    def __init__(self, generation: int, current: int):
        self.generation = generation
        self.current = current
        super().__init__(f"Crawl {generation} superseded by crawl {current}")


class NavigationError(DepGraphError):
    """Raised for focus/back/clear requests that the current state can't honour."""
    pass


class GraphFormatError(DepGraphError):
    """Raised when an imported graph document is malformed."""
    pass


class ProviderNotConfiguredError(DepGraphError):
    """Raised when a crawl or lookup is requested on a session without a provider."""
    pass
