"""Catalog-specific exceptions for error handling."""

from typing import Optional


class CatalogError(Exception):
    """Base exception for catalog operations."""

    pass


class CatalogUnavailable(CatalogError):
    """Raised when the catalog cannot be reached or returns an unusable response."""

    pass


class EmptyCatalog(CatalogError):
    """Raised when the catalog answered but there is nothing to play."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message or "No tracks found. Please add some music files to the library."
        )
