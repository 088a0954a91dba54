"""
Exception hierarchy for catalog generation.
Every error is fatal to a run and carries the offending paths and category.
"""

from typing import Optional, Sequence


class CatalogError(Exception):
    """Base exception for catalog generation errors."""

    def __init__(self, message: str, paths: Sequence[str] = (), category: Optional[str] = None):
        super().__init__(message)
        self.paths = list(paths)
        self.category = category

    def describe(self) -> str:
        """Return the message together with its path and category context."""
        parts = [str(self)]
        if self.category:
            parts.append(f"category: {self.category}")
        for path in self.paths:
            parts.append(f"path: {path}")
        return "\n  ".join(parts)


class DuplicateAssetKey(CatalogError):
    """Two input files resolve to the same leaf key within one parent."""

    def __init__(self, key: str, paths: Sequence[str], category: Optional[str] = None):
        joined = ", ".join(paths)
        super().__init__(f"Duplicate asset key '{key}': {joined}", paths, category)
        self.key = key


class DuplicateIdentifier(CatalogError):
    """Distinct names sanitize to the same generated identifier."""

    def __init__(self, identifier: str, sources: Sequence[str], category: Optional[str] = None):
        joined = ", ".join(sources)
        super().__init__(f"Duplicate identifier '{identifier}' generated from: {joined}", sources, category)
        self.identifier = identifier


class DecodeFailure(CatalogError):
    """Image or audio metadata could not be read."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot decode '{path}': {reason}", [path])
        self.reason = reason


class NoCandidateForSprite(CatalogError):
    """A sound group has no file usable as audio sprite input."""

    def __init__(self, basename: str, paths: Sequence[str], category: Optional[str] = None):
        super().__init__(f"No sprite candidate for sound '{basename}'", paths, category)
        self.basename = basename


class PackingFailure(CatalogError):
    """The packer could not place every rectangle."""


class ConfigurationError(CatalogError):
    """Configuration is invalid."""
