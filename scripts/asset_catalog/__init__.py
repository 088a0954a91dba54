"""
Asset Catalog Generator

Scans a directory of game assets and emits typed TypeScript modules that expose
textures and sounds as a nested, statically-typed catalog. Optionally packs
images into a spritesheet and sounds into an audio sprite.
"""

__version__ = "0.1.0"

from .config import CatalogConfig
from .errors import (
    CatalogError, DuplicateAssetKey, DuplicateIdentifier, DecodeFailure,
    NoCandidateForSprite, PackingFailure, ConfigurationError
)
from .pipeline import CatalogPipeline, CatalogResult

__all__ = [
    "CatalogConfig",
    "CatalogPipeline",
    "CatalogResult",
    "CatalogError",
    "DuplicateAssetKey",
    "DuplicateIdentifier",
    "DecodeFailure",
    "NoCandidateForSprite",
    "PackingFailure",
    "ConfigurationError",
]
