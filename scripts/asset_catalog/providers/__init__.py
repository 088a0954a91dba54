"""
Asset providers for the catalog generators.
Filesystem capabilities: listing, sizes and image headers.
"""

from .base import (
    AssetProvider, AssetSnapshot, ImageInfo, FileInfo,
    probe_images, probe_sizes
)
from .local import LocalAssetProvider

__all__ = [
    "AssetProvider",
    "AssetSnapshot",
    "ImageInfo",
    "FileInfo",
    "probe_images",
    "probe_sizes",
    "LocalAssetProvider",
]
