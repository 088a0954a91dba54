"""
Abstract base class for asset providers.
Defines the filesystem capabilities the catalog generators consume, plus the
run snapshot and concurrent metadata probing built on top of them.
"""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

from ..utils.naming import extension, normalize_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageInfo:
    """Reported metadata for one image file."""
    path: str
    width: int
    height: int
    size: int


@dataclass(frozen=True)
class FileInfo:
    """Reported metadata for a non-image asset file."""
    path: str
    size: int


class AssetProvider(ABC):
    """Abstract base class for asset providers."""

    @abstractmethod
    def list_all_files(self, root: str) -> List[str]:
        """
        Return every file below root, recursively.

        Order must be stable across repeated calls on an unchanged tree.
        """
        pass

    @abstractmethod
    def stat_size(self, path: str) -> int:
        """Return the byte size of a file."""
        pass

    @abstractmethod
    def read_image_dimensions(self, path: str) -> Tuple[int, int]:
        """
        Return (width, height) from the image header.

        Raises:
            DecodeFailure: If the file cannot be read as an image
        """
        pass


@dataclass(frozen=True)
class AssetSnapshot:
    """
    Immutable list of asset paths captured once at the start of a run.
    Every later stage works from this list instead of re-reading directories.
    """
    root: str
    paths: Tuple[str, ...]

    @classmethod
    def capture(cls, provider: AssetProvider, root: str, extensions: Iterable[str]) -> "AssetSnapshot":
        """
        List the asset root once and keep files with an allowed extension.

        Args:
            provider: Filesystem capability
            root: Asset root directory
            extensions: Allowed extensions including the dot, compared case-insensitively
        """
        allowed = {ext.lower() for ext in extensions}
        files = [normalize_path(p) for p in provider.list_all_files(root)]
        selected = tuple(p for p in files if extension(p) in allowed)
        logger.info(f"Discovered {len(selected)} of {len(files)} files in {root}")
        return cls(normalize_path(root), selected)

    def __len__(self) -> int:
        return len(self.paths)


def probe_images(provider: AssetProvider, paths: Sequence[str], workers: int = 8) -> Dict[str, ImageInfo]:
    """
    Read dimensions and size of every image.

    Probes run concurrently; the result is only returned once all of them
    have finished, keyed by path in input order. The first failure propagates.
    """
    def probe(path: str) -> ImageInfo:
        width, height = provider.read_image_dimensions(path)
        size = provider.stat_size(path)
        logger.debug(f"Probed {path}: {width}x{height}, {size} bytes")
        return ImageInfo(path, width, height, size)

    with ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
        results = list(executor.map(probe, paths))
    return {info.path: info for info in results}


def probe_sizes(provider: AssetProvider, paths: Sequence[str], workers: int = 8) -> Dict[str, FileInfo]:
    """Byte size of every file, probed concurrently."""
    def probe(path: str) -> FileInfo:
        return FileInfo(path, provider.stat_size(path))

    with ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
        results = list(executor.map(probe, paths))
    return {info.path: info for info in results}
