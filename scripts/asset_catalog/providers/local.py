"""
Local filesystem asset provider.
"""

import os
from typing import List, Tuple

from PIL import Image, UnidentifiedImageError

from ..errors import ConfigurationError, DecodeFailure
from ..utils.naming import normalize_path
from .base import AssetProvider


class LocalAssetProvider(AssetProvider):
    """Reads assets straight from disk."""

    def list_all_files(self, root: str) -> List[str]:
        if not os.path.isdir(root):
            raise ConfigurationError(f"Asset directory not found: {root}", [root])

        files = []
        for dirpath, dirnames, filenames in os.walk(root):
            # Sort in place so os.walk descends in a stable order
            dirnames.sort()
            for filename in sorted(filenames):
                files.append(normalize_path(os.path.join(dirpath, filename)))
        return files

    def stat_size(self, path: str) -> int:
        try:
            return os.stat(path).st_size
        except OSError as e:
            raise DecodeFailure(path, f"cannot stat file: {e}")

    def read_image_dimensions(self, path: str) -> Tuple[int, int]:
        try:
            # Image.open only parses the header until pixel data is requested
            with Image.open(path) as image:
                return image.size
        except (UnidentifiedImageError, OSError) as e:
            raise DecodeFailure(path, str(e))
