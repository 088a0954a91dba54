"""
Utility modules for path handling and identifier synthesis.
"""

from .naming import (
    camelize, lower_camelize, sanitize, import_name,
    category_path, category_segments, ensure_unique
)

__all__ = [
    "camelize",
    "lower_camelize",
    "sanitize",
    "import_name",
    "category_path",
    "category_segments",
    "ensure_unique",
]
