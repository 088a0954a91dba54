"""
Identifier synthesis for generated catalog source.
Turns path and category strings into readable, valid identifiers.
"""

import posixpath
import re
from typing import Dict, Iterable, List, Tuple

from ..errors import DuplicateIdentifier


_WORD_SPLIT = re.compile(r"[^A-Za-z0-9]+")
_IMPORT_UNSAFE = re.compile(r"[^A-Za-z0-9]")


def normalize_path(path: str) -> str:
    """Normalize a path to forward slashes so equality holds across platforms."""
    return posixpath.normpath(str(path).replace("\\", "/"))


def camelize(raw: str) -> str:
    """Upper camel case: split on non-alphanumerics, capitalise each word, join."""
    words = [word for word in _WORD_SPLIT.split(raw) if word]
    return "".join(word[0].upper() + word[1:] for word in words)


def lower_camelize(raw: str) -> str:
    """Lower camel case variant of camelize."""
    camelized = camelize(raw)
    return camelized[:1].lower() + camelized[1:]


def to_identifier(raw: str) -> str:
    """Upper camel case identifier, prefixed when it would start with a digit."""
    return _guard_leading_digit(camelize(raw))


def to_field_name(raw: str) -> str:
    """Lower camel case field name, prefixed when it would start with a digit."""
    return _guard_leading_digit(lower_camelize(raw))


def sanitize(raw: str) -> str:
    """Import-safe form: every non-alphanumeric character becomes '_'."""
    return _IMPORT_UNSAFE.sub("_", raw)


def import_name(asset_root: str, path: str) -> str:
    """
    Alias used to import an asset file into the generated module.

    The alias is derived from the path relative to the asset root so output
    does not depend on where the asset directory lives on disk.
    """
    relative = posixpath.relpath(normalize_path(path), normalize_path(asset_root))
    return sanitize("/" + relative)


def category_path(asset_root: str, file_path: str) -> List[str]:
    """
    Category names for a file: its containing directory relative to the
    asset root, split on either separator, each segment lower-camelized.

    Root-level files yield an empty list.
    """
    return [name for name, _ in category_segments(asset_root, file_path)]


def category_segments(asset_root: str, file_path: str) -> List[Tuple[str, str]]:
    """
    Like category_path, but pairs each category name with the relative
    directory it came from, so distinct directories sharing a name can be told apart.
    """
    directory = posixpath.dirname(normalize_path(file_path))
    relative = posixpath.relpath(directory, normalize_path(asset_root))
    segments = []
    walked: List[str] = []
    for segment in relative.split("/"):
        if segment in ("", "."):
            continue
        walked.append(segment)
        name = lower_camelize(segment)
        if name:
            segments.append((name, "/".join(walked)))
    return segments


def stem(path: str) -> str:
    """Basename without its final extension."""
    base = posixpath.basename(normalize_path(path))
    root, _ = posixpath.splitext(base)
    return root


def extension(path: str) -> str:
    """Lower-cased final extension including the dot."""
    return posixpath.splitext(normalize_path(path))[1].lower()


def ensure_unique(pairs: Iterable[Tuple[str, str]], category: str = None) -> Dict[str, str]:
    """
    Map generated identifiers back to their source names.

    Args:
        pairs: (identifier, source) tuples
        category: Category reported when a collision is found

    Raises:
        DuplicateIdentifier: If two distinct sources produce the same identifier
    """
    seen: Dict[str, str] = {}
    for identifier, source in pairs:
        previous = seen.get(identifier)
        if previous is not None and previous != source:
            raise DuplicateIdentifier(identifier, [previous, source], category)
        seen[identifier] = source
    return seen


def _guard_leading_digit(identifier: str) -> str:
    if not identifier or identifier[0].isdigit():
        return "_" + identifier
    return identifier
