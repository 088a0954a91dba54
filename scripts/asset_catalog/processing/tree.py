"""
Category tree construction from flat asset paths.
"""

import posixpath
from dataclasses import dataclass, field
from typing import ClassVar, Dict, Iterator, List, Sequence, Tuple, Union

from ..errors import DuplicateAssetKey, DuplicateIdentifier
from ..utils.naming import category_segments, extension, normalize_path, stem


@dataclass(frozen=True)
class AssetLeaf:
    """Leaf holding exactly one asset file."""
    key: str
    path: str

    is_branch: ClassVar[bool] = False

    @property
    def paths(self) -> Tuple[str, ...]:
        return (self.path,)


@dataclass(frozen=True)
class SoundLeaf:
    """Leaf holding every file that shares one logical sound name."""
    key: str
    paths: Tuple[str, ...]

    is_branch: ClassVar[bool] = False


Leaf = Union[AssetLeaf, SoundLeaf]


@dataclass
class CategoryTree:
    """
    Ordered mapping from category or leaf key to a sub-tree or a leaf.

    Keys keep first-insertion order. The tree is only mutated by the builder.
    Entries are told apart by their ``is_branch`` tag.
    """
    children: Dict[str, Union["CategoryTree", AssetLeaf, SoundLeaf]] = field(default_factory=dict)

    is_branch: ClassVar[bool] = True

    def __len__(self) -> int:
        return len(self.children)

    def items(self):
        return self.children.items()

    def leaves(self) -> Iterator[Tuple[Tuple[str, ...], Leaf]]:
        """Yield (categories, leaf) for every leaf in tree order."""
        yield from self._walk(())

    def _walk(self, prefix: Tuple[str, ...]) -> Iterator[Tuple[Tuple[str, ...], Leaf]]:
        for key, node in self.children.items():
            if node.is_branch:
                yield from node._walk(prefix + (key,))
            else:
                yield prefix, node

    def shape(self) -> Dict[str, object]:
        """Nested dict of keys; asset leaves map to their path, sound leaves to their paths."""
        result: Dict[str, object] = {}
        for key, node in self.children.items():
            if node.is_branch:
                result[key] = node.shape()
            elif isinstance(node, SoundLeaf):
                result[key] = node.paths
            else:
                result[key] = node.path
        return result


class TreeBuilder:
    """Folds asset paths into a CategoryTree."""

    def __init__(self, asset_root: str, group_extensions: bool = False):
        """
        Args:
            asset_root: Directory the category names are relative to
            group_extensions: Merge files sharing a basename into one SoundLeaf
                instead of treating them as conflicting keys
        """
        self.asset_root = normalize_path(asset_root)
        self.group_extensions = group_extensions
        self.tree = CategoryTree()
        self._directories: Dict[Tuple[str, ...], str] = {}

    def add(self, path: str) -> None:
        path = normalize_path(path)
        segments = category_segments(self.asset_root, path)
        categories = [name for name, _ in segments]
        subtree = self._subtree_for(segments, path)
        key = stem(path)
        existing = subtree.children.get(key)
        category = "/".join(categories) or None

        if existing is None:
            if self.group_extensions:
                subtree.children[key] = SoundLeaf(key, (path,))
            else:
                subtree.children[key] = AssetLeaf(key, path)
            return

        if existing.is_branch:
            directory = self._directories[tuple(categories) + (key,)]
            raise DuplicateAssetKey(key, [path, posixpath.join(self.asset_root, directory)], category)

        if self.group_extensions:
            clash = [p for p in existing.paths if extension(p) == extension(path)]
            if clash and path not in clash:
                raise DuplicateAssetKey(key, clash + [path], category)
            if path not in existing.paths:
                subtree.children[key] = SoundLeaf(key, existing.paths + (path,))
            return

        if existing.path != path:
            raise DuplicateAssetKey(key, [existing.path, path], category)

    def _subtree_for(self, segments: List[Tuple[str, str]], path: str) -> CategoryTree:
        subtree = self.tree
        walked: List[str] = []
        for name, directory in segments:
            walked.append(name)
            node = subtree.children.get(name)
            parent = "/".join(walked[:-1]) or None
            if node is None:
                node = CategoryTree()
                subtree.children[name] = node
                self._directories[tuple(walked)] = directory
            elif not node.is_branch:
                raise DuplicateAssetKey(name, [node.paths[0], path], parent)
            elif self._directories[tuple(walked)] != directory:
                raise DuplicateIdentifier(name, [self._directories[tuple(walked)], directory], parent)
            subtree = node
        return subtree


def build_tree(asset_root: str, paths: Sequence[str], group_extensions: bool = False) -> CategoryTree:
    """
    Build the category tree for a list of asset paths.

    Args:
        asset_root: Asset root directory
        paths: Asset file paths
        group_extensions: True for sounds, where siblings sharing a basename
            across extensions form one leaf

    Returns:
        The populated CategoryTree

    Raises:
        DuplicateAssetKey: If two inputs collide on one leaf key
        DuplicateIdentifier: If distinct directories map to one category name
    """
    builder = TreeBuilder(asset_root, group_extensions)
    for path in paths:
        builder.add(path)
    return builder.tree
