"""
Sound bundle aggregation.
Groups audio files that share a logical name, orders them for playback,
averages their size and optionally folds one file per group into an audio
sprite.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ..errors import DuplicateIdentifier, NoCandidateForSprite
from ..utils.naming import ensure_unique, extension
from .audiosprite import AudioSpriteBuilder, SpriteTiming
from .tree import build_tree

logger = logging.getLogger(__name__)

# Playback fallback order: most compatible and compact formats first
PLAYBACK_ORDER: Tuple[str, ...] = (".ogg", ".mp3", ".wav")

# Sprite source order: best single input for re-encoding first
SPRITE_SOURCE_ORDER: Tuple[str, ...] = (".wav", ".ogg", ".mp3")

ROOT_CATEGORY = "root"

# Category key taken by the generated sound_sprite() function
SPRITE_CATEGORY = "sprite"


def category_key(category: Sequence[str]) -> str:
    """Function-name form of a category: segments joined with underscores."""
    return "_".join(category) or ROOT_CATEGORY


def order_by_preference(paths: Sequence[str], preference: Sequence[str]) -> List[str]:
    """Stable sort by extension rank; unknown extensions keep discovery order at the end."""
    rank = {ext: index for index, ext in enumerate(preference)}
    return sorted(paths, key=lambda path: rank.get(extension(path), len(preference)))


def average_file_size(sizes: Sequence[int]) -> int:
    """Mean size rounded half up, as integer arithmetic."""
    if not sizes:
        raise ValueError("Cannot average an empty group")
    total = sum(sizes)
    count = len(sizes)
    return (2 * total + count) // (2 * count)


@dataclass(frozen=True)
class SoundGroup:
    """One logical sound: every file sharing a basename within a category."""
    category: Tuple[str, ...]
    basename: str
    files: Tuple[str, ...]
    sizes: Tuple[int, ...]
    sprite_key: Optional[str] = None

    @property
    def category_key(self) -> str:
        return category_key(self.category)

    @property
    def average_file_size(self) -> int:
        return average_file_size(self.sizes)

    @property
    def source_name(self) -> str:
        return "/".join(self.category + (self.basename,))

    def default_sprite_key(self) -> str:
        return f"{self.category_key}_{self.basename}"


@dataclass
class SoundSprite:
    """The combined sprite: its written files and per-key timings."""
    files: Tuple[str, ...]
    sizes: Tuple[int, ...]
    timings: Dict[str, SpriteTiming]

    @property
    def average_file_size(self) -> int:
        return average_file_size(self.sizes)


@dataclass
class SpriteOptions:
    """Requested audio sprite."""
    output: str
    formats: Sequence[str] = ("ogg", "mp3")
    exclude: Sequence[str] = ()


@dataclass
class SoundCatalog:
    """Groups keyed by category in discovery order, plus the optional sprite."""
    categories: Dict[str, List[SoundGroup]] = field(default_factory=dict)
    sprite: Optional[SoundSprite] = None

    def groups(self) -> List[SoundGroup]:
        return [group for groups in self.categories.values() for group in groups]


def select_sprite_source(group: SoundGroup) -> str:
    """
    Pick the one file of a group that feeds the sprite encoder.

    Raises:
        NoCandidateForSprite: If no file has a sprite-capable format
    """
    candidates = [path for path in group.files if extension(path) in SPRITE_SOURCE_ORDER]
    if not candidates:
        raise NoCandidateForSprite(group.basename, list(group.files), "/".join(group.category) or None)
    return order_by_preference(candidates, SPRITE_SOURCE_ORDER)[0]


class SoundCatalogBuilder:
    """Builds the sound catalog from a snapshot of audio paths."""

    def __init__(self, asset_root: str, size_of: Callable[[str], int],
                 sprite_builder: Optional[AudioSpriteBuilder] = None):
        """
        Args:
            asset_root: Asset root directory
            size_of: Returns the byte size of a path
            sprite_builder: Encoder used when a sprite is requested
        """
        self.asset_root = asset_root
        self.size_of = size_of
        self.sprite_builder = sprite_builder

    def group(self, paths: Sequence[str], allowed_extensions: Sequence[str]) -> Dict[str, List[SoundGroup]]:
        """
        Group paths with an allowed extension by category and basename.

        Raises:
            DuplicateIdentifier: If two categories map to the same function name
        """
        allowed = {ext.lower() for ext in allowed_extensions}
        sounds = [path for path in paths if extension(path) in allowed]
        tree = build_tree(self.asset_root, sounds, group_extensions=True)

        categories: Dict[str, List[SoundGroup]] = {}
        ensure_unique(
            (category_key(category), "/".join(category) or ".")
            for category, _ in tree.leaves()
        )
        for category, leaf in tree.leaves():
            files = tuple(order_by_preference(leaf.paths, PLAYBACK_ORDER))
            group = SoundGroup(
                category=category,
                basename=leaf.key,
                files=files,
                sizes=tuple(self.size_of(path) for path in files),
            )
            categories.setdefault(group.category_key, []).append(group)

        return categories

    def build(self, paths: Sequence[str], allowed_extensions: Sequence[str],
              sprite_options: Optional[SpriteOptions] = None) -> SoundCatalog:
        """
        Build grouped definitions and, if requested, the audio sprite.

        Raises:
            NoCandidateForSprite: If a group picked for the sprite has no usable file
            DuplicateAssetKey: If two files collide on one group and extension
            DuplicateIdentifier: If sprite keys collide or a category takes the sprite function name
        """
        categories = self.group(paths, allowed_extensions)
        catalog = SoundCatalog(categories=categories)
        if sprite_options is None:
            return catalog

        selection = self.select_for_sprite(categories, sprite_options.exclude)
        if not selection:
            logger.warning("No sounds selected for the audio sprite; skipping sprite build")
            return catalog
        if SPRITE_CATEGORY in categories:
            raise DuplicateIdentifier(
                f"sound_{SPRITE_CATEGORY}",
                [group.source_name for group in categories[SPRITE_CATEGORY]] + ["audio sprite"],
                SPRITE_CATEGORY,
            )
        if self.sprite_builder is None:
            raise ValueError("An audio sprite was requested but no sprite builder is configured")

        result = self.sprite_builder.build(
            {key: path for key, (_, path) in selection.items()},
            sprite_options.output,
            list(sprite_options.formats),
        )

        # Mark selected groups with their sprite key
        chosen = {(group.category_key, group.basename): key for key, (group, _) in selection.items()}
        for name, groups in categories.items():
            categories[name] = [
                replace(group, sprite_key=chosen.get((name, group.basename)))
                for group in groups
            ]

        files = tuple(order_by_preference(result.written_files, PLAYBACK_ORDER))
        catalog.sprite = SoundSprite(
            files=files,
            sizes=tuple(self.size_of(path) for path in files),
            timings=result.timings,
        )
        logger.info(f"Built audio sprite with {len(selection)} sounds")
        return catalog

    def select_for_sprite(self, categories: Mapping[str, List[SoundGroup]],
                          exclude: Sequence[str]) -> Dict[str, Tuple[SoundGroup, str]]:
        """
        Sprite key to (group, chosen file) for every group not excluded.

        Raises:
            DuplicateIdentifier: If two groups produce the same sprite key
            NoCandidateForSprite: If a selected group has no usable file
        """
        selection: Dict[str, Tuple[SoundGroup, str]] = {}
        for groups in categories.values():
            for group in groups:
                category = "/".join(group.category)
                if any(needle in category for needle in exclude):
                    logger.debug(f"Excluded from sprite: {category}/{group.basename}")
                    continue
                key = group.default_sprite_key()
                if key in selection:
                    raise DuplicateIdentifier(key, [selection[key][0].source_name, group.source_name],
                                              category or None)
                selection[key] = (group, select_sprite_source(group))
        return selection
