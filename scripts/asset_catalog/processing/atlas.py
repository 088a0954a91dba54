"""
Texture atlas generation for the image catalog.
Packs every image leaf into one spritesheet and maps each source path to
the visible rectangle it occupies.
"""

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from PIL import Image, UnidentifiedImageError

from ..errors import DecodeFailure, PackingFailure
from ..providers.base import ImageInfo
from .packing import GrowingPacker, PackRequest, PackResult, Rectangle
from .tree import CategoryTree

logger = logging.getLogger(__name__)

ExcludeRule = Union[str, Callable[[str], bool]]
PlacementMap = Dict[str, Rectangle]


@dataclass
class AtlasConfig:
    """Configuration for atlas generation."""
    padding: int = 1
    max_size: Tuple[int, int] = (4096, 4096)
    format: str = "RGBA"
    compression_level: int = 6


@dataclass
class AtlasResult:
    """Result of atlas generation."""
    width: int
    height: int
    placements: PlacementMap
    data: bytes
    padding: int = 1

    def save_atlas(self, path: Union[str, Path]) -> Path:
        """Write the encoded atlas, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.data)
        return path


def compile_excludes(rules: Sequence[ExcludeRule]) -> List[Callable[[str], bool]]:
    """Turn substring rules into predicates; callables pass through."""
    predicates = []
    for rule in rules:
        if callable(rule):
            predicates.append(rule)
        else:
            predicates.append(lambda path, needle=rule: needle in path)
    return predicates


def load_source_image(path: str) -> Image.Image:
    """Fully decode an image as RGBA."""
    try:
        with Image.open(path) as image:
            image.load()
            return image.convert("RGBA")
    except (UnidentifiedImageError, OSError) as e:
        raise DecodeFailure(path, str(e))


def compose_atlas(width: int, height: int, cells: Sequence[Tuple[Rectangle, Image.Image]],
                  compression_level: int = 6) -> bytes:
    """
    Paste each image at the top-left of its rectangle and encode as PNG.

    Args:
        width: Canvas width
        height: Canvas height
        cells: (inner rectangle, image) pairs; rectangles must not overlap
        compression_level: zlib level for the PNG encoder
    """
    # PNG cannot encode an empty canvas; an atlas with nothing packed is 1x1
    atlas = Image.new("RGBA", (max(width, 1), max(height, 1)), (0, 0, 0, 0))
    for rect, image in cells:
        # Cells are disjoint, so copy pixels as-is rather than blending
        atlas.paste(image, (rect.x, rect.y))

    buffer = io.BytesIO()
    atlas.save(buffer, format="PNG", compress_level=compression_level)
    return buffer.getvalue()


class AtlasGenerator:
    """Builds the spritesheet for an image category tree."""

    def __init__(self, config: AtlasConfig,
                 packer: Optional[Callable[[Sequence[PackRequest]], PackResult]] = None,
                 image_loader: Callable[[str], Image.Image] = load_source_image):
        """
        Args:
            config: Atlas configuration
            packer: Callable placing rectangles; defaults to GrowingPacker
            image_loader: Decodes a source path into an image
        """
        self.config = config
        self.packer = packer or GrowingPacker(config.max_size).pack
        self.image_loader = image_loader

    def collect_requests(self, tree: CategoryTree, images: Mapping[str, ImageInfo],
                         excludes: Sequence[ExcludeRule] = ()) -> List[PackRequest]:
        """Padded rectangle requests for every leaf not excluded."""
        predicates = compile_excludes(excludes)
        padding = self.config.padding
        requests = []

        for _, leaf in tree.leaves():
            if any(predicate(leaf.path) for predicate in predicates):
                logger.debug(f"Excluded from atlas: {leaf.path}")
                continue

            info = images.get(leaf.path)
            if info is None:
                raise DecodeFailure(leaf.path, "no image metadata was probed for this file")

            requests.append(PackRequest(
                leaf.path,
                info.width + padding * 2,
                info.height + padding * 2,
            ))

        return requests

    def build_atlas(self, tree: CategoryTree, images: Mapping[str, ImageInfo],
                    excludes: Sequence[ExcludeRule] = ()) -> AtlasResult:
        """
        Pack and composite every eligible leaf.

        Args:
            tree: Image category tree
            images: Probed metadata keyed by normalized path
            excludes: Substrings or predicates matching paths to leave out

        Returns:
            AtlasResult whose placements are the inner (unpadded) rectangles

        Raises:
            PackingFailure: If the packer does not place every request
            DecodeFailure: If any source image cannot be decoded
        """
        padding = self.config.padding
        requests = self.collect_requests(tree, images, excludes)
        packed = self.packer(requests)

        placed_ids = [p.id for p in packed.placements]
        missing = sorted({r.id for r in requests} - set(placed_ids))
        if missing or len(placed_ids) != len(requests):
            raise PackingFailure(f"Packer placed {len(placed_ids)} of {len(requests)} images", missing)

        placements: PlacementMap = {}
        cells = []
        for placement in packed.placements:
            inner = placement.rect.inset(padding)
            image = self.image_loader(placement.id)
            if image.size != (inner.width, inner.height):
                raise DecodeFailure(
                    placement.id,
                    f"decoded size {image.size[0]}x{image.size[1]} does not match "
                    f"reported {inner.width}x{inner.height}",
                )
            placements[placement.id] = inner
            cells.append((inner, image))

        data = compose_atlas(packed.width, packed.height, cells, self.config.compression_level)
        logger.info(f"Packed {len(placements)} images into a {packed.width}x{packed.height} atlas")

        result = AtlasResult(
            width=packed.width,
            height=packed.height,
            placements=placements,
            data=data,
            padding=padding,
        )

        errors = AtlasValidator(self.config).validate_placements(result)
        if errors:
            raise PackingFailure("; ".join(errors), list(placements))

        return result


class AtlasValidator:
    """Consistency checks for packed atlases."""

    def __init__(self, config: AtlasConfig):
        self.config = config

    def validate_placements(self, result: AtlasResult) -> List[str]:
        """
        Check every rectangle lies inside the canvas and that padded cells
        do not overlap.

        Returns:
            List of validation error messages
        """
        errors = []
        padded = {}

        for name, rect in result.placements.items():
            if rect.x < 0 or rect.y < 0:
                errors.append(f"Frame '{name}' has negative coordinates: ({rect.x}, {rect.y})")
            if rect.width <= 0 or rect.height <= 0:
                errors.append(f"Frame '{name}' has invalid dimensions: {rect.width}x{rect.height}")
            if rect.right > result.width or rect.bottom > result.height:
                errors.append(f"Frame '{name}' extends beyond atlas {result.width}x{result.height}")
            padded[name] = rect.inset(-result.padding)

        names = list(padded)
        for i, first in enumerate(names):
            for second in names[i + 1:]:
                if padded[first].intersects(padded[second]):
                    errors.append(f"Frames '{first}' and '{second}' overlap")

        return errors
