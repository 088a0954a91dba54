"""
Catalog processing modules for tree building, packing, atlas generation, sound grouping and emission.
"""

from .tree import AssetLeaf, SoundLeaf, CategoryTree, build_tree
from .packing import Rectangle, PackRequest, Placement, PackResult, GrowingPacker
from .atlas import AtlasGenerator, AtlasConfig, AtlasResult, AtlasValidator
from .audiosprite import AudioSpriteBuilder, FfmpegAudioSpriteBuilder, SpriteTiming
from .sound import SoundCatalog, SoundCatalogBuilder, SoundGroup, SpriteOptions
from .emitter import TextureCatalogEmitter, SoundCatalogEmitter

__all__ = [
    "AssetLeaf",
    "SoundLeaf",
    "CategoryTree",
    "build_tree",
    "Rectangle",
    "PackRequest",
    "Placement",
    "PackResult",
    "GrowingPacker",
    "AtlasGenerator",
    "AtlasConfig",
    "AtlasResult",
    "AtlasValidator",
    "AudioSpriteBuilder",
    "FfmpegAudioSpriteBuilder",
    "SpriteTiming",
    "SoundCatalog",
    "SoundCatalogBuilder",
    "SoundGroup",
    "SpriteOptions",
    "TextureCatalogEmitter",
    "SoundCatalogEmitter",
]
