"""
Catalog pipeline coordinator.
Runs snapshot, metadata probing, tree building, atlas or sprite generation and
emission, and writes the generated module in one terminal step.
"""

import os
import time
import logging
import tempfile
from pathlib import Path
from typing import Dict, List, Optional
from dataclasses import dataclass, field
from contextlib import contextmanager

from .config import CatalogConfig
from .errors import CatalogError, ConfigurationError
from .providers.base import AssetProvider, AssetSnapshot, probe_images, probe_sizes
from .providers.local import LocalAssetProvider
from .processing.atlas import AtlasConfig, AtlasGenerator
from .processing.audiosprite import AudioSpriteBuilder, FfmpegAudioSpriteBuilder
from .processing.emitter import SoundCatalogEmitter, TextureCatalogEmitter
from .processing.sound import SoundCatalog, SoundCatalogBuilder, SpriteOptions
from .processing.tree import build_tree


@dataclass
class CatalogResult:
    """Outcome of one generator run."""
    out_file: Path
    text: str
    leaf_count: int
    duration: float
    atlas_file: Optional[Path] = None
    sprite_files: List[str] = field(default_factory=list)


class CatalogPipeline:
    """
    Coordinates one catalog generation run.

    Every run works from a single snapshot of the asset directory and buffers
    the generated module in memory until everything has succeeded.
    """

    def __init__(self, config: CatalogConfig, provider: Optional[AssetProvider] = None,
                 sprite_builder: Optional[AudioSpriteBuilder] = None):
        """
        Args:
            config: Catalog configuration
            provider: Filesystem capability; defaults to the local disk
            sprite_builder: Audio sprite encoder; defaults to ffmpeg
        """
        errors = config.validate()
        if errors:
            raise ConfigurationError("Invalid configuration: " + "; ".join(errors))

        self.config = config
        self.provider = provider or LocalAssetProvider()
        self.sprite_builder = sprite_builder
        self.logger = self._setup_logging()

    def _setup_logging(self) -> logging.Logger:
        """Set up logging for the pipeline."""
        logger = logging.getLogger("asset_catalog")
        logger.setLevel(logging.INFO)

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    def run_textures(self) -> CatalogResult:
        """
        Generate the texture catalog and, if configured, the spritesheet.

        Raises:
            CatalogError: On any failure; the previous catalog is left in place
        """
        config = self.config
        out_file = Path(config.out_file)
        start = time.time()
        self.logger.info(f"Generating texture catalog {out_file} from {config.asset_dir}")

        with self._replacing(out_file):
            snapshot = AssetSnapshot.capture(self.provider, config.asset_dir, config.image_extensions)
            images = probe_images(self.provider, snapshot.paths, config.workers)
            tree = build_tree(snapshot.root, snapshot.paths)

            placements = None
            atlas = None
            if config.spritesheet:
                generator = AtlasGenerator(AtlasConfig(
                    padding=config.atlas_padding,
                    max_size=config.atlas_max_size,
                    compression_level=config.compression_level,
                ))
                atlas = generator.build_atlas(tree, images, config.atlas_exclude)
                placements = atlas.placements

            emitter = TextureCatalogEmitter(snapshot.root, str(out_file))
            text = emitter.emit(tree, images, placements, config.spritesheet)

            # The spritesheet is written only once the catalog has rendered
            atlas_file = None
            if atlas is not None:
                atlas_file = atlas.save_atlas(config.spritesheet)
                self.logger.info(f"Wrote spritesheet {atlas_file} ({len(atlas.data)} bytes)")
            self._write(out_file, text)

        self.logger.info(f"Wrote {out_file} with {len(images)} textures")
        return CatalogResult(out_file, text, len(images), time.time() - start, atlas_file=atlas_file)

    def run_sounds(self) -> CatalogResult:
        """
        Generate the sound catalog and, if configured, the audio sprite.

        Raises:
            CatalogError: On any failure; the previous catalog is left in place
        """
        config = self.config
        out_file = Path(config.sound_out_file)
        start = time.time()
        self.logger.info(f"Generating sound catalog {out_file} from {config.asset_dir}")

        with self._replacing(out_file):
            snapshot = AssetSnapshot.capture(self.provider, config.asset_dir, config.audio_extensions)
            sizes = probe_sizes(self.provider, snapshot.paths, config.workers)

            def size_of(path: str) -> int:
                if path in sizes:
                    return sizes[path].size
                return self.provider.stat_size(path)

            sprite_options = None
            sprite_builder = None
            if config.sound_sprite:
                sprite_options = SpriteOptions(
                    output=config.sound_sprite,
                    formats=config.audio_formats,
                    exclude=config.sprite_exclude,
                )
                sprite_builder = self.sprite_builder or FfmpegAudioSpriteBuilder()

            builder = SoundCatalogBuilder(snapshot.root, size_of, sprite_builder)
            emitter = SoundCatalogEmitter(snapshot.root, str(out_file))
            if sprite_options is not None:
                # Identifier checks run before the sprite encoder writes anything
                emitter.build_module(SoundCatalog(builder.group(snapshot.paths, config.audio_extensions)))
            catalog = builder.build(snapshot.paths, config.audio_extensions, sprite_options)

            text = emitter.emit(catalog)
            self._write(out_file, text)

        groups = catalog.groups()
        self.logger.info(f"Wrote {out_file} with {len(groups)} sounds")
        sprite_files = list(catalog.sprite.files) if catalog.sprite else []
        return CatalogResult(out_file, text, len(groups), time.time() - start, sprite_files=sprite_files)

    @contextmanager
    def _replacing(self, out_file: Path):
        """
        Remove the previous output for the duration of a run and put it back
        if the run fails before the new file is written.
        """
        previous: Optional[bytes] = None
        if out_file.exists():
            previous = out_file.read_bytes()
            out_file.unlink()

        try:
            yield
        except CatalogError as e:
            self.logger.error(f"Catalog generation failed: {e.describe()}")
            self._restore(out_file, previous)
            raise
        except Exception as e:
            self.logger.error(f"Catalog generation failed: {e}")
            self._restore(out_file, previous)
            raise

    def _restore(self, out_file: Path, previous: Optional[bytes]) -> None:
        if previous is not None and not out_file.exists():
            out_file.write_bytes(previous)
            self.logger.info(f"Restored previous {out_file}")

    @staticmethod
    def _write(out_file: Path, text: str) -> None:
        """Write text in one step: temporary file beside the target, then rename."""
        out_file.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{out_file.name}.", suffix=".tmp", dir=str(out_file.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(text)
            os.replace(tmp_name, out_file)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
