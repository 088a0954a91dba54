"""
Configuration management for catalog generation.
Supports TOML and JSON configuration files with environment overrides and validation.
"""

import os
import json
import tomllib
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Union
from pathlib import Path

AUDIO_FORMATS = ("ogg", "mp3", "wav")

ENV_PREFIX = "ASSET_CATALOG_"


@dataclass
class CatalogConfig:
    """Main configuration class for catalog generation."""

    # Paths
    asset_dir: str = "."
    out_file: str = "textures.ts"
    spritesheet: Optional[str] = None
    sound_out_file: str = "sounds.ts"
    sound_sprite: Optional[str] = None

    # Atlas settings
    atlas_padding: int = 1
    atlas_max_size: tuple[int, int] = (4096, 4096)
    atlas_exclude: List[str] = field(default_factory=list)
    compression_level: int = 6

    # Image settings
    image_extensions: List[str] = field(default_factory=lambda: [".png"])

    # Sound settings
    ogg: bool = True
    mp3: bool = True
    wav: bool = False
    sprite_exclude: List[str] = field(default_factory=list)

    # Run settings
    workers: int = 8

    @property
    def audio_formats(self) -> List[str]:
        """Enabled audio formats in their canonical order."""
        return [fmt for fmt in AUDIO_FORMATS if getattr(self, fmt)]

    @property
    def audio_extensions(self) -> List[str]:
        return [f".{fmt}" for fmt in self.audio_formats]

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "CatalogConfig":
        """Load configuration from TOML or JSON file."""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        if config_path.suffix.lower() == '.toml':
            with open(config_path, 'rb') as f:
                return cls._from_dict(tomllib.load(f))
        elif config_path.suffix.lower() == '.json':
            with open(config_path, 'r') as f:
                return cls._from_dict(json.load(f))
        else:
            raise ValueError(f"Unsupported configuration format: {config_path.suffix}")

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "CatalogConfig":
        """Create configuration from dictionary."""
        config_data = {}

        if 'paths' in data:
            paths = data['paths']
            for key in ('asset_dir', 'out_file', 'spritesheet', 'sound_out_file', 'sound_sprite'):
                if key in paths:
                    config_data[key] = paths[key]

        if 'atlas' in data:
            atlas = data['atlas']
            config_data['atlas_padding'] = atlas.get('padding', 1)
            if 'max_size' in atlas:
                config_data['atlas_max_size'] = tuple(atlas['max_size'])
            config_data['atlas_exclude'] = list(atlas.get('exclude', []))
            config_data['compression_level'] = atlas.get('compression_level', 6)

        if 'images' in data:
            images = data['images']
            if 'extensions' in images:
                config_data['image_extensions'] = list(images['extensions'])

        if 'sound' in data:
            sound = data['sound']
            for fmt in AUDIO_FORMATS:
                if fmt in sound:
                    config_data[fmt] = bool(sound[fmt])
            config_data['sprite_exclude'] = list(sound.get('sprite_exclude', []))

        if 'run' in data:
            config_data['workers'] = data['run'].get('workers', 8)

        return cls(**config_data)

    @classmethod
    def default(cls) -> "CatalogConfig":
        """Create default configuration with environment variable overrides."""
        return cls._apply_env_overrides(cls())

    @classmethod
    def _apply_env_overrides(cls, config: "CatalogConfig") -> "CatalogConfig":
        """Apply environment variable overrides to configuration."""

        # Paths
        for key in ('asset_dir', 'out_file', 'spritesheet', 'sound_out_file', 'sound_sprite'):
            value = os.getenv(ENV_PREFIX + key.upper())
            if value:
                setattr(config, key, value)

        # Atlas settings
        if os.getenv('ASSET_CATALOG_ATLAS_PADDING'):
            config.atlas_padding = int(os.getenv('ASSET_CATALOG_ATLAS_PADDING', '1'))

        if os.getenv('ASSET_CATALOG_ATLAS_MAX_WIDTH') and os.getenv('ASSET_CATALOG_ATLAS_MAX_HEIGHT'):
            config.atlas_max_size = (
                int(os.getenv('ASSET_CATALOG_ATLAS_MAX_WIDTH', '4096')),
                int(os.getenv('ASSET_CATALOG_ATLAS_MAX_HEIGHT', '4096'))
            )

        if os.getenv('ASSET_CATALOG_ATLAS_EXCLUDE'):
            config.atlas_exclude = os.getenv('ASSET_CATALOG_ATLAS_EXCLUDE', '').split(',')

        # Sound settings
        for fmt in AUDIO_FORMATS:
            value = os.getenv(ENV_PREFIX + fmt.upper())
            if value:
                setattr(config, fmt, value.lower() == 'true')

        if os.getenv('ASSET_CATALOG_SPRITE_EXCLUDE'):
            config.sprite_exclude = os.getenv('ASSET_CATALOG_SPRITE_EXCLUDE', '').split(',')

        # Run settings
        if os.getenv('ASSET_CATALOG_WORKERS'):
            config.workers = int(os.getenv('ASSET_CATALOG_WORKERS', '8'))

        return config

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if self.atlas_padding < 0:
            errors.append("atlas_padding must not be negative")

        if self.atlas_max_size[0] <= 0 or self.atlas_max_size[1] <= 0:
            errors.append("atlas_max_size must have positive dimensions")

        if not 0 <= self.compression_level <= 9:
            errors.append("compression_level must be between 0 and 9")

        if not self.audio_formats:
            errors.append("at least one of ogg, mp3 or wav must be enabled")

        if self.workers < 1:
            errors.append("workers must be at least 1")

        for ext in self.image_extensions:
            if not ext.startswith('.'):
                errors.append(f"image extension '{ext}' must start with '.'")

        return errors


ENV_VARS = [
    ("ASSET_CATALOG_ASSET_DIR", "Asset root directory", "assets"),
    ("ASSET_CATALOG_OUT_FILE", "Generated texture catalog", "src/textures.ts"),
    ("ASSET_CATALOG_SPRITESHEET", "Atlas image output path", "src/spritesheet.png"),
    ("ASSET_CATALOG_SOUND_OUT_FILE", "Generated sound catalog", "src/sounds.ts"),
    ("ASSET_CATALOG_SOUND_SPRITE", "Audio sprite output path without extension", "src/sprite"),
    ("ASSET_CATALOG_ATLAS_PADDING", "Atlas padding in pixels", "1"),
    ("ASSET_CATALOG_ATLAS_MAX_WIDTH", "Maximum atlas width", "4096"),
    ("ASSET_CATALOG_ATLAS_MAX_HEIGHT", "Maximum atlas height", "4096"),
    ("ASSET_CATALOG_ATLAS_EXCLUDE", "Comma-separated path fragments kept out of the atlas", "ui/fonts,backgrounds"),
    ("ASSET_CATALOG_OGG", "Include .ogg files (true/false)", "true"),
    ("ASSET_CATALOG_MP3", "Include .mp3 files (true/false)", "true"),
    ("ASSET_CATALOG_WAV", "Include .wav files (true/false)", "false"),
    ("ASSET_CATALOG_SPRITE_EXCLUDE", "Comma-separated categories kept out of the audio sprite", "music"),
    ("ASSET_CATALOG_WORKERS", "Concurrent metadata probes", "8"),
]
