"""
Catalog source generation.
Builds a declaration model (imports, catalog nodes, sprite data) from the
category tree and renders it to TypeScript through Jinja2 templates.
"""

import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Union

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..errors import DecodeFailure
from ..providers.base import ImageInfo
from ..utils.naming import ensure_unique, import_name, normalize_path, to_field_name
from .atlas import PlacementMap
from .packing import Rectangle
from .sound import SoundCatalog
from .tree import CategoryTree

SPRITESHEET_ALIAS = "SpriteSheetPng"


@dataclass(frozen=True)
class ImportDecl:
    """One default import of an asset file."""
    alias: str
    path: str


@dataclass
class ItemNode:
    """Catalog leaf: one factory call with resolved asset metadata."""
    field: str
    alias: str
    width: int
    height: int
    size: int
    sprite: Optional[Rectangle] = None
    is_branch: bool = False


@dataclass
class BranchNode:
    """Catalog category: a nested object in both type and value."""
    field: str
    children: List[Union["BranchNode", ItemNode]] = field(default_factory=list)
    is_branch: bool = True


@dataclass
class TextureModule:
    imports: List[ImportDecl]
    nodes: List[Union[BranchNode, ItemNode]]
    spritesheet: Optional[str] = None


@dataclass
class SoundGroupDecl:
    basename: str
    aliases: List[str]
    average_file_size: int
    sprite_key: Optional[str] = None


@dataclass
class SoundCategoryDecl:
    name: str
    groups: List[SoundGroupDecl]


@dataclass
class TimingDecl:
    key: str
    start: float
    end: float
    loop: bool


@dataclass
class SoundSpriteDecl:
    aliases: List[str]
    average_file_size: int
    timings: List[TimingDecl]


@dataclass
class SoundModule:
    imports: List[ImportDecl]
    categories: List[SoundCategoryDecl]
    sprite: Optional[SoundSpriteDecl] = None


class CatalogEmitter:
    """Shared template environment and import bookkeeping."""

    def __init__(self, asset_root: str, out_file: str, template_dir: Optional[str] = None):
        """
        Args:
            asset_root: Asset root; import aliases are relative to it
            out_file: Generated file; import paths are relative to its directory
            template_dir: Directory containing the Jinja2 templates
        """
        if template_dir is None:
            template_dir = Path(__file__).parent.parent / "templates"

        self.asset_root = normalize_path(asset_root)
        self.out_dir = posixpath.dirname(normalize_path(out_file))
        self.template_dir = Path(template_dir)

        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            autoescape=False,
            undefined=StrictUndefined,
        )
        self._setup_template_filters()

    def _setup_template_filters(self) -> None:
        """Set up custom Jinja2 filters for template processing."""

        def sprite_call(rect: Optional[Rectangle], sheet: Optional[str]) -> str:
            if rect is None:
                return "null"
            return f"expandSpriteData({sheet}, {rect.x}, {rect.y}, {rect.width}, {rect.height})"

        self.env.filters['sprite_call'] = sprite_call

    def import_path(self, path: str) -> str:
        """Module specifier for a file, relative to the generated file."""
        relative = posixpath.relpath(normalize_path(path), self.out_dir or ".")
        if relative.startswith("../"):
            return relative
        return "./" + relative

    def import_for(self, path: str, alias: Optional[str] = None) -> ImportDecl:
        return ImportDecl(alias or import_name(self.asset_root, path), self.import_path(path))

    @staticmethod
    def check_imports(imports: List[ImportDecl]) -> None:
        ensure_unique((decl.alias, decl.path) for decl in imports)

    def render(self, template_name: str, **context) -> str:
        template = self.env.get_template(template_name)
        return template.render(**context)


class TextureCatalogEmitter(CatalogEmitter):
    """Emits the texture catalog type and factory."""

    def build_module(self, tree: CategoryTree, images: Mapping[str, ImageInfo],
                     placements: Optional[PlacementMap] = None,
                     spritesheet_path: Optional[str] = None) -> TextureModule:
        """
        Resolve every leaf against probed metadata and atlas placements.

        Raises:
            DuplicateIdentifier: If names in one mapping, or import aliases, collide
            DecodeFailure: If a leaf has no probed metadata
        """
        imports: List[ImportDecl] = []
        placements = placements or {}

        def build(subtree: CategoryTree, category: str) -> List[Union[BranchNode, ItemNode]]:
            nodes = []
            fields = []
            for key, entry in subtree.items():
                name = to_field_name(key)
                fields.append((name, key))
                if entry.is_branch:
                    child_category = f"{category}/{key}" if category else key
                    nodes.append(BranchNode(name, build(entry, child_category)))
                else:
                    info = images.get(entry.path)
                    if info is None:
                        raise DecodeFailure(entry.path, "no image metadata was probed for this file")
                    decl = self.import_for(entry.path)
                    imports.append(decl)
                    nodes.append(ItemNode(
                        field=name,
                        alias=decl.alias,
                        width=info.width,
                        height=info.height,
                        size=info.size,
                        sprite=placements.get(entry.path),
                    ))
            ensure_unique(fields, category or None)
            return nodes

        nodes = build(tree, "")

        spritesheet = None
        if spritesheet_path:
            spritesheet = SPRITESHEET_ALIAS
            imports.append(self.import_for(spritesheet_path, SPRITESHEET_ALIAS))

        self.check_imports(imports)
        return TextureModule(imports=imports, nodes=nodes, spritesheet=spritesheet)

    def emit(self, tree: CategoryTree, images: Mapping[str, ImageInfo],
             placements: Optional[PlacementMap] = None,
             spritesheet_path: Optional[str] = None) -> str:
        """Full text of the texture catalog module."""
        module = self.build_module(tree, images, placements, spritesheet_path)
        return self.render("texture_catalog.ts.j2", module=module)


class SoundCatalogEmitter(CatalogEmitter):
    """Emits one definition list per sound category, plus the sprite."""

    def build_module(self, catalog: SoundCatalog) -> SoundModule:
        """
        Raises:
            DuplicateIdentifier: If import aliases collide
        """
        imports: List[ImportDecl] = []
        categories = []

        for name, groups in catalog.categories.items():
            decls = []
            for group in groups:
                aliases = []
                for path in group.files:
                    decl = self.import_for(path)
                    imports.append(decl)
                    aliases.append(decl.alias)
                decls.append(SoundGroupDecl(
                    basename=group.basename,
                    aliases=aliases,
                    average_file_size=group.average_file_size,
                    sprite_key=group.sprite_key,
                ))
            categories.append(SoundCategoryDecl(name, decls))

        sprite = None
        if catalog.sprite is not None:
            aliases = []
            for path in catalog.sprite.files:
                suffix = posixpath.splitext(path)[1].lstrip(".").capitalize()
                decl = self.import_for(path, f"SoundSprite{suffix}")
                imports.append(decl)
                aliases.append(decl.alias)
            sprite = SoundSpriteDecl(
                aliases=aliases,
                average_file_size=catalog.sprite.average_file_size,
                timings=[
                    TimingDecl(key, timing.start, timing.end, timing.loop)
                    for key, timing in catalog.sprite.timings.items()
                ],
            )

        self.check_imports(imports)
        return SoundModule(imports=imports, categories=categories, sprite=sprite)

    def emit(self, catalog: SoundCatalog) -> str:
        """Full text of the sound catalog module."""
        return self.render("sound_catalog.ts.j2", module=self.build_module(catalog))

