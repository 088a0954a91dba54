"""
Command-line interface for the asset catalog generator.
Provides commands for the texture and sound catalogs and for configuration.
"""

import sys
import os
from pathlib import Path
from typing import Optional, List
import typer
from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.markup import escape

from . import __version__
from .config import CatalogConfig, ENV_PREFIX, ENV_VARS
from .errors import CatalogError
from .pipeline import CatalogPipeline, CatalogResult

# Initialize typer app and rich console
app = typer.Typer(
    name="asset-catalog",
    help="Asset catalog generator - Emit typed TypeScript catalogs for textures and sounds",
    add_completion=False,
    rich_markup_mode="rich",
    epilog="""
[bold]Examples:[/bold]
  [cyan]asset-catalog textures -a assets/images -o src/textures.ts[/cyan]          Texture catalog
  [cyan]asset-catalog textures -a assets/images -s src/sheet.png[/cyan]            With a spritesheet
  [cyan]asset-catalog sounds -a assets/sounds -o src/sounds.ts --no-mp3[/cyan]     Sound catalog
  [cyan]asset-catalog sounds -a assets/sounds -s src/sprite -x music[/cyan]        With an audio sprite

[bold]Environment Variables:[/bold]
  Use [cyan]asset-catalog config --env-vars[/cyan] to see all available variables.
    """
)
console = Console()


@app.command()
def textures(
    asset_dir: Optional[Path] = typer.Option(None, "--asset-dir", "-a", help="Asset root directory"),
    out_file: Optional[Path] = typer.Option(None, "--out-file", "-o", help="Generated catalog file"),
    spritesheet: Optional[Path] = typer.Option(None, "--spritesheet", "-s", help="Also pack images into this PNG"),
    exclude: Optional[List[str]] = typer.Option(None, "--spritesheet-exclude", "-x",
                                                help="Path fragment to keep out of the spritesheet (repeatable)"),
    padding: Optional[int] = typer.Option(None, "--padding", help="Atlas padding in pixels"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path")
):
    """Generate the texture catalog."""
    console.print("[bold blue]Generating texture catalog...[/bold blue]")

    config = _load_config(config_file)
    if asset_dir is not None:
        config.asset_dir = str(asset_dir)
    if out_file is not None:
        config.out_file = str(out_file)
    if spritesheet is not None:
        config.spritesheet = str(spritesheet)
    if exclude:
        config.atlas_exclude = list(exclude)
    if padding is not None:
        config.atlas_padding = padding

    result = _run(lambda pipeline: pipeline.run_textures(), config, "Scanning textures...")

    console.print(f"[green]✓[/green] Wrote {result.out_file} ({result.leaf_count} textures, {result.duration:.2f}s)")
    if result.atlas_file:
        console.print(f"[green]✓[/green] Wrote spritesheet {result.atlas_file}")


@app.command()
def sounds(
    asset_dir: Optional[Path] = typer.Option(None, "--asset-dir", "-a", help="Asset root directory"),
    out_file: Optional[Path] = typer.Option(None, "--out-file", "-o", help="Generated catalog file"),
    ogg: Optional[bool] = typer.Option(None, "--ogg/--no-ogg", help="Include .ogg files"),
    mp3: Optional[bool] = typer.Option(None, "--mp3/--no-mp3", help="Include .mp3 files"),
    wav: Optional[bool] = typer.Option(None, "--wav/--no-wav", help="Include .wav files"),
    sprite: Optional[Path] = typer.Option(None, "--sprite", "-s",
                                          help="Also build an audio sprite at this path (no extension)"),
    exclude: Optional[List[str]] = typer.Option(None, "--sprite-exclude", "-x",
                                                help="Category fragment to keep out of the sprite (repeatable)"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path")
):
    """Generate the sound catalog."""
    console.print("[bold blue]Generating sound catalog...[/bold blue]")

    config = _load_config(config_file)
    if asset_dir is not None:
        config.asset_dir = str(asset_dir)
    if out_file is not None:
        config.sound_out_file = str(out_file)
    for name, value in (("ogg", ogg), ("mp3", mp3), ("wav", wav)):
        if value is not None:
            setattr(config, name, value)
    if sprite is not None:
        config.sound_sprite = str(sprite)
    if exclude:
        config.sprite_exclude = list(exclude)

    result = _run(lambda pipeline: pipeline.run_sounds(), config, "Scanning sounds...")

    console.print(f"[green]✓[/green] Wrote {result.out_file} ({result.leaf_count} sounds, {result.duration:.2f}s)")
    for path in result.sprite_files:
        console.print(f"[green]✓[/green] Wrote audio sprite {path}")


@app.command()
def config(
    show: bool = typer.Option(False, "--show", help="Show current configuration"),
    validate_config: bool = typer.Option(False, "--validate", help="Validate configuration file"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path"),
    env_vars: bool = typer.Option(False, "--env-vars", help="Show available environment variables")
):
    """Manage catalog configuration."""
    if env_vars:
        _display_env_vars()
        return

    if not (show or validate_config):
        console.print("Use --show to display configuration, --validate to check it, or --env-vars to see environment variables.")
        return

    config = _load_config(config_file)

    if show:
        _display_config(config)

    if validate_config:
        errors = config.validate()
        if errors:
            console.print("[red]Configuration validation errors:[/red]")
            for error in errors:
                console.print(f"  • {error}")
            raise typer.Exit(1)
        console.print("[green]✓ Configuration is valid[/green]")


@app.command()
def version():
    """Show asset catalog version information."""
    console.print("[bold]Asset Catalog Generator[/bold]")
    console.print(f"Version: {__version__}")
    console.print("Python: " + sys.version.split()[0])

    import importlib.metadata

    deps_status = []
    for name in ("Pillow", "Jinja2", "typer", "rich"):
        try:
            deps_status.append((name, importlib.metadata.version(name), "✓"))
        except importlib.metadata.PackageNotFoundError:
            deps_status.append((name, "Not installed", "✗"))

    console.print("\n[bold]Dependencies:[/bold]")
    table = Table(show_header=False)
    table.add_column("Status", width=3)
    table.add_column("Package", style="cyan")
    table.add_column("Version", style="green")

    for name, dep_version, status in deps_status:
        color = "green" if status == "✓" else "red"
        table.add_row(f"[{color}]{status}[/{color}]", name, dep_version)

    console.print(table)


def _run(step, config: CatalogConfig, description: str) -> CatalogResult:
    """Run one pipeline step with a spinner, turning catalog errors into exit code 1."""
    try:
        pipeline = CatalogPipeline(config)
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True
        ) as progress:
            progress.add_task(description, total=None)
            return step(pipeline)
    except CatalogError as e:
        console.print(f"[red]Error:[/red] {escape(e.describe())}")
        raise typer.Exit(1)


def _load_config(config_file: Optional[Path]) -> CatalogConfig:
    """Load configuration from file or use defaults with environment variable support."""
    config = None

    if config_file:
        if not config_file.exists():
            console.print(f"[red]Configuration file not found:[/red] {config_file}")
            raise typer.Exit(1)
        config = _read_config(config_file)
        console.print(f"[dim]Using configuration: {config_file}[/dim]")
    else:
        default_configs = [
            Path("asset_catalog.toml"),
            Path("asset_catalog.json"),
            Path("scripts/asset_catalog.toml"),
            Path("scripts/asset_catalog.json")
        ]

        for config_path in default_configs:
            if config_path.exists():
                console.print(f"[dim]Using configuration: {config_path}[/dim]")
                config = _read_config(config_path)
                break

        if config is None:
            console.print("[dim]Using default configuration[/dim]")
            config = CatalogConfig()

    try:
        config = CatalogConfig._apply_env_overrides(config)
    except ValueError as e:
        console.print(f"[red]Invalid environment override:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    env_vars_used = [key for key in os.environ if key.startswith(ENV_PREFIX)]
    if env_vars_used:
        console.print(f"[dim]Environment overrides applied: {len(env_vars_used)} variables[/dim]")

    return config


def _read_config(config_path: Path) -> CatalogConfig:
    """Parse a configuration file, turning malformed content into exit code 1."""
    try:
        return CatalogConfig.from_file(config_path)
    except (ValueError, TypeError, AttributeError, OSError) as e:
        # tomllib.TOMLDecodeError and json.JSONDecodeError are both ValueErrors
        console.print(f"[red]Invalid configuration file {escape(str(config_path))}:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def _display_config(config: CatalogConfig) -> None:
    """Display configuration in a formatted table."""
    table = Table(title="Asset Catalog Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    # Paths
    table.add_row("Asset Directory", config.asset_dir)
    table.add_row("Texture Catalog", config.out_file)
    table.add_row("Spritesheet", config.spritesheet or "-")
    table.add_row("Sound Catalog", config.sound_out_file)
    table.add_row("Audio Sprite", config.sound_sprite or "-")

    # Atlas settings
    table.add_row("Atlas Padding", str(config.atlas_padding))
    table.add_row("Atlas Max Size", f"{config.atlas_max_size[0]}×{config.atlas_max_size[1]}")
    table.add_row("Atlas Exclude", ", ".join(config.atlas_exclude) or "-")
    table.add_row("Compression Level", str(config.compression_level))

    # Inputs
    table.add_row("Image Extensions", ", ".join(config.image_extensions))
    table.add_row("Audio Formats", ", ".join(config.audio_formats) or "-")
    table.add_row("Sprite Exclude", ", ".join(config.sprite_exclude) or "-")
    table.add_row("Workers", str(config.workers))

    console.print(table)


def _display_env_vars() -> None:
    """Display available environment variables for configuration."""
    table = Table(title="Asset Catalog Environment Variables")
    table.add_column("Environment Variable", style="cyan")
    table.add_column("Description", style="white")
    table.add_column("Example", style="green")

    for var_name, description, example in ENV_VARS:
        table.add_row(var_name, description, example)

    console.print(table)
    console.print("\n[dim]Set these environment variables to override configuration file settings.[/dim]")
    console.print("[dim]Example: export ASSET_CATALOG_ASSET_DIR=assets/images[/dim]")


if __name__ == "__main__":
    app()
