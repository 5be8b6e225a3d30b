"""
Command-line interface for the gravityless plants generator.
"""

import os
import sys
from importlib.metadata import version as package_version, PackageNotFoundError
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn

from . import __version__
from .config import GeneratorConfig
from .errors import GeneratorError

app = typer.Typer(
    name="gravityless-plants",
    help="Gravityless plants generator - Make farmable plants placeable on walls and ceilings",
    add_completion=False,
    rich_markup_mode="rich",
    epilog="""
[bold]Examples:[/bold]
  [cyan]python scripts/gravityless_plants.py generate -i temp/default_assets -o temp[/cyan]   Base game plants
  [cyan]python scripts/gravityless_plants.py generate -i soy -i cotton -o temp[/cyan]         Installed mods
  [cyan]python scripts/gravityless_plants.py build[/cyan]                                    Full release build

[bold]Environment Variables:[/bold]
  Use [cyan]python scripts/gravityless_plants.py config --env-vars[/cyan] to see all available variables.
    """
)
console = Console()


@app.command()
def generate(
    inputs: List[str] = typer.Option(..., "--input", "-i", help="Mod(s) to generate gravityless plants for: unpacked directory, archive, or installed mod name"),
    output: Path = typer.Option(..., "--output", "-o", help="Directory to output gravityless plants to"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path"),
    mode: Optional[str] = typer.Option(None, "--mode", help="Override schema: merge or overwrite (deprecated)"),
    fallback_manifest: Optional[bool] = typer.Option(None, "--fallback-manifest/--no-fallback-manifest", help="Synthesize a manifest for mods without .modinfo"),
    clean: Optional[bool] = typer.Option(None, "--clean/--no-clean", help="Remove previous output containers first"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be written without writing")
):
    """Generate override mods for the farmable plants of the given mods."""
    config = _load_config(config_file)
    if mode is not None:
        config.merge_mode = mode.lower()
    if fallback_manifest is not None:
        config.fallback_manifest = fallback_manifest
    if clean is not None:
        config.clean_output = clean
    _check_config(config)

    from .pipeline import OverridePipeline

    try:
        pipeline = OverridePipeline(config, dry_run=dry_run)
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True
        ) as progress:
            progress.add_task(f"Generating overrides for {len(inputs)} mod(s)...", total=None)
            state = pipeline.run(inputs, output)
    except GeneratorError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(e.exit_code)

    _display_generation_summary(state, dry_run)


@app.command()
def scan(
    mod: str = typer.Argument(..., help="Mod directory, archive, or installed mod name"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path")
):
    """List the farmable plants of a mod and their footprints."""
    config = _load_config(config_file)

    from .pipeline import OverridePipeline
    from .processing.frames import ImageReference

    try:
        pipeline = OverridePipeline(config, dry_run=True)
        mod_file = pipeline.resolve_mods([mod])[0]
        plants = pipeline.scanner.find_plants(mod_file)
    except GeneratorError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(e.exit_code)

    table = Table(title=f"Farmable plants in {mod_file['name'] or mod_file.root_path.name}")
    table.add_column("Object", style="cyan")
    table.add_column("Image", style="green")
    table.add_column("Footprint", style="yellow")

    problems = 0
    for plant in plants:
        reference = ImageReference.from_orientation(plant.orientations[0]) if plant.orientations else None
        try:
            sprite = pipeline.transformer.load_sprite(plant)
            footprint = f"{sprite.footprint[0]}×{sprite.footprint[1]}"
        except GeneratorError as e:
            footprint = f"[red]{e}[/red]"
            problems += 1
        table.add_row(str(plant.relative_path), reference.path if reference else "-", footprint)

    console.print(table)
    console.print(f"[green]✓[/green] {len(plants)} farmable plants, {problems} with problems")


@app.command()
def build(
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Generate without writing or packaging")
):
    """Unpack the base game, generate overrides for it and the configured mods, and package them."""
    config = _load_config(config_file)
    _check_config(config)

    from .pipeline import OverridePipeline

    console.print("[bold blue]Building gravityless plants release...[/bold blue]")
    try:
        pipeline = OverridePipeline(config, dry_run=dry_run)
        state = pipeline.build()
    except GeneratorError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(e.exit_code)

    _display_generation_summary(state, dry_run)
    for package in state.packages:
        console.print(f"  • {package.zip_path.name}, {package.modpak_path.name if package.modpak_path else '-'}")


@app.command()
def config(
    show: bool = typer.Option(False, "--show", help="Show current configuration"),
    validate_config: bool = typer.Option(False, "--validate", help="Validate configuration file"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path"),
    env_vars: bool = typer.Option(False, "--env-vars", help="Show available environment variables"),
    init: Optional[Path] = typer.Option(None, "--init", help="Write the default configuration as TOML")
):
    """Manage generator configuration."""
    if env_vars:
        _display_env_vars()
        return

    if init:
        path = GeneratorConfig().write_toml(init)
        console.print(f"[green]✓[/green] Wrote default configuration to {path}")
        return

    if show or validate_config:
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
            else:
                console.print("[green]✓ Configuration is valid[/green]")
    else:
        console.print("Use --show to display configuration, --validate to check it, --init to write defaults, or --env-vars to see environment variables.")


@app.command()
def version():
    """Show generator version information."""
    console.print("[bold]Gravityless Plants Generator[/bold]")
    console.print(f"Version: {__version__}")
    console.print("Python: " + sys.version.split()[0])

    deps_status = []
    for package in ("Pillow", "numpy", "json5", "toml", "typer", "rich"):
        try:
            deps_status.append((package, package_version(package), "✓"))
        except PackageNotFoundError:
            deps_status.append((package, "Not installed", "✗"))

    console.print("\n[bold]Dependencies:[/bold]")
    table = Table(show_header=False)
    table.add_column("Status", width=3)
    table.add_column("Package", style="cyan")
    table.add_column("Version", style="green")

    for name, dep_version, status in deps_status:
        color = "green" if status == "✓" else "red"
        table.add_row(f"[{color}]{status}[/{color}]", name, dep_version)

    console.print(table)


def _load_config(config_file: Optional[Path]) -> GeneratorConfig:
    """Load configuration from file or use defaults with environment variable support."""
    config = None

    if config_file:
        if not config_file.exists():
            console.print(f"[red]Configuration file not found:[/red] {config_file}")
            raise typer.Exit(1)
        config = GeneratorConfig.from_file(config_file)
        console.print(f"[dim]Using configuration: {config_file}[/dim]")
    else:
        default_configs = [
            Path("gravityless_plants.toml"),
            Path("gravityless_plants.json"),
            Path("scripts/gravityless_plants.toml"),
            Path("scripts/gravityless_plants.json")
        ]

        for config_path in default_configs:
            if config_path.exists():
                console.print(f"[dim]Using configuration: {config_path}[/dim]")
                config = GeneratorConfig.from_file(config_path)
                break

        if config is None:
            config = GeneratorConfig()

    # Apply environment variable overrides
    config = GeneratorConfig._apply_env_overrides(config)

    env_vars_used = [key for key in os.environ if key.startswith('GRAVITYLESS_') or key.startswith('STARBOUND_')]
    if env_vars_used:
        console.print(f"[dim]Environment overrides applied: {len(env_vars_used)} variables[/dim]")

    return config


def _check_config(config: GeneratorConfig) -> None:
    errors = config.validate()
    if errors:
        console.print("[red]Configuration validation errors:[/red]")
        for error in errors:
            console.print(f"  • {error}")
        raise typer.Exit(2)


def _display_generation_summary(state, dry_run: bool = False) -> None:
    """Display generation summary."""
    console.print("\n[bold]Generation Summary[/bold]")
    console.print("=" * 50)

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Total execution time", f"{state.duration:.2f}s")
    table.add_row("Override mods", str(len(state.containers)))
    table.add_row("Plants processed", str(state.plants_processed))
    table.add_row("Plants skipped", str(state.plants_skipped))
    table.add_row("Files generated", str(state.files_generated))
    table.add_row("Files written" if not dry_run else "Files to write", str(state.files_written))
    table.add_row("Cache hits", str(state.cache_hits))
    table.add_row("Cache misses", str(state.cache_misses))

    console.print(table)

    if state.containers:
        container_table = Table()
        container_table.add_column("Override mod", style="cyan")
        container_table.add_column("Depends on", style="yellow")
        container_table.add_column("Plants", style="green")
        container_table.add_column("Path", style="dim")

        for container in state.containers:
            dependencies = container.manifest["dependencies"] or []
            container_table.add_row(
                container.name,
                ", ".join(dependencies) if dependencies else "-",
                str(container.plants),
                str(container.path)
            )

        console.print(container_table)

    for warning in state.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")


def _display_config(config: GeneratorConfig) -> None:
    """Display configuration in a formatted table."""
    table = Table(title="Gravityless Plants Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Suffix", config.suffix)
    table.add_row("Version", config.version)
    table.add_row("Author", config.author)
    table.add_row("Description", config.description)
    table.add_row("Support URL", config.support_url or "-")
    table.add_row("Default Game Version", config.default_game_version)

    table.add_row("Merge Mode", config.merge_mode)
    table.add_row("Fallback Manifest", str(config.fallback_manifest))
    table.add_row("Clean Output", str(config.clean_output))
    table.add_row("Skip Invalid Plants", str(config.skip_invalid_plants))

    table.add_row("Game Directory", str(config.game_path))
    table.add_row("Game Binaries", str(config.game_bin_path))
    table.add_row("Temp Directory", config.temp_dir)
    table.add_row("Output Directory", config.output_dir)
    table.add_row("Mods To Override", ", ".join(config.mods_to_override) or "-")
    table.add_row("Log Level", config.log_level)

    console.print(table)


def _display_env_vars() -> None:
    """Display available environment variables for configuration."""
    table = Table(title="Gravityless Plants Environment Variables")
    table.add_column("Environment Variable", style="cyan")
    table.add_column("Description", style="white")
    table.add_column("Example", style="green")

    env_vars = [
        ("STARBOUND_DIR", "Game installation directory", "~/.steam/steam/steamapps/common/Starbound"),
        ("STARBOUND_BIN_DIR", "Directory with asset_packer/asset_unpacker", "$STARBOUND_DIR/linux"),
        ("GRAVITYLESS_SUFFIX", "Suffix of generated override mods", "gravityless_plants"),
        ("GRAVITYLESS_VERSION", "Version written to manifest metadata", "1.0.0"),
        ("GRAVITYLESS_DEFAULT_GAME_VERSION", "Manifest version when the mod has none", "1.4.4"),
        ("GRAVITYLESS_MERGE_MODE", "Override schema (merge/overwrite)", "merge"),
        ("GRAVITYLESS_FALLBACK_MANIFEST", "Synthesize missing manifests (true/false)", "true"),
        ("GRAVITYLESS_CLEAN_OUTPUT", "Remove previous output first (true/false)", "true"),
        ("GRAVITYLESS_SKIP_INVALID_PLANTS", "Skip plants with missing data (true/false)", "false"),
        ("GRAVITYLESS_TEMP_DIR", "Temporary directory path", "temp"),
        ("GRAVITYLESS_OUTPUT_DIR", "Output directory path", "output"),
        ("GRAVITYLESS_MODS_TO_OVERRIDE", "Comma-separated installed mods for build", "soy,caffeine,Starbooze,cotton"),
        ("GRAVITYLESS_LOG_LEVEL", "Logging level", "INFO"),
    ]

    for var_name, description, example in env_vars:
        table.add_row(var_name, description, example)

    console.print(table)
    console.print("\n[dim]Set these environment variables to override configuration file settings.[/dim]")


if __name__ == "__main__":
    app()
