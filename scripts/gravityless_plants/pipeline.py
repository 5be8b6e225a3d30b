"""
Generator pipeline coordinating mod resolution, plant rotation, override synthesis and output.
"""

import time
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .config import GeneratorConfig
from .content import ContentStore, FileHandle, StructuredFile
from .errors import ConfigurationError, GeneratorError, PlantDataError
from .processing.scanner import DefinitionScanner
from .processing.frames import GeometryTransformer
from .processing.overrides import OverrideSynthesizer, create_override_strategy
from .processing.mod import OverrideContainer, OverrideModBuilder, packed_manifest
from .processing.writer import PersistenceSink
from .providers.base import ModLocator
from .providers.sources import create_mod_locator
from .utils.tools import AssetTools, zip_directory


@dataclass
class PackageResult:
    """Archives produced for one override container."""
    container: str
    zip_path: Path
    modpak_path: Optional[Path] = None


@dataclass
class GenerationState:
    """Current state of a generator run."""
    containers: List[OverrideContainer] = field(default_factory=list)
    packages: List[PackageResult] = field(default_factory=list)
    files_generated: int = 0
    files_written: int = 0
    plants_processed: int = 0
    plants_skipped: int = 0
    warnings: List[str] = field(default_factory=list)
    start_time: Optional[float] = None
    duration: float = 0.0
    cache_hits: int = 0
    cache_misses: int = 0


class OverridePipeline:
    """
    Main coordinator generating gravityless plant override mods.

    One pipeline is one run: it owns the content store, so every file is read
    once and every generated file is shared between all mods of the run.
    Nothing is written until all mods have been processed, so configuration
    errors abort before any output exists.
    """

    def __init__(self, config: GeneratorConfig, store: Optional[ContentStore] = None,
                 tools: Optional[AssetTools] = None, locator: Optional[ModLocator] = None,
                 dry_run: bool = False):
        """
        Initialize the pipeline.

        Args:
            config: Generator configuration
            store: Content store, a fresh one by default
            tools: External asset tools, from the configured game directory by default
            locator: Mod reference resolver, the standard sources by default
            dry_run: Report files instead of writing them

        Raises:
            ConfigurationError: If the configuration does not validate
        """
        errors = config.validate()
        if errors:
            raise ConfigurationError("; ".join(errors))

        self.config = config
        self.logger = self._setup_logging()
        self.store = store or ContentStore()
        self.tools = tools or AssetTools(config.game_bin_path)
        self.locator = locator or create_mod_locator(self.tools, config.temp_dir, config.installed_mods_dir)
        self.dry_run = dry_run

        strategy = create_override_strategy(config.merge_mode)
        self.scanner = DefinitionScanner(self.store)
        self.transformer = GeometryTransformer(self.store, legacy_downwards=strategy.legacy_downwards)
        self.synthesizer = OverrideSynthesizer(self.store, strategy)
        self.builder = OverrideModBuilder(self.store, config)
        self.sink = PersistenceSink(dry_run=dry_run)

        self.state = GenerationState()
        self._output: Dict[Path, FileHandle] = {}

    def _setup_logging(self) -> logging.Logger:
        """Set up logging for the generator."""
        logger = logging.getLogger("gravityless_plants")
        logger.setLevel(self.config.log_level.upper())

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    @property
    def output_files(self) -> List[FileHandle]:
        """Every file produced so far, each once, in generation order."""
        return list(self._output.values())

    def add_output(self, file: FileHandle) -> None:
        self._output.setdefault(file.path, file)

    def run(self, mod_references: Sequence[str], output_dir: Path) -> GenerationState:
        """
        Generate override mods for the given mods and write them.

        Args:
            mod_references: Mod directories, archives or installed mod names
            output_dir: Directory the override containers are created in

        Returns:
            Final generation state
        """
        self.state.start_time = time.time()
        return self.generate(self.resolve_mods(mod_references), output_dir)

    def generate(self, mods: Sequence[StructuredFile], output_dir: Path) -> GenerationState:
        """Generate one override container per resolved mod, then write everything."""
        if self.state.start_time is None:
            self.state.start_time = time.time()
        output_dir = Path(output_dir).absolute()
        self.logger.info(f"Outputting all mods to {output_dir}")

        for mod in mods:
            self.generate_container(mod, output_dir)

        self.flush()
        return self.state

    def resolve_mods(self, mod_references: Sequence[str]) -> List[StructuredFile]:
        """
        Resolve every reference to its manifest before anything is generated.

        Raises:
            ModNotFoundError, MultipleManifestsError, ManifestNotFoundError
        """
        mods = []
        for reference in mod_references:
            mod_path = self.locator.resolve(str(reference))
            mods.append(self.scanner.find_modfile(mod_path, fallback=self.config.fallback_manifest))
        return mods

    def generate_container(self, mod: StructuredFile, output_dir: Path) -> OverrideContainer:
        """Create the override container of one mod and generate all its plant overrides."""
        container = self.builder.create_container(mod, output_dir)
        self.add_output(container.manifest)
        self.state.containers.append(container)
        self.logger.info(
            f"Generating {container.path.name}/{container.name} to override "
            f"{mod.root_path.name}/{mod['name'] or '(base assets)'}"
        )

        for plant in self.scanner.find_plants(mod):
            try:
                files = self.generate_plant_overrides(plant, container)
            except PlantDataError as e:
                if not self.config.skip_invalid_plants:
                    raise
                self.logger.warning(f"Skipping plant: {e}")
                self.state.warnings.append(str(e))
                container.skipped += 1
                self.state.plants_skipped += 1
                continue

            for file in files:
                self.add_output(file)
            container.plants += 1
            self.state.plants_processed += 1

        return container

    def generate_plant_overrides(self, plant: StructuredFile, container: OverrideContainer) -> List[FileHandle]:
        """Rotated frames, rotated images and the object override of one plant."""
        sprite = self.transformer.transform(plant, container.path)
        override = self.synthesizer.synthesize(sprite, container.path)
        return sprite.all + [override]

    def flush(self) -> List[FileHandle]:
        """Write every generated file and finish the run's statistics."""
        files = self.output_files
        self.state.files_generated = len(files)
        self.logger.info(f"Generated {len(files)} files")

        written = self.sink.flush(files)
        self.state.files_written = len(written)
        self.state.cache_hits = self.store.hits
        self.state.cache_misses = self.store.misses
        if self.state.start_time:
            self.state.duration = time.time() - self.state.start_time
        return written

    def package(self, output_dir: Path) -> List[PackageResult]:
        """
        Package every generated container as a .zip and a .modpak.

        The zip is made first so it keeps the readable manifest name; the
        manifest is then renamed to pak.modinfo for the asset packer.

        Raises:
            ExternalToolError: If the asset packer fails
        """
        output_dir = Path(output_dir).absolute()
        results = []
        for container in self.state.containers:
            name = container.path.name
            zip_path = zip_directory(container.path, output_dir / f"{name}.zip")
            packed_manifest(container.path)
            modpak_path = self.tools.pack(container.path, output_dir / f"{name}.modpak")
            self.logger.info(f"Packaged {name}")
            results.append(PackageResult(container=name, zip_path=zip_path, modpak_path=modpak_path))

        self.state.packages.extend(results)
        return results

    def build(self) -> GenerationState:
        """
        Full release build: unpack the base game assets, generate overrides for
        them and for every configured mod, and package all containers.

        Raises:
            GeneratorError: On the first failing step
        """
        temp_dir = Path(self.config.temp_dir).absolute()
        output_dir = Path(self.config.output_dir).absolute()
        temp_dir.mkdir(parents=True, exist_ok=True)
        output_dir.mkdir(parents=True, exist_ok=True)

        if not self.config.default_assets_pak.exists():
            raise GeneratorError(f"Base game assets not found at {self.config.default_assets_pak}")

        self.state.start_time = time.time()
        self.logger.info("Unpacking base game assets")
        default_assets = self.tools.unpack(self.config.default_assets_pak, temp_dir / "default_assets")

        # The base assets never ship a manifest
        mods = [self.scanner.find_modfile(default_assets.absolute(), fallback=True)]
        mods.extend(self.resolve_mods(self.config.mods_to_override))
        self.generate(mods, temp_dir)
        if not self.dry_run:
            self.package(output_dir)
        return self.state
