"""
Override mod containers and their manifests.
"""

import shutil
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..config import GeneratorConfig
from ..content import ContentStore, StructuredFile

logger = logging.getLogger(__name__)

PACKED_MANIFEST_NAME = "pak.modinfo"


@dataclass
class OverrideContainer:
    """An override mod being generated for one input mod."""
    name: str
    path: Path
    manifest: StructuredFile
    source: StructuredFile
    plants: int = 0
    skipped: int = 0

    @property
    def standalone(self) -> bool:
        """True when overriding manifest-less assets, i.e. the base game."""
        return not self.source.exists


class OverrideModBuilder:
    """Creates override containers and writes their manifests."""

    def __init__(self, store: ContentStore, config: GeneratorConfig):
        self.store = store
        self.config = config

    def override_name(self, mod: StructuredFile) -> str:
        """Name of the override mod: <modname>_<suffix>, or the bare suffix."""
        if mod.exists and mod["name"]:
            return f"{mod['name']}_{self.config.suffix}"
        return self.config.suffix

    def container_path(self, mod: StructuredFile, output_dir: Path) -> Path:
        """Directory of the override mod: <mod dir>_<suffix>, or the bare suffix."""
        if mod.exists:
            dirname = f"{mod.root_path.name}_{self.config.suffix}"
        else:
            dirname = self.config.suffix
        return (Path(output_dir) / dirname).absolute()

    def create_container(self, mod: StructuredFile, output_dir: Path) -> OverrideContainer:
        """
        Create the override container for a mod.

        With clean_output set, a container left by an earlier run is removed
        first so the generation starts from scratch.

        Args:
            mod: Manifest of the mod to override (may be synthesized)
            output_dir: Directory the container is created in

        Returns:
            The container with its manifest filled in
        """
        path = self.container_path(mod, output_dir)
        if self.config.clean_output and path.exists():
            logger.info(f"Removing previous output {path}")
            shutil.rmtree(path)

        name = self.override_name(mod)
        manifest = self.build_manifest(mod, path, name)
        return OverrideContainer(name=name, path=path, manifest=manifest, source=mod)

    def build_manifest(self, mod: StructuredFile, container_path: Path, name: str) -> StructuredFile:
        """Fill in the .modinfo of an override container."""
        manifest = self.store.get_structured(container_path / f"{name}.modinfo", container_path)
        manifest["name"] = name
        manifest["version"] = mod["version"] or self.config.default_game_version
        if mod.exists and mod["name"]:
            manifest["dependencies"] = [mod["name"]]
        manifest["path"] = mod["path"] or "."
        manifest["metadata"] = {
            "version": self.config.version,
            "author": self.config.author,
            "description": self._description(mod),
            "support_url": self.config.support_url,
        }
        return manifest

    def _description(self, mod: StructuredFile) -> str:
        if mod.exists and mod["name"]:
            return f"{self.config.description} for {mod['name']}"
        return self.config.description


def packed_manifest(container_path: Path) -> Optional[Path]:
    """
    Rename a container's manifest to the name the asset packer expects.

    Returns:
        Path of the renamed manifest, or None if the container has none
    """
    container_path = Path(container_path)
    target = container_path / PACKED_MANIFEST_NAME
    manifests = [path for path in container_path.glob("*.modinfo") if path.name != PACKED_MANIFEST_NAME]
    if not manifests:
        return target if target.exists() else None
    if target.exists():
        target.unlink()
    manifests[0].rename(target)
    return target
