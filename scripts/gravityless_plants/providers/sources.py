"""
Concrete mod sources: unpacked directories, packed archives, zip files and installed mods.
"""

import shutil
import logging
from pathlib import Path
from typing import Set, Union

from ..errors import ModNotFoundError
from ..utils.tools import AssetTools, extract_zip
from .base import ModLocator, ModSource

logger = logging.getLogger(__name__)

PACKED_SUFFIXES = {".pak", ".modpak"}


class ArchiveSource(ModSource):
    """
    Base for sources that unpack an archive into the temp directory.

    Each archive gets its own directory named after the archive file, so
    archives sharing a stem (soy.zip, soy.modpak) never overwrite each other.
    """

    def __init__(self, temp_dir: Union[str, Path]):
        self.temp_dir = Path(temp_dir)
        self._used: Set[Path] = set()

    def unpack_dir(self, archive: Path) -> Path:
        """Fresh directory for one archive, numbered when the name was used earlier in the run."""
        dest_dir = self.temp_dir / archive.name
        count = 1
        while dest_dir in self._used:
            count += 1
            dest_dir = self.temp_dir / f"{archive.name}-{count}"
        self._used.add(dest_dir)

        if dest_dir.exists():
            shutil.rmtree(dest_dir)
        dest_dir.mkdir(parents=True)
        return dest_dir


class DirectorySource(ModSource):
    """A mod that is already unpacked."""

    def can_resolve(self, reference):
        return Path(reference).expanduser().is_dir()

    def resolve(self, reference):
        return Path(reference).expanduser()


class PackedArchiveSource(ArchiveSource):
    """A .pak/.modpak archive, unpacked with the game's asset_unpacker."""

    def __init__(self, tools: AssetTools, temp_dir: Union[str, Path]):
        super().__init__(temp_dir)
        self.tools = tools

    def can_resolve(self, reference):
        path = Path(reference).expanduser()
        return path.is_file() and path.suffix.lower() in PACKED_SUFFIXES

    def resolve(self, reference):
        archive = Path(reference).expanduser()
        # The unpacked directory keeps the archive stem, which names the container
        dest_dir = self.unpack_dir(archive) / archive.stem
        logger.info(f"Unpacking {archive} to {dest_dir}")
        return self.tools.unpack(archive, dest_dir)


class ZipArchiveSource(ArchiveSource):
    """A mod distributed as a zip of its directory."""

    def can_resolve(self, reference):
        path = Path(reference).expanduser()
        return path.is_file() and path.suffix.lower() == ".zip"

    def resolve(self, reference):
        archive = Path(reference).expanduser()
        dest_dir = self.unpack_dir(archive) / archive.stem
        dest_dir.mkdir()
        logger.info(f"Extracting {archive} to {dest_dir}")
        return extract_zip(archive, dest_dir)


class InstalledModSource(ModSource):
    """A mod referenced by name, looked up in the game's mods directory."""

    def __init__(self, mods_dir: Union[str, Path], locator: ModLocator):
        self.mods_dir = Path(mods_dir)
        self.locator = locator

    def can_resolve(self, reference):
        return not Path(reference).expanduser().exists() and Path(reference).name == reference

    def resolve(self, reference):
        candidates = [self.mods_dir / reference]
        candidates.extend(self.mods_dir / f"{reference}{suffix}" for suffix in (".modpak", ".pak", ".zip"))
        for candidate in candidates:
            if candidate.exists():
                return self.locator.resolve(str(candidate))
        raise ModNotFoundError(reference, str(self.mods_dir / reference))


def create_mod_locator(tools: AssetTools, temp_dir: Union[str, Path], mods_dir: Union[str, Path]) -> ModLocator:
    """Locator trying directories, archives, zips, then installed mod names."""
    locator = ModLocator()
    locator.register_source(DirectorySource())
    locator.register_source(PackedArchiveSource(tools, temp_dir))
    locator.register_source(ZipArchiveSource(temp_dir))
    locator.register_source(InstalledModSource(mods_dir, locator))
    return locator
