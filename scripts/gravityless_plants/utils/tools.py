"""
Wrappers around the game's asset tools and the archive helpers used for packaging.

The game ships two binaries: asset_unpacker (archive -> directory) and
asset_packer (directory -> archive). Both are run as blocking subprocesses;
a non-zero exit or a missing output fails the step with ExternalToolError.
"""

import os
import zipfile
import platform
import subprocess
import logging
from pathlib import Path
from typing import List, Union

from ..errors import ExternalToolError

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class AssetTools:
    """Runs the game's asset packer and unpacker."""

    def __init__(self, bin_dir: PathLike):
        self.bin_dir = Path(bin_dir)
        self.is_windows = platform.system() == "Windows"

    def tool_path(self, name: str) -> Path:
        """Path of a tool binary in the game's binary directory."""
        if self.is_windows:
            name += ".exe"
        return self.bin_dir / name

    def unpack(self, archive_path: PathLike, dest_dir: PathLike) -> Path:
        """
        Unpack a .pak/.modpak archive into a directory.

        Raises:
            ExternalToolError: If the unpacker fails or produces nothing
        """
        dest_dir = Path(dest_dir)
        self._run("unpack", [self.tool_path("asset_unpacker"), archive_path, dest_dir])
        if not dest_dir.is_dir():
            raise ExternalToolError("unpack", f"no directory produced at {dest_dir}")
        return dest_dir

    def pack(self, source_dir: PathLike, archive_path: PathLike) -> Path:
        """
        Pack a directory into a .pak/.modpak archive.

        Raises:
            ExternalToolError: If the packer fails or produces nothing
        """
        archive_path = Path(archive_path)
        archive_path.parent.mkdir(parents=True, exist_ok=True)
        if archive_path.exists():
            archive_path.unlink()
        self._run("pack", [self.tool_path("asset_packer"), source_dir, archive_path])
        if not archive_path.is_file():
            raise ExternalToolError("pack", f"no archive produced at {archive_path}")
        return archive_path

    def _run(self, step: str, command: List[PathLike]) -> None:
        command = [str(part) for part in command]
        if not Path(command[0]).exists():
            raise ExternalToolError(step, f"tool not found: {command[0]}")

        logger.info(f"Running {step}: {' '.join(command)}")
        try:
            result = subprocess.run(command, capture_output=True, text=True)
        except OSError as e:
            raise ExternalToolError(step, str(e))

        if result.returncode != 0:
            detail = (result.stderr or result.stdout or "").strip()
            raise ExternalToolError(step, f"exit status {result.returncode}: {detail}", result.returncode)


def zip_directory(source_dir: PathLike, zip_path: PathLike) -> Path:
    """
    Zip a directory so the directory itself is the archive's top-level entry.

    Args:
        source_dir: Directory to archive
        zip_path: Archive to create, replaced if it exists

    Returns:
        Path to the created archive
    """
    source_dir = Path(source_dir)
    zip_path = Path(zip_path)
    zip_path.parent.mkdir(parents=True, exist_ok=True)
    if zip_path.exists():
        zip_path.unlink()

    with zipfile.ZipFile(zip_path, 'w', zipfile.ZIP_DEFLATED) as zip_ref:
        for file_path in sorted(source_dir.rglob("*")):
            if file_path.is_file():
                arcname = Path(source_dir.name) / file_path.relative_to(source_dir)
                zip_ref.write(file_path, arcname.as_posix())

    logger.info(f"Created archive {zip_path}")
    return zip_path


def extract_zip(zip_path: PathLike, dest_dir: PathLike) -> Path:
    """
    Extract a zip archive, descending into its single top-level folder if it has one.

    Raises:
        ExternalToolError: If the file is not a valid zip archive
    """
    dest_dir = Path(dest_dir)
    try:
        with zipfile.ZipFile(zip_path, 'r') as zip_ref:
            zip_ref.extractall(dest_dir)
    except zipfile.BadZipFile as e:
        raise ExternalToolError("extract", f"invalid zip file {zip_path}: {e}")

    entries = [entry for entry in dest_dir.iterdir() if entry.name != "__MACOSX"]
    if len(entries) == 1 and entries[0].is_dir():
        return entries[0]
    return dest_dir
