"""
Persistence of generated files.
"""

import logging
from typing import Iterable, List

from ..content import FileHandle
from ..errors import PersistenceError

logger = logging.getLogger(__name__)


class PersistenceSink:
    """Writes generated and modified file handles to disk."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def flush(self, files: Iterable[FileHandle]) -> List[FileHandle]:
        """
        Write every dirty file, creating parent directories as needed.

        Files that were not modified this run (e.g. hand-authored overrides
        that were kept) are skipped.

        Returns:
            The files that were written, or would be in a dry run

        Raises:
            PersistenceError: On the first file that cannot be written
        """
        written = []
        for file in files:
            if not file.dirty:
                logger.debug(f"Unchanged, not writing {file.path}")
                continue

            if self.dry_run:
                logger.info(f"Would write {file.path}")
            else:
                self.write(file)
            written.append(file)

        return written

    def write(self, file: FileHandle) -> None:
        try:
            payload = file.serialize()
            file.path.parent.mkdir(parents=True, exist_ok=True)
            file.path.write_bytes(payload)
        except (OSError, ValueError) as e:
            raise PersistenceError(str(file.path), str(e))

        file.exists = True
        file.dirty = False
        logger.debug(f"Wrote {file.path} ({len(payload)} bytes)")
