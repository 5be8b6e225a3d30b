"""
Memoized registry of file handles for one generator run.
"""

import os
import logging
from typing import Dict, Iterator, Optional, Type, TypeVar

from .files import BinaryFile, FileHandle, PathLike, StructuredFile

logger = logging.getLogger(__name__)

HandleT = TypeVar("HandleT", bound=FileHandle)


class ContentStore:
    """
    Maps absolute paths to file handles.

    Every path is read and parsed at most once; later lookups of the same path
    return the very same handle, whatever root they pass. Components mutate
    handles in place and rely on that sharing, e.g. two plants using one
    sprite sheet end up with one set of rotated files.

    Not thread-safe: one store per run, used from one thread.
    """

    def __init__(self):
        self._files: Dict[str, FileHandle] = {}
        self.hits = 0
        self.misses = 0

    def get(self, path: PathLike, root_path: PathLike, kind: Type[HandleT] = StructuredFile) -> HandleT:
        """
        Get the handle for a path, loading it on first access.

        Args:
            path: Absolute path of the file
            root_path: Mod root the relative path is computed from; ignored
                when the path was looked up before
            kind: Handle class to create on first access

        Returns:
            The shared handle for the path

        Raises:
            ValueError: If path is not absolute
            TypeError: If the path was loaded before as a different kind
            DocumentParseError: If a structured file exists but cannot be parsed
        """
        path = os.fspath(path)
        if not os.path.isabs(path):
            raise ValueError(f"Content store paths must be absolute, got {path}")

        key = os.path.normpath(path)
        handle = self._files.get(key)
        if handle is not None:
            if not isinstance(handle, kind):
                raise TypeError(f"{key} already loaded as {type(handle).__name__}, not {kind.__name__}")
            self.hits += 1
            return handle

        handle = kind(key, root_path)
        self._files[key] = handle
        self.misses += 1
        logger.debug(f"Loaded {handle!r} (exists={handle.exists})")
        return handle

    def get_binary(self, path: PathLike, root_path: PathLike) -> BinaryFile:
        return self.get(path, root_path, BinaryFile)

    def get_structured(self, path: PathLike, root_path: PathLike) -> StructuredFile:
        return self.get(path, root_path, StructuredFile)

    def peek(self, path: PathLike) -> Optional[FileHandle]:
        """Return the cached handle for a path without loading anything."""
        return self._files.get(os.path.normpath(os.fspath(path)))

    def __contains__(self, path: PathLike) -> bool:
        return os.path.normpath(os.fspath(path)) in self._files

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[FileHandle]:
        return iter(self._files.values())
