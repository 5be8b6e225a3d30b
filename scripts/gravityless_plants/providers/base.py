"""
Abstract base class for mod sources.

A mod source turns a user-supplied mod reference (a directory, an archive, an
installed mod's name) into the path of an unpacked mod directory.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from ..errors import ModNotFoundError


class ModSource(ABC):
    """Abstract base class for mod sources."""

    @abstractmethod
    def can_resolve(self, reference: str) -> bool:
        """Check whether this source handles the reference."""
        pass

    @abstractmethod
    def resolve(self, reference: str) -> Path:
        """
        Return the unpacked directory for the reference.

        Raises:
            ModNotFoundError: If the reference cannot be resolved
            ExternalToolError: If unpacking fails
        """
        pass


class ModLocator:
    """Resolves mod references by asking each registered source in turn."""

    def __init__(self, sources: Optional[List[ModSource]] = None):
        self._sources: List[ModSource] = list(sources or [])

    def register_source(self, source: ModSource) -> None:
        """
        Register a source; sources are tried in registration order.

        Raises:
            ValueError: If source doesn't inherit from ModSource
        """
        if not isinstance(source, ModSource):
            raise ValueError(f"Source {source!r} must inherit from ModSource")
        self._sources.append(source)

    def list_sources(self) -> List[str]:
        return [source.__class__.__name__ for source in self._sources]

    def resolve(self, reference: str) -> Path:
        """
        Resolve a mod reference to an absolute directory.

        Raises:
            ModNotFoundError: If no source handles the reference
        """
        for source in self._sources:
            if source.can_resolve(reference):
                return source.resolve(reference).absolute()
        raise ModNotFoundError(reference)
