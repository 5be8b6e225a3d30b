"""
Mod sources resolving user-supplied mod references to unpacked directories.
"""

from .base import ModSource, ModLocator
from .sources import (
    DirectorySource,
    PackedArchiveSource,
    ZipArchiveSource,
    InstalledModSource,
    create_mod_locator,
)

__all__ = [
    "ModSource",
    "ModLocator",
    "DirectorySource",
    "PackedArchiveSource",
    "ZipArchiveSource",
    "InstalledModSource",
    "create_mod_locator",
]
