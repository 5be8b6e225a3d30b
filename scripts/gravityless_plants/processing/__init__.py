"""
Processing modules for scanning mods, rotating plant sprites, synthesizing overrides and writing results.
"""

from .scanner import DefinitionScanner
from .frames import (
    Direction,
    FrameGrid,
    GeometryTransformer,
    ImageReference,
    PlantSprite,
    rotate_names,
)
from .overrides import (
    OverrideStrategy,
    MergeOverrideStrategy,
    OverwriteOverrideStrategy,
    OverrideSynthesizer,
    create_override_strategy,
)
from .mod import OverrideContainer, OverrideModBuilder, packed_manifest
from .writer import PersistenceSink

__all__ = [
    "DefinitionScanner",
    "Direction",
    "FrameGrid",
    "GeometryTransformer",
    "ImageReference",
    "PlantSprite",
    "rotate_names",
    "OverrideStrategy",
    "MergeOverrideStrategy",
    "OverwriteOverrideStrategy",
    "OverrideSynthesizer",
    "create_override_strategy",
    "OverrideContainer",
    "OverrideModBuilder",
    "packed_manifest",
    "PersistenceSink",
]
