"""
Gravityless Plants Generator for Starbound

Scans the game's assets and installed mods for farmable plants, rotates their
sprite sheets and frame grids, and generates override mods that let the
plants be placed on walls and ceilings as well as floors.
"""

__version__ = "1.0.0"
__author__ = "Gravityless Plants Team"

from .config import GeneratorConfig
from .content import ContentStore, BinaryFile, StructuredFile
from .errors import GeneratorError
from .pipeline import OverridePipeline, GenerationState

__all__ = [
    "GeneratorConfig",
    "ContentStore",
    "BinaryFile",
    "StructuredFile",
    "GeneratorError",
    "OverridePipeline",
    "GenerationState",
]
