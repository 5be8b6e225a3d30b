"""
Override synthesis for farmable objects.

The override replaces an object's orientations with four entries: the
original top-down placement, freed from its soil anchors, plus one entry per
rotated sprite. Merged onto the base object this lets the plant be placed on
floors, ceilings and both walls.

Two document schemas exist. The merge schema (default) is a patch carrying a
"__merge" directive that the game applies onto the base object. The
overwrite schema is the deprecated legacy format where the override is the
complete object document.
"""

import os
import copy
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple

from ..content import ContentStore, StructuredFile
from .frames import Direction, PlantSprite, TILE_PIXELS

logger = logging.getLogger(__name__)

MERGE_KEY = "__merge"
ANIMATION_CYCLE = 0.5
SPACE_SCAN = 0.1

Point = List[int]


def _rectangle(width: int, height: int, place: Callable[[int, int], Point]) -> List[Point]:
    return [place(x, y) for y in range(height) for x in range(width)]


# imagePosition, space placement and foreground anchor per direction.
# Tile coordinates have y pointing up, so "down" hangs below its anchor row.
GEOMETRY: Dict[Direction, Tuple[Callable[[int], Point], Callable[[int, int], Point], Callable[[int], Point]]] = {
    Direction.DOWNWARDS: (
        lambda height: [0, -((height - 1) * TILE_PIXELS)],
        lambda x, y: [x, -y],
        lambda x: [x, 1],
    ),
    Direction.LEFTWARDS: (
        lambda height: [-((height - 1) * TILE_PIXELS), 0],
        lambda x, y: [-y, x],
        lambda x: [1, x],
    ),
    Direction.RIGHTWARDS: (
        lambda height: [0, 0],
        lambda x, y: [y, x],
        lambda x: [-1, x],
    ),
}


def top_orientation(original: Dict[str, Any], width: int, height: int) -> Dict[str, Any]:
    """The original orientation with a full footprint and anchors on the row below."""
    top = copy.deepcopy(original)
    top["spaces"] = _rectangle(width, height, lambda x, y: [x, y])
    top.pop("anchors", None)
    top["fgAnchors"] = [[x, -1] for x in range(width)]
    return top


def rotated_orientation(direction: Direction, image_key: str, image: str,
                        width: int, height: int) -> Dict[str, Any]:
    """Orientation entry showing a rotated sprite anchored on the matching side."""
    image_position, place, anchor = GEOMETRY[direction]
    return {
        image_key: image,
        "imagePosition": image_position(height),
        "frames": 1,
        "animationCycle": ANIMATION_CYCLE,
        "spaceScan": SPACE_SCAN,
        "requireSoilAnchors": True,
        "requireTilledAnchors": False,
        "spaces": _rectangle(width, height, place),
        "fgAnchors": [anchor(x) for x in range(width)],
    }


class OverrideStrategy(ABC):
    """How the new orientations are expressed as an override document."""

    mode: str = ""
    legacy_downwards: bool = False

    @abstractmethod
    def build_document(self, plant: StructuredFile, orientations: List[Dict[str, Any]]) -> Dict[str, Any]:
        pass


class MergeOverrideStrategy(OverrideStrategy):
    """Patch document with an overwrite directive for the orientations list."""

    mode = "merge"

    def build_document(self, plant, orientations):
        return {
            MERGE_KEY: [["overwrite", "orientations"]],
            "orientations": orientations,
        }


class OverwriteOverrideStrategy(OverrideStrategy):
    """Deprecated: full object document with the orientations replaced."""

    mode = "overwrite"
    legacy_downwards = True

    def build_document(self, plant, orientations):
        document = copy.deepcopy(plant.data)
        document.pop(MERGE_KEY, None)
        document["orientations"] = orientations
        return document


STRATEGIES = {
    MergeOverrideStrategy.mode: MergeOverrideStrategy,
    OverwriteOverrideStrategy.mode: OverwriteOverrideStrategy,
}


def create_override_strategy(mode: str) -> OverrideStrategy:
    """
    Create the strategy for a merge mode.

    Raises:
        ValueError: If the mode is unknown
    """
    if mode not in STRATEGIES:
        raise ValueError(f"Unknown merge mode '{mode}'. Available: {list(STRATEGIES.keys())}")
    if mode == OverwriteOverrideStrategy.mode:
        logger.warning("Overwrite mode is deprecated; its downwards frames differ from merge mode for multi-row sheets")
    return STRATEGIES[mode]()


class OverrideSynthesizer:
    """Writes the orientation override of a farmable object into a container."""

    def __init__(self, store: ContentStore, strategy: OverrideStrategy):
        self.store = store
        self.strategy = strategy

    def synthesize(self, sprite: PlantSprite, container_root: Path) -> StructuredFile:
        """
        Build the override for a plant.

        An override already on disk is hand-authored or from a previous run
        and is returned untouched.
        """
        plant = sprite.plant
        file_path = Path(container_root) / plant.relative_path
        override = self.store.get_structured(file_path, container_root)

        if override.exists:
            logger.info(f"Keeping existing override {override.relative_path}")
            return override
        if override.dirty:
            return override

        width, height = plant.metadata["width"], plant.metadata["height"]
        override_dir = file_path.parent
        reference = sprite.reference

        orientations = [top_orientation(plant.orientations[0], width, height)]
        for direction in Direction:
            image = sprite.rotated_images[direction]
            relative = Path(os.path.relpath(image.path, override_dir)).as_posix()
            orientations.append(rotated_orientation(
                direction, reference.key, reference.with_path(relative), width, height))

        override.set_document(self.strategy.build_document(plant, orientations))
        logger.debug(f"Synthesized {self.strategy.mode} override {override.relative_path}")
        return override
