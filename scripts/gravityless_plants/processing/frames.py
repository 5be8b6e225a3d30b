"""
Geometry transformation of plant sprite sheets.

A plant's sprite sheet comes with a .frames descriptor whose frame grid names
each sub-frame by row and column. Rotating the sheet means rotating the name
matrix the same way, otherwise animation lookups would land on the wrong
frame. Each plant gets three variants: downwards (180), leftwards (90
counter-clockwise) and rightwards (90 clockwise).
"""

import math
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from ..content import BinaryFile, ContentStore, StructuredFile
from ..errors import DocumentParseError, PlantDataError
from ..utils.image import ImageUtils

logger = logging.getLogger(__name__)

TILE_PIXELS = 8
DEFAULT_FRAMES = "default.frames"


class Direction(Enum):
    """Rotated placements generated for each plant."""
    DOWNWARDS = "downwards"
    LEFTWARDS = "leftwards"
    RIGHTWARDS = "rightwards"


# Clockwise degrees applied to the raster for each direction
IMAGE_ROTATIONS = {
    Direction.DOWNWARDS: 180,
    Direction.LEFTWARDS: -90,
    Direction.RIGHTWARDS: 90,
}

# Counter-clockwise quarter turns applied to the name matrix (np.rot90)
NAME_ROTATIONS = {
    Direction.DOWNWARDS: 2,
    Direction.LEFTWARDS: 1,
    Direction.RIGHTWARDS: -1,
}


def name_matrix(names: List[List[Any]], dimensions: Optional[Tuple[int, int]] = None) -> np.ndarray:
    """
    Build a rectangular object array from a possibly ragged name grid.

    Missing cells are None. The matrix covers at least `dimensions`
    (cols, rows), so partially named grids keep their frame positions.
    """
    rows = len(names)
    cols = max((len(row) for row in names), default=0)
    if dimensions:
        cols = max(cols, int(dimensions[0]))
        rows = max(rows, int(dimensions[1]))

    matrix = np.empty((rows, cols), dtype=object)
    for r, row in enumerate(names):
        for c, name in enumerate(row):
            matrix[r, c] = name
    return matrix


def rotate_names(names: List[List[Any]], direction: Direction,
                 dimensions: Optional[Tuple[int, int]] = None) -> List[List[Any]]:
    """Rotate a name grid in lockstep with the image rotation for a direction."""
    matrix = name_matrix(names, dimensions)
    return np.rot90(matrix, NAME_ROTATIONS[direction]).tolist()


def legacy_downwards_names(names: List[List[Any]]) -> List[List[Any]]:
    """Deprecated downwards names of the overwrite-mode generator: row order reversed only."""
    return [list(row) for row in reversed(names)]


@dataclass
class FrameGrid:
    """A sprite sheet's frame grid."""
    size: Tuple[int, int]
    dimensions: Tuple[int, int]
    names: Optional[List[List[Any]]] = None
    aliases: Optional[Dict[str, Any]] = None

    @classmethod
    def from_document(cls, frames: StructuredFile) -> "FrameGrid":
        """
        Read the frame grid of a .frames file.

        Raises:
            PlantDataError: If the file has no usable frameGrid
        """
        grid = frames.frame_grid
        if not isinstance(grid, dict) or not grid.get("size"):
            raise PlantDataError(str(frames.path), "no frameGrid with a size")

        names = grid.get("names")
        dimensions = grid.get("dimensions")
        if not dimensions:
            if not names:
                raise PlantDataError(str(frames.path), "frameGrid has neither dimensions nor names")
            dimensions = [max(len(row) for row in names), len(names)]

        return cls(
            size=(int(grid["size"][0]), int(grid["size"][1])),
            dimensions=(int(dimensions[0]), int(dimensions[1])),
            names=names,
            aliases=frames.aliases,
        )

    @property
    def footprint(self) -> Tuple[int, int]:
        """Width and height in tiles."""
        return math.ceil(self.size[0] / TILE_PIXELS), math.ceil(self.size[1] / TILE_PIXELS)

    def validate(self) -> List[str]:
        """Validate the grid and return list of errors."""
        errors = []
        if self.size[0] <= 0 or self.size[1] <= 0:
            errors.append("size must have positive dimensions")
        if self.dimensions[0] <= 0 or self.dimensions[1] <= 0:
            errors.append("dimensions must be positive")
        if self.names:
            if len(self.names) > self.dimensions[1]:
                errors.append(f"names has {len(self.names)} rows but dimensions allow {self.dimensions[1]}")
            if any(len(row) > self.dimensions[0] for row in self.names):
                errors.append(f"names has a row longer than {self.dimensions[0]} columns")
        return errors

    def rotated(self, direction: Direction) -> "FrameGrid":
        """Frame grid of the sheet rotated for a direction."""
        swap = direction is not Direction.DOWNWARDS
        size = (self.size[1], self.size[0]) if swap else self.size
        dimensions = (self.dimensions[1], self.dimensions[0]) if swap else self.dimensions
        names = rotate_names(self.names, direction, self.dimensions) if self.names is not None else None
        return FrameGrid(size=size, dimensions=dimensions, names=names, aliases=self.aliases)

    def legacy_downwards(self) -> "FrameGrid":
        names = legacy_downwards_names(self.names) if self.names is not None else None
        return FrameGrid(size=self.size, dimensions=self.dimensions, names=names, aliases=self.aliases)

    def to_document(self) -> Dict[str, Any]:
        grid: Dict[str, Any] = {"size": list(self.size), "dimensions": list(self.dimensions)}
        if self.names is not None:
            grid["names"] = self.names
        document: Dict[str, Any] = {"frameGrid": grid}
        if self.aliases is not None:
            document["aliases"] = self.aliases
        return document


@dataclass
class ImageReference:
    """An orientation's sprite reference, "<path>:<options>"."""
    key: str
    path: str
    options: str = ""

    @classmethod
    def from_orientation(cls, orientation: Dict[str, Any]) -> Optional["ImageReference"]:
        for key in ("dualImage", "image"):
            value = orientation.get(key)
            if isinstance(value, str) and value:
                path, _, options = value.partition(":")
                return cls(key=key, path=path, options=options)
        return None

    def with_path(self, path: str) -> str:
        """Reference string pointing at another image with the same options."""
        return f"{path}:{self.options}" if self.options else path


@dataclass
class PlantSprite:
    """A plant's source sprite and its rotated variants in an override container."""
    plant: StructuredFile
    reference: ImageReference
    image: BinaryFile
    frames: StructuredFile
    grid: FrameGrid
    rotated_frames: Dict[Direction, StructuredFile] = field(default_factory=dict)
    rotated_images: Dict[Direction, BinaryFile] = field(default_factory=dict)

    @property
    def footprint(self) -> Tuple[int, int]:
        return self.grid.footprint

    @property
    def all(self) -> List:
        return [*self.rotated_frames.values(), *self.rotated_images.values()]


class GeometryTransformer:
    """Derives rotated frame grids and images for farmable plants."""

    def __init__(self, store: ContentStore, legacy_downwards: bool = False):
        self.store = store
        self.legacy_downwards = legacy_downwards

    def load_sprite(self, plant: StructuredFile) -> PlantSprite:
        """
        Locate a plant's sprite sheet and frame grid.

        Raises:
            PlantDataError: If the plant has no image reference, or the image
                or its frames cannot be found
        """
        orientations = plant.orientations
        if not orientations:
            raise PlantDataError(str(plant.path), "farmable object has no orientations")

        reference = ImageReference.from_orientation(orientations[0])
        if reference is None:
            raise PlantDataError(str(plant.path), "first orientation has no dualImage or image")

        image = self.store.get_binary(self._resolve(plant, reference.path), plant.root_path)
        if image.data is None:
            raise PlantDataError(str(plant.path), f"image not found: {image.path}")

        try:
            frames = self._find_frames(image)
        except DocumentParseError as e:
            raise PlantDataError(str(plant.path), f"unreadable frames for {image.path}: {e}")
        if frames is None:
            raise PlantDataError(str(plant.path), f"no .frames file for {image.path}")

        grid = FrameGrid.from_document(frames)
        for error in grid.validate():
            logger.warning(f"{frames.path}: {error}")

        width, height = grid.footprint
        plant.metadata["width"] = width
        plant.metadata["height"] = height

        return PlantSprite(plant=plant, reference=reference, image=image, frames=frames, grid=grid)

    def transform(self, plant: StructuredFile, container_root: Path) -> PlantSprite:
        """
        Generate the three rotated frame/image pairs of a plant in a container.

        Files are only filled when they have no content yet, so existing
        overrides survive and plants sharing a sheet share one set of files.
        """
        sprite = self.load_sprite(plant)
        image = sprite.image
        dest_dir = Path(container_root) / image.relative_path.parent

        for direction in Direction:
            try:
                frames_out = self.store.get_structured(
                    dest_dir / f"{image.name}-{direction.value}.frames", container_root)
            except DocumentParseError as e:
                raise PlantDataError(str(plant.path), f"existing rotated frames are unreadable: {e}")
            if frames_out.is_empty:
                frames_out.set_document(self._rotate_grid(sprite.grid, direction).to_document())
            else:
                logger.debug(f"Reusing {frames_out.path}")
            sprite.rotated_frames[direction] = frames_out

            image_out = self.store.get_binary(
                dest_dir / f"{image.name}-{direction.value}.{image.type}", container_root)
            if image_out.is_empty:
                try:
                    image_out.data = ImageUtils.rotate(image.data, IMAGE_ROTATIONS[direction])
                except ValueError as e:
                    raise PlantDataError(str(plant.path), f"cannot rotate {image.path}: {e}")
            else:
                logger.debug(f"Reusing {image_out.path}")
            sprite.rotated_images[direction] = image_out

        return sprite

    def _rotate_grid(self, grid: FrameGrid, direction: Direction) -> FrameGrid:
        if direction is Direction.DOWNWARDS and self.legacy_downwards:
            return grid.legacy_downwards()
        return grid.rotated(direction)

    def _resolve(self, plant: StructuredFile, image_path: str) -> Path:
        """
        Absolute image path: leading '/' is relative to the mod's asset root
        (the manifest's path, recorded by the scanner), else to the object.
        """
        if image_path.startswith("/"):
            asset_root = plant.metadata.get("content_root", plant.root_path)
            return (Path(asset_root) / image_path.lstrip("/")).absolute()
        return (plant.path.parent / image_path).absolute()

    def _find_frames(self, image: BinaryFile) -> Optional[StructuredFile]:
        """
        Find the frames file for an image the way the game does: <name>.frames
        beside the image, then default.frames in its directory or any parent
        up to the mod root.
        """
        candidates = [image.path.parent / f"{image.name}.frames"]
        directory = image.path.parent
        root = image.root_path.absolute()
        while True:
            candidates.append(directory / DEFAULT_FRAMES)
            if directory == root or directory.parent == directory or root not in directory.parents:
                break
            directory = directory.parent

        for candidate in candidates:
            if candidate.is_file():
                return self.store.get_structured(candidate, image.root_path)
        return None
