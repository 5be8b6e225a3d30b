"""
Helpers building small unpacked mods on disk for the tests.
"""

import io
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from PIL import Image

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


def write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


def read_json(path: Path) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def png_bytes(width: int = 2, height: int = 1, left: tuple = RED, right: tuple = BLUE) -> bytes:
    """PNG whose left half is one color and right half another."""
    image = Image.new("RGBA", (width, height), right)
    for x in range((width + 1) // 2):
        for y in range(height):
            image.putpixel((x, y), left)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def write_png(path: Path, width: int = 2, height: int = 1) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(png_bytes(width, height))
    return path


def plant_object(image: str = "plant.png:0", object_name: str = "plant", extra: Optional[Dict] = None) -> Dict:
    orientation = {
        "dualImage": image,
        "imagePosition": [0, 0],
        "frames": 1,
        "animationCycle": 0.5,
        "spaceScan": 0.1,
        "anchors": ["bottom"],
        "requireTilledAnchors": True,
    }
    document = {
        "objectName": object_name,
        "objectType": "farmable",
        "orientations": [orientation],
    }
    document.update(extra or {})
    return document


def frames_document(size: List[int] = None, dimensions: List[int] = None, names: List[List[str]] = None,
                    aliases: Optional[Dict] = None) -> Dict:
    document = {
        "frameGrid": {
            "size": size or [16, 8],
            "dimensions": dimensions or [2, 1],
            "names": names or [["a", "b"]],
        }
    }
    if aliases is not None:
        document["aliases"] = aliases
    return document


def create_mod(root: Path, name: str = "soy", manifest: bool = True, plants: int = 1,
               directory: str = "objects/farmables") -> Path:
    """
    Create an unpacked mod with farmable plants sharing one sprite sheet.

    Returns:
        The mod directory
    """
    mod_dir = Path(root) / name
    mod_dir.mkdir(parents=True, exist_ok=True)
    if manifest:
        write_json(mod_dir / f"{name}.modinfo", {"name": name, "version": "1.3", "path": "."})

    plant_dir = mod_dir / directory
    write_png(plant_dir / "plant.png", 32, 8)
    write_json(plant_dir / "plant.frames", frames_document())
    for index in range(plants):
        write_json(plant_dir / f"plant{index}.object", plant_object(object_name=f"plant{index}"))

    write_json(mod_dir / "items" / "seed.item", {"itemName": "seed", "price": 5})
    write_json(mod_dir / "objects" / "chair.object", {"objectName": "chair", "objectType": "loungeable"})
    (mod_dir / "readme.txt").write_text("not json", encoding="utf-8")
    return mod_dir
