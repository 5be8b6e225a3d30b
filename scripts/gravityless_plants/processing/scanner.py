"""
Definition scanning: locating a mod's manifest and its farmable objects.
"""

import logging
from pathlib import Path
from typing import List

from ..content import ContentStore, StructuredFile
from ..errors import DocumentParseError, ManifestNotFoundError, MultipleManifestsError

logger = logging.getLogger(__name__)

MANIFEST_TYPE = "modinfo"
OBJECT_TYPE = "object"
FARMABLE = "farmable"


class DefinitionScanner:
    """Finds manifests, structured documents and farmable plants in unpacked mods."""

    def __init__(self, store: ContentStore):
        self.store = store

    def find_modfile(self, mod_path: Path, fallback: bool = True) -> StructuredFile:
        """
        Find the manifest at a mod's root.

        Args:
            mod_path: Absolute path of the unpacked mod
            fallback: Whether a mod without a manifest gets a synthesized,
                empty one (the case for the game's own unpacked assets)

        Returns:
            The manifest handle; when synthesized it does not exist on disk

        Raises:
            MultipleManifestsError: If more than one manifest is found
            ManifestNotFoundError: If none is found and fallback is disabled
        """
        mod_path = Path(mod_path)
        manifests = sorted(mod_path.glob(f"*.{MANIFEST_TYPE}"))

        if len(manifests) > 1:
            raise MultipleManifestsError(str(mod_path), [str(path) for path in manifests])

        if not manifests:
            if not fallback:
                raise ManifestNotFoundError(str(mod_path))
            logger.info(f"No manifest in {mod_path}, treating it as standalone assets")
            return self.store.get_structured(mod_path / f"{mod_path.name}.{MANIFEST_TYPE}", mod_path)

        return self.store.get_structured(manifests[0], mod_path)

    def content_root(self, mod: StructuredFile) -> Path:
        """Directory the mod's assets live under, honouring the manifest's path."""
        return mod.root_path / (mod["path"] or ".")

    def find_files(self, mod: StructuredFile) -> List[StructuredFile]:
        """
        List every structured document in a mod.

        Files that are not JSON documents (images, sounds, archives, broken
        JSON) are skipped without error.
        """
        root = self.content_root(mod)
        files = []
        skipped = 0

        for path in sorted(root.rglob("*")):
            if not path.is_file() or any(part.startswith(".") for part in path.relative_to(root).parts):
                continue
            path = path.absolute()
            cached = self.store.peek(path)
            if cached is not None and not isinstance(cached, StructuredFile):
                continue
            try:
                files.append(self.store.get_structured(path, mod.root_path))
            except DocumentParseError:
                skipped += 1

        logger.debug(f"Found {len(files)} documents under {root} ({skipped} other files)")
        return files

    def find_objects(self, mod: StructuredFile) -> List[StructuredFile]:
        return [file for file in self.find_files(mod) if file.type == OBJECT_TYPE]

    def find_plants(self, mod: StructuredFile) -> List[StructuredFile]:
        """Objects whose objectType is farmable, each tagged with the mod's content root."""
        plants = [obj for obj in self.find_objects(mod) if obj.object_type == FARMABLE]
        root = self.content_root(mod).absolute()
        for plant in plants:
            plant.metadata["content_root"] = root
        logger.info(f"Found {len(plants)} farmable objects in {mod.root_path.name}")
        return plants
