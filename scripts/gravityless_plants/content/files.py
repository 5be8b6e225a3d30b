"""
File handles for mod content.

A handle is identified by its absolute path and remembers the mod root it was
looked up under, so generated content can be addressed relative to that root.
Handles are created through the ContentStore and shared for the whole run.
"""

import os
import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import json5

from ..errors import DocumentParseError

PathLike = Union[str, os.PathLike]


def to_plain(value: Any) -> Any:
    """Normalize nested mappings and sequences to plain dicts and lists."""
    if isinstance(value, Mapping):
        return {str(key): to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    return value


def parse_document(raw: bytes, path: str = "<memory>") -> Union[Dict[str, Any], List[Any]]:
    """
    Parse raw file content as a structured document.

    Strict JSON is tried first since it is fast and covers most files. Game
    assets also use comments and trailing commas, so text that looks like a
    document gets a second, lenient pass through json5.

    Raises:
        DocumentParseError: If the content is not a JSON object or array
    """
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise DocumentParseError(path, f"not UTF-8 text ({e.reason})")

    try:
        document = json.loads(text)
    except ValueError:
        if not text.lstrip().startswith(("{", "[")):
            raise DocumentParseError(path, "not a JSON document")
        try:
            document = json5.loads(text)
        except ValueError as e:
            raise DocumentParseError(path, str(e))

    if not isinstance(document, (dict, list)):
        raise DocumentParseError(path, f"top level is {type(document).__name__}, not an object or array")
    return document


class FileHandle:
    """Base class for a file that may or may not exist on disk yet."""

    def __init__(self, path: PathLike, root_path: PathLike):
        self.path = Path(path)
        self.root_path = Path(root_path)
        self.relative_path = Path(os.path.relpath(self.path, self.root_path))
        self.type = self.path.suffix[1:]
        self.name = self.path.name[: -len(self.path.suffix)] if self.path.suffix else self.path.name
        self.metadata: Dict[str, Any] = {}
        self.exists = self.path.is_file()
        self.dirty = False

        if self.exists:
            self._load(self.path.read_bytes())

    def _load(self, raw: bytes) -> None:
        raise NotImplementedError

    def serialize(self) -> bytes:
        """Return the bytes that would be written to disk for this file."""
        raise NotImplementedError

    @property
    def is_empty(self) -> bool:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({str(self.path)!r})"


class BinaryFile(FileHandle):
    """A file with an opaque byte payload, e.g. a sprite sheet."""

    def __init__(self, path: PathLike, root_path: PathLike):
        self._data: Optional[bytes] = None
        super().__init__(path, root_path)

    def _load(self, raw: bytes) -> None:
        self._data = raw

    @property
    def data(self) -> Optional[bytes]:
        """Payload, or None if the file does not exist and nothing was assigned."""
        return self._data

    @data.setter
    def data(self, value: bytes) -> None:
        self._data = value
        self.dirty = True

    @property
    def is_empty(self) -> bool:
        return self._data is None

    def serialize(self) -> bytes:
        if self._data is None:
            raise ValueError(f"{self.path} has no content to write")
        return self._data


class StructuredFile(FileHandle):
    """
    A file holding a JSON-compatible document.

    Fields are accessed like a mapping. Reading an absent field gives None,
    assigning a field creates it and marks the file dirty. Fields this class
    knows nothing about are kept as-is and written back unchanged.
    """

    def __init__(self, path: PathLike, root_path: PathLike):
        self.data: Union[Dict[str, Any], List[Any]] = {}
        super().__init__(path, root_path)

    def _load(self, raw: bytes) -> None:
        self.data = parse_document(raw, str(self.path))

    def get(self, key: str, default: Any = None) -> Any:
        if not isinstance(self.data, dict):
            return default
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        if not isinstance(self.data, dict):
            raise TypeError(f"{self.path} holds a {type(self.data).__name__}, not an object")
        self.data[key] = value
        self.dirty = True

    def __delitem__(self, key: str) -> None:
        if isinstance(self.data, dict) and key in self.data:
            del self.data[key]
            self.dirty = True

    def __contains__(self, key: str) -> bool:
        return isinstance(self.data, dict) and key in self.data

    def set_document(self, document: Union[Mapping[str, Any], List[Any]]) -> None:
        """Replace the whole document."""
        self.data = to_plain(document)
        self.dirty = True

    @property
    def is_empty(self) -> bool:
        return not self.data

    # Typed accessors for the fields the generator reads

    @property
    def object_type(self) -> Optional[str]:
        return self.get("objectType")

    @property
    def orientations(self) -> List[Dict[str, Any]]:
        return self.get("orientations") or []

    @property
    def frame_grid(self) -> Optional[Dict[str, Any]]:
        return self.get("frameGrid")

    @property
    def aliases(self) -> Optional[Dict[str, Any]]:
        return self.get("aliases")

    def serialize(self) -> bytes:
        text = json.dumps(to_plain(self.data), indent=2, ensure_ascii=False)
        return (text + "\n").encode("utf-8")
