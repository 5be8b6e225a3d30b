"""
Content layer: file handles and the per-run content store.
"""

from .files import BinaryFile, FileHandle, StructuredFile, parse_document, to_plain
from .store import ContentStore

__all__ = [
    "BinaryFile",
    "FileHandle",
    "StructuredFile",
    "parse_document",
    "to_plain",
    "ContentStore",
]
