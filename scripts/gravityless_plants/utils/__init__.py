"""
Utility modules for image rotation and the external asset tools.
"""

from .image import ImageUtils
from .tools import AssetTools, zip_directory, extract_zip

__all__ = [
    "ImageUtils",
    "AssetTools",
    "zip_directory",
    "extract_zip",
]
