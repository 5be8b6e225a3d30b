"""
Image processing utilities for the generator.
"""

import io
from typing import Optional, Union

from PIL import Image

# Transpose operations are lossless, unlike Image.rotate which resamples.
# Positive degrees are clockwise.
ROTATIONS = {
    90: Image.Transpose.ROTATE_270,
    -90: Image.Transpose.ROTATE_90,
    180: Image.Transpose.ROTATE_180,
}


class ImageUtils:
    """Utility class for the raster operations the generator needs."""

    @staticmethod
    def load_image(data: Union[bytes, str, Image.Image]) -> Image.Image:
        """
        Load image from various sources.

        Args:
            data: Image data as bytes, file path, or PIL Image

        Returns:
            PIL Image object

        Raises:
            ValueError: If data cannot be loaded as image, including
                truncated or corrupt image data
        """
        if isinstance(data, Image.Image):
            return data
        elif isinstance(data, bytes):
            try:
                image = Image.open(io.BytesIO(data))
                # Image.open only reads the header; decode now
                image.load()
                return image
            except Exception as e:
                raise ValueError(f"Cannot load image from bytes: {e}")
        elif isinstance(data, str):
            try:
                return Image.open(data)
            except Exception as e:
                raise ValueError(f"Cannot load image from path '{data}': {e}")
        else:
            raise ValueError(f"Unsupported image data type: {type(data)}")

    @staticmethod
    def encode_image(image: Image.Image, format: Optional[str] = None) -> bytes:
        """Encode image to bytes, PNG unless another format is given."""
        buffer = io.BytesIO()
        image.save(buffer, format=(format or 'PNG').upper())
        return buffer.getvalue()

    @staticmethod
    def rotate(data: bytes, degrees: int) -> bytes:
        """
        Rotate an encoded image by a multiple of 90 degrees.

        Args:
            data: Encoded source image
            degrees: 90 (clockwise), -90 (counter-clockwise) or 180

        Returns:
            Rotated image encoded in the source format

        Raises:
            ValueError: If degrees is unsupported or data is not an image
        """
        if degrees not in ROTATIONS:
            raise ValueError(f"Unsupported rotation: {degrees} (expected one of {sorted(ROTATIONS)})")

        image = ImageUtils.load_image(data)
        source_format = image.format
        try:
            rotated = image.transpose(ROTATIONS[degrees])
            return ImageUtils.encode_image(rotated, source_format)
        except OSError as e:
            raise ValueError(f"Cannot rotate image: {e}")
