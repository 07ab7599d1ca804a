"""
Page image loader and PNG/base64 encoder for the inference backend
"""

import base64
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import httpx
from PIL import Image, UnidentifiedImageError

from utils.errors import DecodeUnsupported, SourceUnreadable
from utils.logger import logger


# Pillow modes the PNG encoder can write without conversion
PNG_MODES = {"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"}


@dataclass(frozen=True)
class EncodedImage:
    """A PNG image ready for inline transport"""
    media_type: str
    data: str

    @property
    def data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.data}"


class ImageEncoder:
    """Load page images from disk or http(s) and normalize them to base64 PNG"""

    def __init__(self, max_dimension: int = 7999, fetch_timeout: float = 60.0):
        """
        Initialize image encoder

        Args:
            max_dimension: Larger images are downscaled to fit (provider upload limit)
            fetch_timeout: Default deadline in seconds for remote fetches
        """
        self.max_dimension = max_dimension
        self.fetch_timeout = fetch_timeout

    def _read_source(self, location: str, timeout: float) -> bytes:
        if location.startswith(("http://", "https://")):
            try:
                response = httpx.get(location, timeout=timeout, follow_redirects=True)
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise SourceUnreadable(f"Failed to fetch image ({e})", location) from e
            return response.content

        try:
            return Path(location).read_bytes()
        except OSError as e:
            raise SourceUnreadable(f"Failed to read local image file ({e.strerror})", location) from e

    def _resize_image_if_needed(self, img: Image.Image) -> Image.Image:
        width, height = img.size
        if max(width, height) <= self.max_dimension:
            return img

        scale = self.max_dimension / max(width, height)
        new_size = (int(width * scale), int(height * scale))
        logger.info(f"📐 Resizing image from {width}x{height} to {new_size[0]}x{new_size[1]}")
        return img.resize(new_size, Image.Resampling.LANCZOS)

    def encode(self, location: Union[str, Path], timeout: Optional[float] = None) -> EncodedImage:
        """
        Load an image and re-encode it as base64 PNG

        Args:
            location: Local path or http(s) URL
            timeout: Deadline in seconds for a remote fetch

        Returns:
            Encoded image, byte-identical for identical sources

        Raises:
            SourceUnreadable: File cannot be opened or fetch failed
            DecodeUnsupported: Bytes are not a decodable raster image
        """
        location = str(location)
        image_bytes = self._read_source(location, timeout if timeout is not None else self.fetch_timeout)

        try:
            img = Image.open(io.BytesIO(image_bytes))
            img.load()
        except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
            raise DecodeUnsupported(f"Failed to decode image ({e})", location) from e

        if img.mode not in PNG_MODES:
            img = img.convert("RGB")
        img = self._resize_image_if_needed(img)

        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        return EncodedImage(
            media_type="image/png",
            data=base64.b64encode(buffer.getvalue()).decode("utf-8")
        )
