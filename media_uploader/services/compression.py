"""
Compression Service - Single Responsibility: shrink images before upload.

Uses Pillow. Compression is best effort: any failure falls back to the
original bytes and never fails the surrounding upload.
"""
import asyncio
import io
import logging
from dataclasses import replace
from typing import Optional

from PIL import Image, ImageOps

from ..errors import CompressionError
from ..models import CandidateFile, UploadConfig

logger = logging.getLogger(__name__)

# content type -> Pillow format name
PIL_FORMATS = {
    "image/jpeg": "JPEG",
    "image/png": "PNG",
    "image/gif": "GIF",
    "image/webp": "WEBP",
}

LOSSY_QUALITIES = (90, 80, 70, 60, 50, 40)


class CompressionService:
    """
    Service for size/dimension reduction of images.

    Targets a maximum byte size and a maximum edge length, keeping the
    declared content type of the input.
    """

    def __init__(self, config: Optional[UploadConfig] = None):
        self._config = config or UploadConfig()

    @property
    def enabled(self) -> bool:
        return self._config.compress

    def compress_bytes(self, data: bytes, content_type: str) -> bytes:
        """
        Compress image bytes synchronously.

        Args:
            data: Raw image bytes
            content_type: Declared MIME type (output keeps it)

        Returns:
            Encoded image bytes (may be larger than the input)

        Raises:
            CompressionError: if the image cannot be decoded or re-encoded
        """
        fmt = PIL_FORMATS.get(content_type.lower())
        if fmt is None:
            raise CompressionError(f"Unsupported content type: {content_type}")

        try:
            with Image.open(io.BytesIO(data)) as img:
                if getattr(img, "is_animated", False):
                    raise CompressionError("Animated images are not compressed")
                img.load()
                # Pixels are rotated upright; EXIF is not carried to the output
                image = ImageOps.exif_transpose(img)
        except CompressionError:
            raise
        except Exception as exc:
            raise CompressionError(f"Cannot decode image: {exc}") from exc

        max_edge = self._config.compress_max_edge
        if max(image.size) > max_edge:
            image.thumbnail((max_edge, max_edge), Image.Resampling.LANCZOS)

        if fmt == "JPEG" and image.mode not in ("RGB", "L"):
            image = image.convert("RGB")

        try:
            if fmt in ("JPEG", "WEBP"):
                return self._encode_lossy(image, fmt)
            return self._encode(image, fmt, optimize=True)
        except CompressionError:
            raise
        except Exception as exc:
            raise CompressionError(f"Cannot encode image: {exc}") from exc

    def _encode_lossy(self, image: Image.Image, fmt: str) -> bytes:
        """Step quality down until the size target is met."""
        best = b""
        for quality in LOSSY_QUALITIES:
            encoded = self._encode(image, fmt, quality=quality, optimize=True)
            if not best or len(encoded) < len(best):
                best = encoded
            if len(encoded) <= self._config.compress_max_bytes:
                break
        return best

    @staticmethod
    def _encode(image: Image.Image, fmt: str, **params) -> bytes:
        buffer = io.BytesIO()
        image.save(buffer, format=fmt, **params)
        return buffer.getvalue()

    async def compress(self, file: CandidateFile) -> CandidateFile:
        """
        Compress a candidate file in the default executor.

        Returns the original file when compression is disabled, fails, or
        does not reduce the size.
        """
        if not self.enabled:
            return file

        loop = asyncio.get_running_loop()
        try:
            data = await loop.run_in_executor(None, self.compress_bytes, file.data, file.content_type)
        except Exception as e:
            logger.warning(f"[compression] Using original bytes for {file.name}: {e}")
            return file

        if len(data) >= file.size:
            logger.debug(f"[compression] {file.name}: no gain ({file.size} -> {len(data)} bytes)")
            return file

        logger.info(
            f"[compression] {file.name}: {file.size / 1024:.1f}KB -> {len(data) / 1024:.1f}KB"
        )
        return replace(file, data=data)
