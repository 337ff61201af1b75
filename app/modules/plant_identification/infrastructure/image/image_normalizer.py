# 📄 File: app/modules/plant_identification/infrastructure/image/image_normalizer.py
# 🧭 Purpose (Layman Explanation):
# Takes the photo the user sent (as a file, as text-encoded data, or as a web link), turns it upright,
# shrinks it to a sensible size and saves it as a standard JPEG so every scan looks the same to the classifier.
# 🧪 Purpose (Technical Summary):
# Decodes raw bytes, base64 data URIs, or remote URLs into a canonical RGB JPEG bounded in dimensions
# and quality, and fingerprints the output with SHA-256. Pillow work runs in a worker thread.
# 🔗 Dependencies:
# - PIL (Pillow): Decoding, EXIF orientation, resizing and JPEG encoding
# - aiohttp: Remote image download
# - hashlib, base64, binascii
# 🔄 Connected Modules / Calls From:
# Called by: IdentificationService (first step of every identification)

import asyncio
import base64
import binascii
import hashlib
import io
from typing import Optional, Tuple, Union

import aiohttp
from PIL import Image, ImageOps, UnidentifiedImageError

from app.shared.core.exceptions import FetchError, InvalidImageError, UnsupportedFormatError
from app.shared.utils.logging import get_logger

from ...domain.models.identification import NormalizedImage

logger = get_logger(__name__)

FETCH_CHUNK_SIZE = 64 * 1024

ImageInput = Union[bytes, bytearray, str]


class ImageNormalizer:
    """
    Image normalization for classifier submission.

    Handles:
    - Input decoding (bytes, data URI, http(s) URL)
    - EXIF orientation, RGB conversion, downscaling
    - Deterministic JPEG re-encoding and fingerprinting
    """

    def __init__(
        self,
        max_dimension: int = 1024,
        quality: int = 80,
        max_bytes: int = 10 * 1024 * 1024,
        fetch_timeout: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.max_dimension = max_dimension
        self.quality = quality
        self.max_bytes = max_bytes
        self.fetch_timeout = fetch_timeout
        self.session = session
        self._owns_session = session is None

    async def initialize(self) -> None:
        """Open the HTTP session used for URL inputs."""
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.fetch_timeout),
                headers={"User-Agent": "PlantScanner/1.0"},
            )
            self._owns_session = True

    async def close(self) -> None:
        if self.session is not None and self._owns_session:
            await self.session.close()
            self.session = None

    async def normalize(self, image: ImageInput) -> NormalizedImage:
        """
        Produce a canonical JPEG from any supported input.

        Raises:
            FetchError: Remote URL could not be downloaded
            UnsupportedFormatError: Input is not a recognizable image
            InvalidImageError: Input exceeds the size limit
        """
        source_url = None

        if isinstance(image, (bytes, bytearray)):
            raw = bytes(image)
        elif isinstance(image, str):
            text = image.strip()
            if text.startswith("data:"):
                raw = self._decode_data_uri(text)
            elif text.startswith(("http://", "https://")):
                source_url = text
                raw = await self._fetch(text)
            else:
                raise UnsupportedFormatError("Expected image bytes, a data URI, or an http(s) URL")
        else:
            raise UnsupportedFormatError(f"Unsupported image input type: {type(image).__name__}")

        if not raw:
            raise UnsupportedFormatError("Image data is empty")

        if len(raw) > self.max_bytes:
            raise InvalidImageError(
                f"Image exceeds maximum size of {self.max_bytes} bytes",
                reason="too_large",
                details={"size_bytes": len(raw)},
            )

        data, width, height = await asyncio.to_thread(self._process, raw)

        normalized = NormalizedImage(
            data=data,
            width=width,
            height=height,
            fingerprint=hashlib.sha256(data).hexdigest(),
            source_url=source_url,
        )

        logger.debug(
            "Image normalized",
            original_bytes=len(raw),
            normalized_bytes=normalized.byte_length,
            width=width,
            height=height,
        )
        return normalized

    def _decode_data_uri(self, uri: str) -> bytes:
        header, sep, payload = uri.partition(",")
        media_type = header[len("data:"):].split(";")[0].lower()

        if not sep or ";base64" not in header.lower() or not media_type.startswith("image/"):
            raise UnsupportedFormatError("Only base64 image data URIs are supported")

        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise UnsupportedFormatError("Malformed base64 image payload") from e

    async def _fetch(self, url: str) -> bytes:
        if self.session is None:
            await self.initialize()

        try:
            async with self.session.get(
                url, timeout=aiohttp.ClientTimeout(total=self.fetch_timeout)
            ) as response:
                if not 200 <= response.status < 300:
                    raise FetchError(
                        f"Image download failed with HTTP {response.status}",
                        url=url,
                        http_status=response.status,
                    )

                if response.content_length and response.content_length > self.max_bytes:
                    raise InvalidImageError(
                        f"Image exceeds maximum size of {self.max_bytes} bytes",
                        reason="too_large",
                        details={"size_bytes": response.content_length},
                    )

                return await self._read_bounded(response)

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchError(f"Image download failed: {e.__class__.__name__}", url=url) from e

    async def _read_bounded(self, response: aiohttp.ClientResponse) -> bytes:
        """Read the body in chunks, stopping as soon as it passes max_bytes."""
        buffer = bytearray()
        async for chunk in response.content.iter_chunked(FETCH_CHUNK_SIZE):
            buffer.extend(chunk)
            if len(buffer) > self.max_bytes:
                raise InvalidImageError(
                    f"Image exceeds maximum size of {self.max_bytes} bytes",
                    reason="too_large",
                    details={"size_bytes": len(buffer)},
                )
        return bytes(buffer)

    def _process(self, raw: bytes) -> Tuple[bytes, int, int]:
        """Decode, orient, downscale and re-encode. Runs in a worker thread."""
        try:
            with Image.open(io.BytesIO(raw)) as img:
                img.load()
                img = ImageOps.exif_transpose(img)

                if img.mode != "RGB":
                    img = img.convert("RGB")

                # thumbnail() never upscales
                if img.width > self.max_dimension or img.height > self.max_dimension:
                    img.thumbnail((self.max_dimension, self.max_dimension), Image.Resampling.LANCZOS)

                output = io.BytesIO()
                img.save(output, format="JPEG", quality=self.quality, optimize=True)
                return output.getvalue(), img.width, img.height

        except Image.DecompressionBombError as e:
            raise InvalidImageError("Image dimensions are too large", reason="decompression_bomb") from e
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            raise UnsupportedFormatError(f"Could not decode image: {e}") from e
