"""Tests for ImageNormalizer: decoding, orientation, bounding and fingerprinting."""
import base64
import hashlib
import io

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer as HTTPTestServer
from PIL import Image

from app.modules.plant_identification.infrastructure.image.image_normalizer import ImageNormalizer
from app.shared.core.exceptions import FetchError, InvalidImageError, UnsupportedFormatError
from tests.conftest import make_image_bytes


@pytest.fixture
async def normalizer():
    n = ImageNormalizer(max_dimension=1024, quality=80, fetch_timeout=2.0)
    yield n
    await n.close()


@pytest.fixture
async def image_host():
    """Serves /leaf.jpg, a chunked /stream.jpg without Content-Length, and a 404 for anything else."""
    photo = make_image_bytes((200, 100))

    async def leaf(request):
        return web.Response(body=photo, content_type="image/jpeg")

    async def stream(request):
        response = web.StreamResponse(headers={"Content-Type": "image/jpeg"})
        response.enable_chunked_encoding()
        await response.prepare(request)
        for _ in range(8):
            await response.write(b"\xff" * 1024)
        await response.write_eof()
        return response

    app = web.Application()
    app.router.add_get("/leaf.jpg", leaf)
    app.router.add_get("/stream.jpg", stream)
    server = HTTPTestServer(app)
    await server.start_server()
    yield server
    await server.close()


def _decode(data: bytes) -> Image.Image:
    return Image.open(io.BytesIO(data))


class TestDecoding:
    async def test_bytes_become_jpeg(self, normalizer, jpeg_bytes):
        image = await normalizer.normalize(jpeg_bytes)

        assert image.content_type == "image/jpeg"
        assert _decode(image.data).format == "JPEG"
        assert (image.width, image.height) == (64, 48)
        assert image.byte_length == len(image.data)

    async def test_fingerprint_is_sha256_of_output(self, normalizer, jpeg_bytes):
        image = await normalizer.normalize(jpeg_bytes)
        assert image.fingerprint == hashlib.sha256(image.data).hexdigest()
        assert image.cache_key == f"plant:identify:{image.fingerprint}"

    async def test_data_uri(self, normalizer):
        png = make_image_bytes((30, 30), fmt="PNG")
        uri = "data:image/png;base64," + base64.b64encode(png).decode()

        image = await normalizer.normalize(uri)

        assert (image.width, image.height) == (30, 30)
        assert _decode(image.data).format == "JPEG"

    async def test_rgba_converted_to_rgb(self, normalizer):
        buf = io.BytesIO()
        Image.new("RGBA", (20, 20), (255, 0, 0, 128)).save(buf, format="PNG")

        image = await normalizer.normalize(buf.getvalue())

        assert _decode(image.data).mode == "RGB"

    async def test_exif_orientation_applied(self, normalizer):
        exif = Image.Exif()
        exif[0x0112] = 6
        buf = io.BytesIO()
        Image.new("RGB", (40, 20), (10, 120, 10)).save(buf, format="JPEG", exif=exif)

        image = await normalizer.normalize(buf.getvalue())

        assert (image.width, image.height) == (20, 40)


class TestBounds:
    async def test_large_image_shrunk_keeping_aspect(self, normalizer):
        image = await normalizer.normalize(make_image_bytes((3000, 1500)))
        assert (image.width, image.height) == (1024, 512)

    async def test_small_image_not_upscaled(self, normalizer):
        image = await normalizer.normalize(make_image_bytes((100, 80)))
        assert (image.width, image.height) == (100, 80)

    async def test_deterministic(self, normalizer):
        raw = make_image_bytes((1500, 1200), color=(90, 160, 40))

        first = await normalizer.normalize(raw)
        second = await normalizer.normalize(raw)

        assert first.data == second.data
        assert first.fingerprint == second.fingerprint

    async def test_oversized_input_rejected(self):
        small_limit = ImageNormalizer(max_bytes=100)
        with pytest.raises(InvalidImageError) as exc_info:
            await small_limit.normalize(make_image_bytes((200, 200)))
        assert exc_info.value.details["reason"] == "too_large"


class TestRejections:
    async def test_garbage_bytes(self, normalizer):
        with pytest.raises(UnsupportedFormatError):
            await normalizer.normalize(b"definitely not an image")

    async def test_empty_bytes(self, normalizer):
        with pytest.raises(UnsupportedFormatError):
            await normalizer.normalize(b"")

    async def test_plain_string(self, normalizer):
        with pytest.raises(UnsupportedFormatError):
            await normalizer.normalize("monstera.jpg")

    async def test_non_image_data_uri(self, normalizer):
        uri = "data:text/plain;base64," + base64.b64encode(b"hello").decode()
        with pytest.raises(UnsupportedFormatError):
            await normalizer.normalize(uri)

    async def test_malformed_base64(self, normalizer):
        with pytest.raises(UnsupportedFormatError):
            await normalizer.normalize("data:image/jpeg;base64,@@@not-base64@@@")

    async def test_unsupported_is_invalid_image(self, normalizer):
        with pytest.raises(InvalidImageError) as exc_info:
            await normalizer.normalize(12345)
        assert exc_info.value.status_code == 400


class TestUrlFetch:
    async def test_fetches_url(self, normalizer, image_host):
        url = str(image_host.make_url("/leaf.jpg"))

        image = await normalizer.normalize(url)

        assert image.source_url == url
        assert (image.width, image.height) == (200, 100)

    async def test_http_error_is_fetch_error(self, normalizer, image_host):
        with pytest.raises(FetchError) as exc_info:
            await normalizer.normalize(str(image_host.make_url("/missing.jpg")))

        assert exc_info.value.details["http_status"] == 404
        assert isinstance(exc_info.value, InvalidImageError)

    async def test_unreachable_host_is_fetch_error(self, normalizer):
        with pytest.raises(FetchError):
            await normalizer.normalize("http://127.0.0.1:1/leaf.jpg")

    async def test_chunked_body_over_limit_rejected(self, image_host):
        normalizer = ImageNormalizer(max_bytes=4096, fetch_timeout=2.0)
        try:
            with pytest.raises(InvalidImageError) as exc_info:
                await normalizer.normalize(str(image_host.make_url("/stream.jpg")))
        finally:
            await normalizer.close()

        assert exc_info.value.details["reason"] == "too_large"
        assert not isinstance(exc_info.value, UnsupportedFormatError)
