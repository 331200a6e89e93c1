# ABOUTME: Tests for the local image store and PNG compression
# ABOUTME: Images are generated with Pillow and served by an in-memory fetcher

import io

import pytest
from PIL import Image

from pokedict.services.image_cache import ImageCache, ImageCacheError, image_id_and_extension, try_compress

UPLOAD = "https://archives.bulbagarden.net/media/upload"


def _png(color=(255, 0, 0, 128)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", (4, 4), color).save(buffer, format="PNG")
    return buffer.getvalue()


def _apng() -> bytes:
    buffer = io.BytesIO()
    first = Image.new("RGBA", (4, 4), (255, 0, 0, 255))
    second = Image.new("RGBA", (4, 4), (0, 0, 255, 255))
    first.save(buffer, format="PNG", save_all=True, append_images=[second])
    return buffer.getvalue()


def _is_webp(data: bytes) -> bool:
    return data[:4] == b"RIFF" and data[8:12] == b"WEBP"


class TestImageIds:
    """Identifiers derived from upload paths."""

    @pytest.mark.parametrize(
        "url,expected",
        [
            (f"{UPLOAD}/a/ab/File.png", ("File-ab-a", "png")),
            (f"{UPLOAD}/thumb/a/ab/File.png/120px-File.png", ("120px-File-File.png-ab-a-thumb", "png")),
            ("https://example.org/icons/Type.gif?version=2", ("Type-icons", "gif")),
        ],
    )
    def test_id_and_extension(self, url, expected):
        assert image_id_and_extension(url) == expected

    def test_missing_extension(self):
        with pytest.raises(ImageCacheError, match="no file extension"):
            image_id_and_extension(f"{UPLOAD}/a/ab/File")


class TestTryCompress:
    """Only still PNGs are re-encoded."""

    def test_png_becomes_webp(self):
        assert _is_webp(try_compress("png", _png()))

    def test_other_formats_untouched(self):
        assert try_compress("gif", b"GIF89a") is None

    def test_animated_png_untouched(self):
        assert try_compress("png", _apng()) is None

    def test_corrupt_png(self):
        with pytest.raises(ImageCacheError):
            try_compress("png", b"not a png")


class TestImageCache:
    """Lookup order and storage."""

    def test_png_stored_compressed(self, tmp_path, fake_fetcher_factory):
        url = f"{UPLOAD}/a/ab/File.png"
        fetcher = fake_fetcher_factory({url: _png()})
        cache = ImageCache(tmp_path, fetcher)

        assert cache.get(url) == "File-ab-a.webp"
        assert cache.get(url) == "File-ab-a.webp"

        assert fetcher.calls == [(url, False)]
        assert _is_webp((tmp_path / "File-ab-a.webp").read_bytes())

    def test_gif_stored_as_fetched(self, tmp_path, fake_fetcher_factory):
        url = f"{UPLOAD}/c/cd/Anim.gif"
        cache = ImageCache(tmp_path / "images", fake_fetcher_factory({url: b"GIF89a..."}))

        assert cache.get(url) == "Anim-cd-c.gif"
        assert (tmp_path / "images" / "Anim-cd-c.gif").read_bytes() == b"GIF89a..."

    def test_existing_original_reused(self, tmp_path, fake_fetcher_factory):
        (tmp_path / "File-ab-a.png").write_bytes(b"old")
        fetcher = fake_fetcher_factory()

        assert ImageCache(tmp_path, fetcher).get(f"{UPLOAD}/a/ab/File.png") == "File-ab-a.png"
        assert fetcher.calls == []

    def test_compressed_preferred_over_original(self, tmp_path, fake_fetcher_factory):
        (tmp_path / "File-ab-a.png").write_bytes(b"old")
        (tmp_path / "File-ab-a.webp").write_bytes(b"new")

        assert ImageCache(tmp_path, fake_fetcher_factory()).get(f"{UPLOAD}/a/ab/File.png") == "File-ab-a.webp"

    def test_fetch_error_propagates(self, tmp_path, fake_fetcher_factory):
        with pytest.raises(LookupError):
            ImageCache(tmp_path, fake_fetcher_factory()).get(f"{UPLOAD}/a/ab/Missing.png")
