"""
Imaging component unit tests.

- Normalization bounds width and never upscales
- Output is always JPEG
- Undecodable input fails loudly
- Upload screening (MIME allowlist, size ceiling)
- Storage keys are unique and time-based
"""

from __future__ import annotations

from datetime import UTC, datetime
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from src.adapters.clock import FixedClock
from src.adapters.memory import InMemoryObjectStore
from src.components.imaging import (
    AVATAR_MAX_WIDTH,
    BANNER_MAX_WIDTH,
    ImageDecodeError,
    ImagePolicy,
    ImageUpload,
    compute_target_size,
    generate_storage_key,
    normalize_image,
    policy_from_rules,
    store_image,
    validate_upload,
)
from src.rules.loader import load_rules
from src.rules.models import Rules


@pytest.fixture
def rules() -> Rules:
    return load_rules(Path("rules.yaml"))


def make_image(width: int, height: int, fmt: str = "PNG", mode: str = "RGB") -> bytes:
    """Generate an in-memory test image."""
    color = (200, 120, 40, 128) if mode == "RGBA" else (200, 120, 40)
    img = Image.new(mode, (width, height), color)
    buf = BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def decode(data: bytes) -> Image.Image:
    img = Image.open(BytesIO(data))
    img.load()
    return img


class TestComputeTargetSize:
    def test_wide_image_is_bounded(self) -> None:
        assert compute_target_size(2400, 1200, 1200) == (1200, 600)

    def test_small_image_keeps_size(self) -> None:
        assert compute_target_size(300, 200, 400) == (300, 200)

    def test_exact_width_keeps_size(self) -> None:
        assert compute_target_size(400, 100, 400) == (400, 100)

    def test_height_never_collapses_to_zero(self) -> None:
        assert compute_target_size(5000, 1, 400) == (400, 1)

    def test_invalid_max_width(self) -> None:
        with pytest.raises(ValueError):
            compute_target_size(100, 100, 0)


class TestNormalizeImage:
    """Normalization never exceeds max width and never upscales."""

    @pytest.mark.parametrize(
        ("width", "height", "max_width"),
        [
            (2000, 1000, BANNER_MAX_WIDTH),
            (1200, 800, BANNER_MAX_WIDTH),
            (640, 480, BANNER_MAX_WIDTH),
            (1000, 1000, AVATAR_MAX_WIDTH),
            (120, 300, AVATAR_MAX_WIDTH),
        ],
    )
    def test_width_bounded_and_not_upscaled(
        self, width: int, height: int, max_width: int
    ) -> None:
        result = normalize_image(make_image(width, height), max_width)

        assert result.width <= max_width
        assert result.width <= width
        assert result.height <= height

        img = decode(result.data)
        assert img.size == (result.width, result.height)

    def test_aspect_ratio_preserved(self) -> None:
        result = normalize_image(make_image(1600, 900), 800)

        assert (result.width, result.height) == (800, 450)

    def test_output_is_jpeg(self) -> None:
        result = normalize_image(make_image(50, 50, fmt="PNG"), 400)

        assert result.content_type == "image/jpeg"
        assert decode(result.data).format == "JPEG"

    def test_transparent_png_is_flattened(self) -> None:
        result = normalize_image(make_image(60, 40, mode="RGBA"), 400)

        assert decode(result.data).mode == "RGB"

    def test_palette_gif_is_converted(self) -> None:
        result = normalize_image(make_image(60, 40, fmt="GIF"), 400)

        assert decode(result.data).format == "JPEG"

    def test_garbage_raises_decode_error(self) -> None:
        with pytest.raises(ImageDecodeError):
            normalize_image(b"definitely not an image", 400)

    def test_empty_bytes_raise_decode_error(self) -> None:
        with pytest.raises(ImageDecodeError):
            normalize_image(b"", 400)


class TestValidateUpload:
    def test_valid_upload(self) -> None:
        upload = ImageUpload(data=make_image(10, 10), content_type="image/png")

        assert validate_upload(upload, ImagePolicy(max_width=400)) == []

    def test_disallowed_mime_type(self) -> None:
        upload = ImageUpload(data=b"%PDF-1.4", content_type="application/pdf")

        errors = validate_upload(upload, ImagePolicy(max_width=400))

        assert [e.code for e in errors] == ["invalid_mime_type"]

    def test_too_large(self) -> None:
        upload = ImageUpload(data=b"x" * 101, content_type="image/png")
        policy = ImagePolicy(max_width=400, max_upload_bytes=100)

        errors = validate_upload(upload, policy)

        assert [e.code for e in errors] == ["file_too_large"]

    def test_empty_file(self) -> None:
        upload = ImageUpload(data=b"", content_type="image/png")

        errors = validate_upload(upload, ImagePolicy(max_width=400))

        assert errors[0].code == "empty_file"
        assert errors[0].field == "image"


class TestStorageKeys:
    def test_key_format(self) -> None:
        when = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

        key = generate_storage_key("events", "banner", when, token="abcd1234")

        assert key == f"events/banner_{int(when.timestamp() * 1000)}_abcd1234.jpg"

    def test_keys_are_unique_at_same_instant(self) -> None:
        when = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

        keys = {generate_storage_key("events", "banner", when) for _ in range(50)}

        assert len(keys) == 50


class TestStoreImage:
    def test_stores_and_resolves_url(self) -> None:
        storage = InMemoryObjectStore("http://testserver/media")
        normalized = normalize_image(make_image(800, 400), 400)

        stored = store_image(
            normalized,
            storage=storage,
            clock=FixedClock(),
            prefix="testimonials",
            stem="avatar",
        )

        assert stored.key.startswith("testimonials/avatar_")
        assert stored.url == f"http://testserver/media/{stored.key}"
        assert (stored.width, stored.height) == (400, 200)
        data, meta = storage.get_object(stored.key)
        assert data == normalized.data
        assert meta.content_type == "image/jpeg"


class TestPolicyFromRules:
    def test_defaults_without_rules(self) -> None:
        assert policy_from_rules(None, "banner").max_width == BANNER_MAX_WIDTH
        assert policy_from_rules(None, "avatar").max_width == AVATAR_MAX_WIDTH

    def test_reads_rules(self, rules: Rules) -> None:
        policy = policy_from_rules(rules, "avatar")

        assert policy.max_width == rules.images.avatar_max_width
        assert policy.jpeg_quality == rules.images.jpeg_quality
        assert policy.max_upload_bytes == rules.uploads.max_upload_bytes
        assert "image/png" in policy.allowed_mime_types
