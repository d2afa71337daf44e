from __future__ import annotations

import pytest

np = pytest.importorskip("numpy")

from image_enhancer import (  # noqa: E402  # pylint: disable=wrong-import-position
    PixelBuffer,
    adjust,
    apply_brightness,
    apply_contrast,
    apply_saturation,
    luminance,
)

try:
    from .documentation import documents
except ImportError:  # pragma: no cover - fallback for direct execution
    from tests.documentation import documents


def _solid(rgba, width: int = 2, height: int = 2) -> PixelBuffer:
    arr = np.empty((height, width, 4), dtype=np.uint8)
    arr[...] = rgba
    return PixelBuffer.from_array(arr)


def _random(seed: int, width: int = 5, height: int = 4) -> PixelBuffer:
    rng = np.random.default_rng(seed)
    return PixelBuffer.from_array(rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8))


@documents("Brightness saturates at white instead of wrapping")
def test_brightness_clamps_to_white():
    out = adjust(_solid((200, 200, 200, 255)), 200, 100, 100)

    assert out.pixel(1, 1) == (255, 255, 255, 255)


@documents("Zero contrast collapses every channel onto the pivot")
def test_zero_contrast_collapses_to_mid_grey():
    source = _random(7)

    out = adjust(source, 100, 0, 100)

    assert np.all(out.rgb == 128)
    np.testing.assert_array_equal(out.alpha, source.alpha)


def test_brightness_scales_each_channel_independently():
    out = adjust(_solid((100, 50, 4, 77)), 50, 100, 100)

    assert out.pixel(0, 0) == (50, 25, 2, 77)


def test_contrast_recentres_around_128():
    out = adjust(_solid((128, 28, 228, 255)), 100, 150, 100)

    assert out.pixel(0, 0) == (128, 0, 255, 255)


def test_zero_saturation_produces_luma_grey():
    out = adjust(_solid((255, 0, 0, 255)), 100, 100, 0)

    # 0.2126 * 255 = 54.213
    assert out.pixel(0, 0) == (54, 54, 54, 255)


def test_saturation_leaves_neutral_pixels_alone():
    source = _solid((100, 100, 100, 255))

    assert adjust(source, 100, 100, 200) == source


def test_saturation_boost_pushes_away_from_grey():
    out = adjust(_solid((150, 100, 100, 255)), 100, 100, 200)
    r, g, b, _ = out.pixel(0, 0)

    assert r > 150
    assert g < 100
    assert g == b


@documents("Brightness runs before contrast, matching the filter chain order")
def test_stages_apply_in_filter_order():
    out = adjust(_solid((200, 200, 200, 255)), 50, 200, 100)

    # brightness first: 200 -> 100; then contrast: (100 - 128) * 2 + 128 = 72
    assert out.pixel(0, 0)[:3] == (72, 72, 72)


def test_alpha_passes_through_unchanged():
    source = _solid((90, 120, 30, 10))

    out = adjust(source, 180, 40, 160)

    assert out.pixel(0, 0)[3] == 10


def test_out_of_range_percentages_are_clamped_not_rejected():
    out = adjust(_solid((100, 100, 100, 255)), 300, 100, 100)

    assert out.pixel(0, 0) == (255, 255, 255, 255)


def test_input_buffer_is_not_modified():
    source = _random(11)
    before = source.to_bytes()

    result = adjust(source, 140, 60, 170)

    assert source.to_bytes() == before
    assert result is not source


def test_identity_returns_equal_new_buffer():
    source = _random(3)

    result = adjust(source, 100, 100, 100)

    assert result == source
    assert result is not source


def test_array_helpers_skip_identity():
    arr = np.full((1, 1, 3), 42.0)

    assert apply_brightness(arr, 100) is arr
    assert apply_contrast(arr, 100) is arr
    assert apply_saturation(arr, 100) is arr


def test_luminance_uses_rec709_weights():
    arr = np.array([[[255.0, 0.0, 0.0], [0.0, 255.0, 0.0], [0.0, 0.0, 255.0]]])

    lum = luminance(arr)

    np.testing.assert_allclose(lum[0], [0.2126 * 255, 0.7152 * 255, 0.0722 * 255])
