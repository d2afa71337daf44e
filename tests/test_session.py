from __future__ import annotations

import threading
from pathlib import Path

import pytest

np = pytest.importorskip("numpy")
pytest.importorskip("PIL.Image")

from image_enhancer import (  # noqa: E402  # pylint: disable=wrong-import-position
    EnhancementParams,
    EnhancementSession,
    LatestRequestRunner,
    PixelBuffer,
    enhance,
    load_image,
    reset,
)
from image_enhancer import session as session_module  # noqa: E402  # pylint: disable=wrong-import-position

try:
    from .documentation import documents
except ImportError:  # pragma: no cover - fallback for direct execution
    from tests.documentation import documents


def _sample(seed: int = 1) -> PixelBuffer:
    rng = np.random.default_rng(seed)
    return PixelBuffer.from_array(rng.integers(0, 256, size=(5, 6, 4), dtype=np.uint8))


def test_load_enhances_with_current_parameters():
    params = EnhancementParams(brightness=140, sharpness=20)
    session = EnhancementSession(params=params)
    original = _sample()

    result = session.load(original)

    assert session.original is original
    assert result == enhance(original, params)
    assert session.enhanced == result


def test_update_clamps_and_recomputes():
    session = EnhancementSession(_sample())

    result = session.update(brightness=500, contrast=-3)

    assert session.params == EnhancementParams(brightness=200, contrast=0)
    assert result == enhance(session.original, session.params)


def test_update_before_load_only_stores_parameters():
    session = EnhancementSession()

    assert session.update(saturation=50) is None
    assert session.params.saturation == 50
    assert session.enhanced is None


@documents("Reset returns the preview to the untouched original")
def test_reset_restores_original():
    original = _sample(2)
    session = EnhancementSession(original, EnhancementParams(brightness=10, sharpness=200))
    assert session.enhanced != original

    result = session.reset()

    assert session.params == reset()
    assert result == original


def test_export_requires_an_image(tmp_path: Path):
    session = EnhancementSession()

    with pytest.raises(RuntimeError):
        session.export(tmp_path / "out.png")


def test_export_writes_enhanced_image(tmp_path: Path):
    session = EnhancementSession(_sample(3))
    session.update(contrast=150, sharpness=80)

    written = session.export(tmp_path / "enhanced-image.png")

    assert written.exists()
    assert load_image(written) == session.enhanced


def test_runner_returns_latest_result():
    original = _sample(4)
    params = [EnhancementParams(brightness=value) for value in (50, 100, 150)]

    with LatestRequestRunner() as runner:
        for item in params:
            runner.submit(original, item)
        result = runner.wait(timeout=10)

    assert result == enhance(original, params[-1])
    assert runner.generation == 3


def test_runner_wait_without_requests_returns_none():
    with LatestRequestRunner() as runner:
        assert runner.wait() is None
        assert runner.latest is None


@documents("Superseded requests never overwrite a newer preview")
def test_runner_discards_stale_and_cancels_queued(monkeypatch: pytest.MonkeyPatch):
    original = _sample(5)
    first_params = EnhancementParams(brightness=20)
    queued_params = EnhancementParams(brightness=60)
    newest_params = EnhancementParams(brightness=180)

    started = threading.Event()
    release = threading.Event()
    seen: list[EnhancementParams] = []
    real_enhance = session_module.enhance

    def gated_enhance(buffer, params, *, workers=1):
        seen.append(params)
        if len(seen) == 1:
            started.set()
            release.wait(10)
        return real_enhance(buffer, params, workers=workers)

    monkeypatch.setattr(session_module, "enhance", gated_enhance)

    delivered: list[PixelBuffer] = []
    with LatestRequestRunner(on_result=delivered.append) as runner:
        first = runner.submit(original, first_params)
        assert started.wait(10)
        queued = runner.submit(original, queued_params)
        runner.submit(original, newest_params)
        release.set()
        result = runner.wait(timeout=10)

    assert queued.cancelled()
    assert first.result() == real_enhance(original, first_params)
    assert seen == [first_params, newest_params]
    assert result == real_enhance(original, newest_params)
    assert delivered == [result]
    assert runner.latest == result


def test_runner_propagates_errors_from_wait(monkeypatch: pytest.MonkeyPatch):
    def broken_enhance(buffer, params, *, workers=1):
        raise RuntimeError("boom")

    monkeypatch.setattr(session_module, "enhance", broken_enhance)

    with LatestRequestRunner() as runner:
        runner.submit(_sample(), reset())
        with pytest.raises(RuntimeError, match="boom"):
            runner.wait(timeout=10)
        assert runner.latest is None
