"""
Shared pytest fixtures for pcm-analysis tests.
"""

import numpy as np
import pytest

from pcm_analysis.models import TimeArgument
from pcm_analysis.sources import ArrayFrameSource
from pcm_analysis.config import reset_settings


LOUD = 0.5
QUIET = 0.0005  # about -66 dB


def alternating(frame_count: int, amplitude: float) -> np.ndarray:
    """Square wave that never crosses zero on a sample."""
    signs = np.where(np.arange(frame_count) % 2 == 0, 1.0, -1.0)
    return (signs * amplitude).astype(np.float32)


def build_signal(*parts):
    """Concatenate (frame_count, amplitude) parts into one mono signal."""
    return np.concatenate([alternating(count, amplitude) for count, amplitude in parts])


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Every test reads settings from its own environment."""
    for name in (
        'PCM_ANALYSIS_LOG_LEVEL',
        'PCM_ANALYSIS_JSON_LOGS',
        'PCM_ANALYSIS_MAX_WORKERS',
        'PCM_ANALYSIS_READ_BLOCK_FRAMES',
        'PCM_ANALYSIS_RENDER_INTERVAL_MS',
        'PCM_ANALYSIS_MIN_LIMIT_DB',
    ):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def speech_with_gap():
    """
    10000 frames at 1000 Hz: 100 quiet, 3000 loud, 3000 quiet, 3900 loud.

    Silence analysis at -40 dB / 2000ms finds first sound at 100 and one
    run [3100, 6100).
    """
    return build_signal((100, QUIET), (3000, LOUD), (3000, QUIET), (3900, LOUD))


@pytest.fixture
def speech_source_factory(speech_with_gap):
    """Source factory returning the in-memory speech signal for any path."""
    return lambda path: ArrayFrameSource(speech_with_gap, sample_rate=1000)


@pytest.fixture
def two_seconds():
    return TimeArgument.parse('2000ms')


@pytest.fixture
def signal_builder():
    """Builder for mono test signals from (frame_count, amplitude) parts."""
    return build_signal
