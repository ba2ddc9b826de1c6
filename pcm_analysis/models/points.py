"""
Analysis point data models.

This module defines the immutable point values handed to point sinks
by the windowed analyzers, and the summary returned once a pass ends.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class AnchorUnit(Enum):
    """Unit of the anchor value persisted on spectral points."""

    SAMPLE = 'sample'
    MILLISECOND = 'ms'


@dataclass(frozen=True)
class PeakPoint:
    """Peak envelope sample emitted at one anchor."""

    name: str
    stem: str
    window_ms: int
    ms: int  # anchor timestamp
    db: float

    def __post_init__(self):
        """Validates point values."""
        if not self.name or not self.name.strip():
            raise ValueError('Point name must not be empty')
        if self.window_ms <= 0:
            raise ValueError('Window must be positive')
        if self.ms < 0:
            raise ValueError('Anchor must be non-negative')
        if math.isnan(self.db):
            raise ValueError('Peak dB must not be NaN')


@dataclass(frozen=True)
class SpectralPoint:
    """
    Band-magnitude spectrum of one channel at one anchor.

    Attributes:
        name: Identifying label
        channel: Zero-based channel index
        window: Window length as persisted (samples or ms)
        anchor: Anchor timestamp (samples or ms)
        bins: Per-band magnitudes in dB, lowest frequency first
    """

    name: str
    channel: int
    window: int
    anchor: int
    bins: Tuple[float, ...]

    def __post_init__(self):
        """Validates point values."""
        if not self.name or not self.name.strip():
            raise ValueError('Point name must not be empty')
        if self.channel < 0:
            raise ValueError('Channel must be non-negative')
        if self.window <= 0:
            raise ValueError('Window must be positive')
        if self.anchor < 0:
            raise ValueError('Anchor must be non-negative')
        object.__setattr__(self, 'bins', tuple(float(b) for b in self.bins))
        if not self.bins:
            raise ValueError('Spectral point must carry at least one bin')
        if not all(math.isfinite(b) for b in self.bins):
            raise ValueError('Spectral bins must be finite')


@dataclass(frozen=True)
class AnalysisSummary:
    """Summary of a finished windowed analysis pass."""

    point_count: int
    total_frames: int
    last_anchor: int  # 0 when nothing was emitted

    def __post_init__(self):
        """Validates summary values."""
        if self.point_count < 0 or self.total_frames < 0 or self.last_anchor < 0:
            raise ValueError('Summary values must be non-negative')
