"""
Stream metadata data model.

This module defines the StreamInfo dataclass describing one decoded
input stream, as reported by the external probe.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class BitDepth(Enum):
    """Sample format reported by the probe."""

    PCM16 = 16
    PCM24 = 24
    F32 = 32
    UNSUPPORTED = 0

    @property
    def bits(self) -> int:
        """Number of bits per sample (0 when unsupported)."""
        return self.value


@dataclass(frozen=True)
class StreamInfo:
    """Immutable stream metadata, supplied once per input."""

    sample_rate: int  # Hz
    channel_count: int
    bit_depth: BitDepth
    estimated_total_frames: Optional[int] = None  # None when unknown

    def __post_init__(self):
        """Validates stream metadata."""
        if self.sample_rate <= 0:
            raise ValueError('Sample rate must be positive')
        if self.channel_count <= 0:
            raise ValueError('Channel count must be positive')
        if self.estimated_total_frames is not None and self.estimated_total_frames <= 0:
            raise ValueError('Estimated total frames must be positive when known')

    def __str__(self) -> str:
        return f"{self.sample_rate}Hz/{self.channel_count}ch/{self.bit_depth.bits}bit"
