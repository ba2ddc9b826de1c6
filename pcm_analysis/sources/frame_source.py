"""
Frame source contracts and the in-memory source.

This module defines the FrameSink protocol every analyzer satisfies and
the helpers frame sources share: per-frame delivery with cooperative
cancellation, and streaming resampling through soxr when a caller asks
for an analysis rate that differs from the stream's.
"""

import logging
import threading
from typing import Iterable, Optional, Protocol

import numpy as np
import soxr

from pcm_analysis.exceptions import AnalysisCancelledError, InvalidArgumentError
from pcm_analysis.models.stream_info import BitDepth, StreamInfo

logger = logging.getLogger(__name__)


class FrameSink(Protocol):
    """
    Protocol for consumers of a pushed frame stream.

    Frames arrive in strict order from a single producer.
    """

    def on_frame(self, samples: np.ndarray) -> None:
        """
        Consume one frame.

        Args:
            samples: Per-channel samples of the frame, shape (channel_count,)
        """
        ...


def check_cancelled(cancel_event: Optional[threading.Event]) -> None:
    """Raise AnalysisCancelledError if cancellation was requested."""
    if cancel_event is not None and cancel_event.is_set():
        raise AnalysisCancelledError('analysis cancelled')


def push_block(
    block: np.ndarray,
    sink: FrameSink,
    cancel_event: Optional[threading.Event] = None
) -> int:
    """
    Push every frame of a (frames, channels) block to a sink.

    Cancellation is checked before each frame, so no frame is processed
    partially and a request is honoured within one frame.

    Returns:
        Number of frames delivered
    """
    delivered = 0
    for frame in block:
        check_cancelled(cancel_event)
        sink.on_frame(frame)
        delivered += 1
    return delivered


def resampled_blocks(
    blocks: Iterable[np.ndarray],
    source_rate: int,
    target_rate: Optional[int],
    channel_count: int
) -> Iterable[np.ndarray]:
    """
    Yield blocks converted to target_rate with soxr's streaming resampler.

    Blocks are passed through unchanged when no conversion is needed.
    """
    if target_rate is None or target_rate == source_rate:
        yield from blocks
        return

    if target_rate <= 0:
        raise InvalidArgumentError(f"target sample rate must be positive, got {target_rate}")

    logger.debug(f"Resampling stream {source_rate}Hz -> {target_rate}Hz")
    resampler = soxr.ResampleStream(source_rate, target_rate, channel_count, dtype='float32')
    for block in blocks:
        out = resampler.resample_chunk(np.ascontiguousarray(block, dtype=np.float32), last=False)
        if len(out):
            yield out.reshape(-1, channel_count)
    tail = resampler.resample_chunk(np.zeros((0, channel_count), dtype=np.float32), last=True)
    if len(tail):
        yield tail.reshape(-1, channel_count)


class ArrayFrameSource:
    """
    Frame source over decoded samples already held in memory.

    Useful for tests and for callers that decode by other means.

    Examples:
        >>> source = ArrayFrameSource(np.zeros((48000, 2)), sample_rate=48000)
        >>> source.read_frames(analyzer)
        48000
    """

    def __init__(
        self,
        samples: np.ndarray,
        sample_rate: int,
        bit_depth: BitDepth = BitDepth.F32,
        block_frames: int = 4096
    ):
        """
        Initialize array source.

        Args:
            samples: Array of shape (frames,) or (frames, channels)
            sample_rate: Sample rate in Hz
            bit_depth: Bit depth reported by probe() (default: F32)
            block_frames: Frames per resampling block (default: 4096)
        """
        samples = np.asarray(samples, dtype=np.float32)
        if samples.ndim == 1:
            samples = samples[:, np.newaxis]
        if samples.ndim != 2 or samples.shape[1] == 0:
            raise InvalidArgumentError(f"samples must be (frames, channels), got shape {samples.shape}")
        if sample_rate <= 0:
            raise InvalidArgumentError(f"sample rate must be positive, got {sample_rate}")

        self.samples = samples
        self.sample_rate = sample_rate
        self.bit_depth = bit_depth
        self.block_frames = block_frames

    @property
    def channel_count(self) -> int:
        return self.samples.shape[1]

    def probe(self) -> StreamInfo:
        return StreamInfo(
            sample_rate=self.sample_rate,
            channel_count=self.channel_count,
            bit_depth=self.bit_depth,
            estimated_total_frames=len(self.samples) or None,
        )

    def read_frames(
        self,
        sink: FrameSink,
        cancel_event: Optional[threading.Event] = None,
        target_sample_rate: Optional[int] = None
    ) -> int:
        """
        Push every frame to the sink.

        Returns:
            Number of frames delivered
        """
        blocks = (
            self.samples[start:start + self.block_frames]
            for start in range(0, len(self.samples), self.block_frames)
        )
        delivered = 0
        for block in resampled_blocks(blocks, self.sample_rate, target_sample_rate, self.channel_count):
            delivered += push_block(block, sink, cancel_event)
        check_cancelled(cancel_event)
        return delivered
