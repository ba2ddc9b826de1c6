"""
Raw PCM byte-stream frame source.

Reads interleaved 32-bit float little-endian samples from a binary
stream, such as the stdout pipe of an external decoder, and pushes them
frame by frame.
"""

import logging
import threading
from typing import BinaryIO, Optional

import numpy as np

from pcm_analysis.exceptions import IncompleteFrameDataError, InvalidArgumentError
from pcm_analysis.sources.frame_source import FrameSink, check_cancelled, push_block, resampled_blocks

logger = logging.getLogger(__name__)

BYTES_PER_SAMPLE = 4
_F32LE = np.dtype('<f4')


class RawPcmFrameSource:
    """
    Frame source over an interleaved f32le byte stream.

    Bytes that do not complete a frame are carried over to the next read.
    Leftover bytes at end of stream raise IncompleteFrameDataError after
    every complete frame has been delivered.

    Attributes:
        stream: Binary file-like object with read()
        sample_rate: Rate of the samples in the stream
        channel_count: Channels per frame
        chunk_frames: Frames requested per read
    """

    def __init__(
        self,
        stream: BinaryIO,
        sample_rate: int,
        channel_count: int,
        chunk_frames: int = 4096
    ):
        if sample_rate <= 0:
            raise InvalidArgumentError(f"sample rate must be positive, got {sample_rate}")
        if channel_count <= 0:
            raise InvalidArgumentError(f"channel count must be positive, got {channel_count}")
        if chunk_frames <= 0:
            raise InvalidArgumentError(f"chunk size must be positive, got {chunk_frames}")

        self.stream = stream
        self.sample_rate = sample_rate
        self.channel_count = channel_count
        self.chunk_frames = chunk_frames
        self.frame_bytes = channel_count * BYTES_PER_SAMPLE

    def _blocks(self, state: dict):
        pending = b''
        read_size = self.chunk_frames * self.frame_bytes
        while True:
            chunk = self.stream.read(read_size)
            if not chunk:
                break
            data = pending + chunk
            usable = len(data) - len(data) % self.frame_bytes
            pending = data[usable:]
            if usable:
                yield np.frombuffer(data[:usable], dtype=_F32LE).reshape(-1, self.channel_count)
        state['leftover'] = len(pending)

    def read_frames(
        self,
        sink: FrameSink,
        cancel_event: Optional[threading.Event] = None,
        target_sample_rate: Optional[int] = None
    ) -> int:
        """
        Push every complete frame to the sink.

        Returns:
            Number of frames delivered

        Raises:
            IncompleteFrameDataError: If the stream ends mid-frame
            AnalysisCancelledError: If cancellation is observed
        """
        state = {'leftover': 0}
        delivered = 0
        blocks = resampled_blocks(
            self._blocks(state), self.sample_rate, target_sample_rate, self.channel_count
        )
        for block in blocks:
            delivered += push_block(block, sink, cancel_event)
        check_cancelled(cancel_event)

        if state['leftover']:
            logger.error(
                f"Frame stream ended mid-frame: {state['leftover']} dangling bytes "
                f"after {delivered} frames"
            )
            raise IncompleteFrameDataError(
                f"{state['leftover']} bytes left over, frame size is {self.frame_bytes} bytes",
                leftover_bytes=state['leftover'],
            )
        return delivered
