"""
Sliding-window buffers.

This module provides the two bounded-memory buffers used by the windowed
analyzers:

- SlidingWindowMax: monotonic deque over (frame index, value) pairs giving
  the maximum over a trailing window in O(1) amortized time per frame.
- SampleRingBuffer: per-channel ring of the most recent frames, read back
  as a zero-filled window ending at any retained frame.

Both are array-backed rings addressed by head/tail indices.
"""

from typing import Optional

import numpy as np


class SlidingWindowMax:
    """
    Monotonic deque of (frame index, value) pairs in decreasing value order.

    Entries are pushed in increasing frame order. Pushing evicts from the
    tail every entry whose value is not greater than the new one, since it
    can never be the window maximum again. Callers evict from the head once
    the window start moves past an entry.

    Examples:
        >>> window = SlidingWindowMax()
        >>> for i, v in enumerate([0.1, 0.5, 0.2]):
        ...     window.push(i, v)
        >>> window.evict_before(2)
        >>> window.max()
        0.2
    """

    def __init__(self, initial_capacity: int = 16):
        """
        Initialize an empty window.

        Args:
            initial_capacity: Starting ring size; the ring doubles when full
        """
        capacity = max(2, initial_capacity)
        self._indices = np.zeros(capacity, dtype=np.int64)
        self._values = np.zeros(capacity, dtype=np.float64)
        self._head = 0
        self._size = 0

    def __len__(self) -> int:
        return self._size

    @property
    def capacity(self) -> int:
        return len(self._indices)

    def push(self, frame_index: int, value: float) -> None:
        """Append an entry, evicting dominated entries from the tail."""
        capacity = len(self._indices)
        while self._size > 0:
            tail = (self._head + self._size - 1) % capacity
            if self._values[tail] > value:
                break
            self._size -= 1

        if self._size == capacity:
            self._grow()
            capacity = len(self._indices)

        slot = (self._head + self._size) % capacity
        self._indices[slot] = frame_index
        self._values[slot] = value
        self._size += 1

    def evict_before(self, window_start: int) -> None:
        """Drop head entries whose frame index precedes the window start."""
        capacity = len(self._indices)
        while self._size > 0 and self._indices[self._head] < window_start:
            self._head = (self._head + 1) % capacity
            self._size -= 1

    def max(self, default: Optional[float] = 0.0) -> Optional[float]:
        """Current window maximum, or default when empty."""
        if self._size == 0:
            return default
        return float(self._values[self._head])

    def clear(self) -> None:
        self._head = 0
        self._size = 0

    def _grow(self) -> None:
        capacity = len(self._indices)
        order = (self._head + np.arange(self._size)) % capacity
        indices = np.zeros(capacity * 2, dtype=np.int64)
        values = np.zeros(capacity * 2, dtype=np.float64)
        indices[:self._size] = self._indices[order]
        values[:self._size] = self._values[order]
        self._indices = indices
        self._values = values
        self._head = 0


class SampleRingBuffer:
    """
    Per-channel ring holding the most recent frames of a stream.

    The ring keeps window_frames + 2 frames so a window ending at the newest
    frame can always be read back.

    Attributes:
        channel_count: Number of channels per frame
        window_frames: Longest window that can be read back
        frames_written: Total frames appended so far
    """

    def __init__(self, channel_count: int, window_frames: int):
        """
        Initialize ring buffer.

        Args:
            channel_count: Channels per frame
            window_frames: Longest window that will be requested

        Raises:
            ValueError: If channel count or window is not positive
        """
        if channel_count <= 0:
            raise ValueError('Channel count must be positive')
        if window_frames <= 0:
            raise ValueError('Window must be positive')

        self.channel_count = channel_count
        self.window_frames = window_frames
        self.ring_length = window_frames + 2
        self.frames_written = 0
        self._buffer = np.zeros((channel_count, self.ring_length), dtype=np.float64)
        self._offsets = np.arange(window_frames, dtype=np.int64)

    def append(self, samples: np.ndarray) -> None:
        """Store one frame of per-channel samples."""
        self._buffer[:, self.frames_written % self.ring_length] = samples
        self.frames_written += 1

    def window(self, start_frame: int) -> np.ndarray:
        """
        Read window_frames frames starting at start_frame.

        Frames before index 0 or not yet written read as zero.

        Returns:
            Array of shape (channel_count, window_frames)

        Raises:
            RuntimeError: If part of the window has already been overwritten
        """
        frames = start_frame + self._offsets
        oldest_retained = max(0, self.frames_written - self.ring_length)
        valid = (frames >= 0) & (frames < self.frames_written)
        if np.any(valid & (frames < oldest_retained)):
            raise RuntimeError('Insufficient buffer for requested frame window')

        result = np.zeros((self.channel_count, self.window_frames), dtype=np.float64)
        result[:, valid] = self._buffer[:, frames[valid] % self.ring_length]
        return result
