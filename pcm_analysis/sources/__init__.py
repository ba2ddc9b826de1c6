"""
Frame sources.

This module contains adapters that deliver decoded frames to analyzers
and the probe that reports stream metadata.
"""

from pcm_analysis.sources.frame_source import ArrayFrameSource, FrameSink, push_block
from pcm_analysis.sources.raw_pcm_source import RawPcmFrameSource
from pcm_analysis.sources.soundfile_source import (
    SoundFileFrameSource,
    SoundFileSegmentExporter,
    probe_stream,
    resolve_bit_depth,
)

__all__ = [
    'ArrayFrameSource',
    'FrameSink',
    'push_block',
    'RawPcmFrameSource',
    'SoundFileFrameSource',
    'SoundFileSegmentExporter',
    'probe_stream',
    'resolve_bit_depth',
]
