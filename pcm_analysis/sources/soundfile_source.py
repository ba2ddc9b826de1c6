"""
soundfile-backed probe, frame source and segment exporter.

This module adapts libsndfile (through the soundfile package) to the
frame push contract: probing stream metadata, decoding blocks as float32
and writing planned segments back out as WAV files.
"""

import logging
import os
import threading
from typing import Dict, Optional

import soundfile as sf

from pcm_analysis.config.settings import get_settings
from pcm_analysis.exceptions import (
    AnalysisCancelledError,
    FrameReadError,
    InputNotFoundError,
    InvalidArgumentError,
    ProbeFailedError,
    SegmentExportError,
)
from pcm_analysis.models.silence import AudioSegment
from pcm_analysis.models.stream_info import BitDepth, StreamInfo
from pcm_analysis.models.value_objects import OutputAudioFormat
from pcm_analysis.sources.frame_source import FrameSink, check_cancelled, push_block, resampled_blocks

logger = logging.getLogger(__name__)

SUBTYPE_BIT_DEPTHS: Dict[str, BitDepth] = {
    'PCM_16': BitDepth.PCM16,
    'PCM_24': BitDepth.PCM24,
    'FLOAT': BitDepth.F32,
}

DEFAULT_BLOCK_FRAMES = 4096
PARTIAL_SUFFIX = '.part'


def resolve_bit_depth(subtype: str) -> BitDepth:
    """
    Map a libsndfile subtype to a bit depth.

    32-bit integer, double and 8-bit subtypes are reported as UNSUPPORTED.
    """
    return SUBTYPE_BIT_DEPTHS.get((subtype or '').upper(), BitDepth.UNSUPPORTED)


def _require_file(path: str) -> None:
    if not os.path.isfile(path):
        raise InputNotFoundError(path)


def _discard_partial(path: str) -> None:
    try:
        if os.path.exists(path):
            os.remove(path)
    except OSError as e:
        logger.warning(f"Could not remove partial segment file {path}: {e}")


def probe_stream(path: str) -> StreamInfo:
    """
    Read stream metadata for an audio file.

    Args:
        path: Audio file path

    Returns:
        StreamInfo with sample rate, channels, bit depth and frame estimate

    Raises:
        InputNotFoundError: If the file does not exist
        ProbeFailedError: If libsndfile cannot read the header
    """
    _require_file(path)
    try:
        info = sf.info(path)
    except (sf.SoundFileError, OSError) as e:
        logger.error(f"Probe failed for {path}: {e}")
        raise ProbeFailedError(f"{path}: {e}", original_error=e)

    frames = int(info.frames) if info.frames and info.frames > 0 else None
    stream_info = StreamInfo(
        sample_rate=int(info.samplerate),
        channel_count=int(info.channels),
        bit_depth=resolve_bit_depth(info.subtype),
        estimated_total_frames=frames,
    )
    logger.debug(f"Probed {path}: {stream_info} ({info.subtype}, frames={frames})")
    return stream_info


class SoundFileFrameSource:
    """
    Frame source decoding an audio file in float32 blocks.

    Memory use is bounded by block_frames regardless of file length.
    """

    def __init__(self, path: str, block_frames: Optional[int] = None):
        if block_frames is None:
            block_frames = get_settings().read_block_frames
        if block_frames <= 0:
            raise InvalidArgumentError(f"block size must be positive, got {block_frames}")
        self.path = path
        self.block_frames = block_frames

    def probe(self) -> StreamInfo:
        return probe_stream(self.path)

    def read_frames(
        self,
        sink: FrameSink,
        cancel_event: Optional[threading.Event] = None,
        target_sample_rate: Optional[int] = None
    ) -> int:
        """
        Decode the file and push every frame to the sink.

        Args:
            sink: Frame consumer
            cancel_event: Optional shared cancellation signal
            target_sample_rate: Analysis rate; frames are resampled when it
                differs from the file's rate

        Returns:
            Number of frames delivered
        """
        _require_file(self.path)
        delivered = 0
        try:
            with sf.SoundFile(self.path) as audio:
                blocks = audio.blocks(blocksize=self.block_frames, dtype='float32', always_2d=True)
                for block in resampled_blocks(blocks, audio.samplerate, target_sample_rate, audio.channels):
                    delivered += push_block(block, sink, cancel_event)
        except (sf.SoundFileError, OSError) as e:
            logger.error(f"Decoding failed for {self.path} after {delivered} frames: {e}")
            raise FrameReadError(f"{self.path}: {e}", original_error=e)
        check_cancelled(cancel_event)
        return delivered


class SoundFileSegmentExporter:
    """
    Writes one planned segment of an input file as a WAV file.

    Frames are written to a sibling '.part' file that is moved over
    output_path only once the whole segment is written. A failed or
    cancelled export leaves no file at output_path.
    """

    def __init__(self, block_frames: int = DEFAULT_BLOCK_FRAMES):
        self.block_frames = block_frames

    def export(
        self,
        input_path: str,
        output_path: str,
        segment: AudioSegment,
        output_format: OutputAudioFormat,
        sample_rate: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> None:
        """
        Copy frames [segment.start_frame, segment.end_frame) to output_path.

        Args:
            input_path: Source audio file
            output_path: Destination WAV path (overwritten if present)
            segment: Frame range to copy
            output_format: Sample format of the written file
            sample_rate: Output rate; resampled when it differs from the input
            cancel_event: Optional shared cancellation signal

        Raises:
            SegmentExportError: If reading or writing fails
            AnalysisCancelledError: If cancellation is observed mid-segment
        """
        partial_path = output_path + PARTIAL_SUFFIX
        try:
            self._write_segment(input_path, partial_path, segment, output_format, sample_rate, cancel_event)
            os.replace(partial_path, output_path)
        except AnalysisCancelledError:
            _discard_partial(partial_path)
            logger.info(f"Export of {output_path} cancelled")
            raise
        except (sf.SoundFileError, OSError) as e:
            _discard_partial(partial_path)
            logger.error(f"Export failed for {output_path}: {e}")
            raise SegmentExportError(f"{output_path}: {e}", original_error=e)

        logger.debug(
            f"Exported frames [{segment.start_frame}, {segment.end_frame}) to {output_path} "
            f"as {output_format.codec_name}"
        )

    def _write_segment(self, input_path, partial_path, segment, output_format, sample_rate, cancel_event):
        with sf.SoundFile(input_path) as audio:
            out_rate = sample_rate or audio.samplerate
            audio.seek(segment.start_frame)
            blocks = self._segment_blocks(audio, segment.frame_count)
            with sf.SoundFile(
                partial_path,
                mode='w',
                samplerate=out_rate,
                channels=audio.channels,
                subtype=output_format.soundfile_subtype,
                format='WAV',
            ) as out:
                for block in resampled_blocks(blocks, audio.samplerate, out_rate, audio.channels):
                    check_cancelled(cancel_event)
                    out.write(block)

    def _segment_blocks(self, audio: sf.SoundFile, frame_count: int):
        remaining = frame_count
        while remaining > 0:
            block = audio.read(min(self.block_frames, remaining), dtype='float32', always_2d=True)
            if len(block) == 0:
                break
            remaining -= len(block)
            yield block
