"""
Analysis use cases.

This module wires frame sources to analyzers for one input file:
silence analysis and splitting, peak envelope, and STFT/SFFT spectra.
Every use case validates its request eagerly, probes the stream, then
streams frames once through a fresh analyzer instance.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Callable, List, Optional, Protocol, Tuple

from pcm_analysis.analyzers.frame_math import time_ms_to_frames_floor
from pcm_analysis.analyzers.peak_window_analyzer import PeakPointSink, PeakWindowAnalyzer
from pcm_analysis.analyzers.segment_planner import build_segments
from pcm_analysis.analyzers.silence_state_machine import ProgressCallback, SilenceStateMachine
from pcm_analysis.analyzers.spectral_window_analyzer import (
    SfftWindowAnalyzer,
    SpectralPointSink,
    StftWindowAnalyzer,
    max_bin_count,
)
from pcm_analysis.exceptions import InvalidArgumentError, OutputDirectoryError
from pcm_analysis.models.points import AnalysisSummary
from pcm_analysis.models.requests import (
    PeakAnalysisRequest,
    SfftAnalysisRequest,
    SplitRequest,
    StftAnalysisRequest,
)
from pcm_analysis.models.silence import SilenceAnalysisResult, SplitSummary
from pcm_analysis.models.stream_info import StreamInfo
from pcm_analysis.models.value_objects import OutputAudioFormat, TimeArgument
from pcm_analysis.sources.frame_source import FrameSink, check_cancelled
from pcm_analysis.sources.soundfile_source import SoundFileFrameSource, SoundFileSegmentExporter
from pcm_analysis.utils.structured_logger import log_analysis_summary, log_silence_result

logger = logging.getLogger(__name__)


class FrameSource(Protocol):
    """Protocol for the external decoder side of an analysis."""

    def probe(self) -> StreamInfo:
        ...

    def read_frames(
        self,
        sink: FrameSink,
        cancel_event: Optional[threading.Event] = None,
        target_sample_rate: Optional[int] = None
    ) -> int:
        ...


class SegmentExporter(Protocol):
    """Protocol for writing one planned segment to disk."""

    def export(self, input_path, output_path, segment, output_format, sample_rate=None, cancel_event=None) -> None:
        ...


SourceFactory = Callable[[str], FrameSource]


def _raise_if_invalid(errors: List[str]) -> None:
    if errors:
        raise InvalidArgumentError('; '.join(errors))


def segment_output_path(output_directory: str, stem: str, index: int) -> str:
    """Output path of the index-th (1-based) segment of an input."""
    return os.path.join(output_directory, f"{stem}_{index:03d}.wav")


def analyze_silence(
    source: FrameSource,
    level_db: float,
    duration: TimeArgument,
    cancel_event: Optional[threading.Event] = None,
    progress_callback: Optional[ProgressCallback] = None,
    stream_info: Optional[StreamInfo] = None
) -> Tuple[StreamInfo, SilenceAnalysisResult]:
    """
    Probe a source and run one silence analysis pass over it.

    Args:
        source: Frame source for the input
        level_db: Silence level in dB
        duration: Minimum silence duration
        cancel_event: Optional shared cancellation signal
        progress_callback: Optional callable(processed, estimated_total)
        stream_info: Already probed metadata; probed from source when None

    Returns:
        (stream info, finished silence analysis)
    """
    if stream_info is None:
        stream_info = source.probe()
    machine = SilenceStateMachine.for_duration(
        level_db=level_db,
        duration=duration,
        sample_rate=stream_info.sample_rate,
        estimated_total_frames=stream_info.estimated_total_frames,
        progress_callback=progress_callback,
    )
    source.read_frames(machine, cancel_event=cancel_event)
    return stream_info, machine.finish()


class SplitAudioUseCase:
    """
    Splits an input file at qualifying silence runs.

    Steps:
    1. Validate the request, probe the stream and resolve the output format
    2. Create the output directory
    3. Run silence analysis and plan segments
    4. Export each segment as {stem}_{index:03d}.wav, skipping existing
       files unless overwrite is set
    """

    def __init__(
        self,
        source_factory: SourceFactory = SoundFileFrameSource,
        exporter: Optional[SegmentExporter] = None
    ):
        self.source_factory = source_factory
        self.exporter = exporter or SoundFileSegmentExporter()

    def plan(
        self,
        request: SplitRequest,
        cancel_event: Optional[threading.Event] = None,
        progress_callback: Optional[ProgressCallback] = None,
        stream_info: Optional[StreamInfo] = None
    ):
        """
        Analyze and plan segments without exporting.

        Returns:
            (stream info, silence result, segments)
        """
        _raise_if_invalid(request.validate())
        source = self.source_factory(request.input_path)
        stream_info, result = analyze_silence(
            source, request.level_db, request.duration, cancel_event, progress_callback, stream_info
        )
        segments = build_segments(
            result, stream_info.sample_rate, request.after_offset, request.resume_offset
        )
        log_silence_result(request.input_path, result, segment_count=len(segments))
        return stream_info, result, segments

    def execute(
        self,
        request: SplitRequest,
        cancel_event: Optional[threading.Event] = None,
        progress_callback: Optional[ProgressCallback] = None
    ) -> SplitSummary:
        """
        Split one input file.

        Raises:
            InvalidArgumentError: If the request is invalid
            InputNotFoundError: If the input does not exist
            OutputDirectoryError: If the output directory cannot be created
            UnsupportedSampleFormatError: If the input format cannot be exported
            AnalysisCancelledError: If cancellation is observed
        """
        _raise_if_invalid(request.validate())
        stream_info = self.source_factory(request.input_path).probe()
        if request.resolution is not None:
            output_format = request.resolution.to_output_format()
            output_rate = request.resolution.sample_rate
        else:
            output_format = OutputAudioFormat.from_stream(stream_info)
            output_rate = stream_info.sample_rate

        try:
            os.makedirs(request.output_directory, exist_ok=True)
        except OSError as e:
            raise OutputDirectoryError(request.output_directory, original_error=e)

        _, _, segments = self.plan(request, cancel_event, progress_callback, stream_info)

        stem = Path(request.input_path).stem
        generated = 0
        skipped = 0
        written: List[str] = []

        for index, segment in enumerate(segments, start=1):
            check_cancelled(cancel_event)

            output_path = segment_output_path(request.output_directory, stem, index)
            if os.path.exists(output_path) and not request.overwrite:
                logger.info(f"Skipping existing segment file {output_path}")
                skipped += 1
                continue

            self.exporter.export(
                request.input_path,
                output_path,
                segment,
                output_format,
                sample_rate=output_rate,
                cancel_event=cancel_event,
            )
            written.append(output_path)
            generated += 1

        logger.info(
            f"Split {request.input_path}: {generated} generated, {skipped} skipped, "
            f"{len(segments)} planned"
        )
        return SplitSummary(
            generated=generated,
            skipped=skipped,
            segments=tuple(segments),
            output_paths=tuple(written),
        )


class PeakAnalysisUseCase:
    """Runs the sliding-window peak envelope over one input."""

    def __init__(self, source_factory: SourceFactory = SoundFileFrameSource):
        self.source_factory = source_factory

    def validate_request(self, request: PeakAnalysisRequest) -> None:
        _raise_if_invalid(request.validate())

    def execute(
        self,
        request: PeakAnalysisRequest,
        point_sink: PeakPointSink,
        cancel_event: Optional[threading.Event] = None,
        stream_info: Optional[StreamInfo] = None
    ) -> AnalysisSummary:
        """
        Analyze one input, handing every PeakPoint to point_sink.

        Args:
            request: Analysis parameters
            point_sink: Consumer of emitted points
            cancel_event: Optional shared cancellation signal
            stream_info: Already probed metadata; probed from the source when None

        Raises:
            InvalidArgumentError: If the request is invalid
            InputNotFoundError: If the input does not exist
        """
        self.validate_request(request)
        source = self.source_factory(request.input_path)
        if stream_info is None:
            stream_info = source.probe()

        analyzer = PeakWindowAnalyzer(
            sample_rate=stream_info.sample_rate,
            name=request.name,
            stem=Path(request.input_path).stem,
            window_ms=request.window_ms,
            hop_ms=request.hop_ms,
            min_limit_db=request.min_limit_db,
            point_sink=point_sink,
        )
        source.read_frames(analyzer, cancel_event=cancel_event)

        summary = analyzer.build_summary()
        log_analysis_summary(request.input_path, 'peak', summary)
        return summary


class StftAnalysisUseCase:
    """
    Runs the sample-anchored spectral analyzer over one input.

    The bin-count maximum depends only on the window, so it is checked
    before the stream is probed.
    """

    def __init__(self, source_factory: SourceFactory = SoundFileFrameSource):
        self.source_factory = source_factory

    def validate_request(self, request: StftAnalysisRequest) -> None:
        errors = request.validate()
        if not errors and request.bin_count > max_bin_count(request.window_samples):
            errors.append(f"binCount={request.bin_count}, max={max_bin_count(request.window_samples)}")
        _raise_if_invalid(errors)

    def execute(
        self,
        request: StftAnalysisRequest,
        point_sink: SpectralPointSink,
        cancel_event: Optional[threading.Event] = None,
        stream_info: Optional[StreamInfo] = None
    ) -> AnalysisSummary:
        """
        Analyze one input, handing every SpectralPoint to point_sink.

        Raises:
            InvalidArgumentError: If the request is invalid, including a bin
                count above the window's positive-frequency maximum
            InputNotFoundError: If the input does not exist
        """
        self.validate_request(request)
        source = self.source_factory(request.input_path)
        if stream_info is None:
            stream_info = source.probe()

        analyzer = StftWindowAnalyzer(
            sample_rate=request.analysis_sample_rate,
            channel_count=stream_info.channel_count,
            name=request.name,
            window_samples=request.window_samples,
            hop_samples=request.hop_samples,
            bin_count=request.bin_count,
            min_limit_db=request.min_limit_db,
            point_sink=point_sink,
            anchor_unit=request.anchor_unit,
            window_persisted_value=request.window_persisted_value,
        )
        target_rate = None
        if request.analysis_sample_rate != stream_info.sample_rate:
            target_rate = request.analysis_sample_rate
        source.read_frames(analyzer, cancel_event=cancel_event, target_sample_rate=target_rate)

        summary = analyzer.build_summary()
        log_analysis_summary(request.input_path, 'stft', summary)
        return summary


class SfftAnalysisUseCase:
    """Runs the millisecond-anchored spectral analyzer over one input."""

    def __init__(self, source_factory: SourceFactory = SoundFileFrameSource):
        self.source_factory = source_factory

    def validate_request(self, request: SfftAnalysisRequest) -> None:
        _raise_if_invalid(request.validate())

    def execute(
        self,
        request: SfftAnalysisRequest,
        point_sink: SpectralPointSink,
        cancel_event: Optional[threading.Event] = None,
        stream_info: Optional[StreamInfo] = None
    ) -> AnalysisSummary:
        """
        Analyze one input, handing every SpectralPoint to point_sink.

        The window in frames depends on the stream rate, so the bin-count
        maximum is checked after probing and before any frame is read.
        """
        self.validate_request(request)
        source = self.source_factory(request.input_path)
        if stream_info is None:
            stream_info = source.probe()

        window_frames = max(1, time_ms_to_frames_floor(request.window_ms, stream_info.sample_rate))
        if request.bin_count > max_bin_count(window_frames):
            raise InvalidArgumentError(
                f"binCount={request.bin_count}, max={max_bin_count(window_frames)}"
            )

        analyzer = SfftWindowAnalyzer(
            sample_rate=stream_info.sample_rate,
            channel_count=stream_info.channel_count,
            name=request.name,
            window_ms=request.window_ms,
            hop_ms=request.hop_ms,
            bin_count=request.bin_count,
            min_limit_db=request.min_limit_db,
            point_sink=point_sink,
        )
        source.read_frames(analyzer, cancel_event=cancel_event)

        summary = analyzer.build_summary()
        log_analysis_summary(request.input_path, 'sfft', summary)
        return summary
