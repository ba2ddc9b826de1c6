"""Unit tests for the analysis use cases, driven by in-memory sources."""

import os
import threading

import pytest

from pcm_analysis.exceptions import (
    AnalysisCancelledError,
    InvalidArgumentError,
    OutputDirectoryError,
    UnsupportedSampleFormatError,
)
from pcm_analysis.models import (
    AudioSegment,
    BitDepth,
    PeakAnalysisRequest,
    ResolutionType,
    SfftAnalysisRequest,
    SilenceRun,
    SplitRequest,
    StftAnalysisRequest,
    TimeArgument,
)
from pcm_analysis.processors import (
    PeakAnalysisUseCase,
    SfftAnalysisUseCase,
    SplitAudioUseCase,
    StftAnalysisUseCase,
    analyze_silence,
    segment_output_path,
)
from pcm_analysis.sources import ArrayFrameSource


class RecordingExporter:
    """Segment exporter that records calls and touches the output file."""

    def __init__(self):
        self.calls = []

    def export(self, input_path, output_path, segment, output_format, sample_rate=None, cancel_event=None):
        self.calls.append((output_path, segment, output_format.codec_name, sample_rate))
        with open(output_path, 'wb') as handle:
            handle.write(b'')


class RecordingSource:
    """Wraps an ArrayFrameSource and records how it was read."""

    def __init__(self, source):
        self.source = source
        self.probed = 0
        self.read_calls = []

    def probe(self):
        self.probed += 1
        return self.source.probe()

    def read_frames(self, sink, cancel_event=None, target_sample_rate=None):
        self.read_calls.append(target_sample_rate)
        return self.source.read_frames(sink, cancel_event, target_sample_rate)


def never_called(path):
    raise AssertionError(f"source opened for {path}")


class TestSegmentOutputPath:

    def test_three_digit_index(self, tmp_path):
        assert segment_output_path(str(tmp_path), 'take', 1) == os.path.join(str(tmp_path), 'take_001.wav')
        assert segment_output_path(str(tmp_path), 'take', 1234).endswith('take_1234.wav')


class TestAnalyzeSilence:

    def test_finds_run_in_speech(self, speech_with_gap, two_seconds):
        info, result = analyze_silence(ArrayFrameSource(speech_with_gap, 1000), -40.0, two_seconds)

        assert info.sample_rate == 1000
        assert result.total_frames == 10000
        assert result.first_sound_frame == 100
        assert result.silence_runs == (SilenceRun(3100, 6100),)


class TestSplitAudioUseCase:
    """Test suite for SplitAudioUseCase."""

    @pytest.fixture
    def exporter(self):
        return RecordingExporter()

    def request(self, output_directory, **kwargs):
        values = dict(
            input_path='/data/speech.wav',
            output_directory=str(output_directory),
            level_db=-40.0,
            duration=TimeArgument.parse('2000ms'),
            after_offset=TimeArgument.parse('500ms'),
            resume_offset=TimeArgument.parse('-200ms'),
        )
        values.update(kwargs)
        return SplitRequest(**values)

    def test_plan(self, speech_source_factory, tmp_path):
        use_case = SplitAudioUseCase(source_factory=speech_source_factory)

        _, result, segments = use_case.plan(self.request(tmp_path))

        assert result.first_sound_frame == 100
        assert segments == [AudioSegment(0, 3600), AudioSegment(5900, 10000)]

    def test_execute_exports_numbered_segments(self, speech_source_factory, exporter, tmp_path):
        """Test segments are written as {stem}_{index:03d}.wav in the input format."""
        output_directory = tmp_path / 'out'
        use_case = SplitAudioUseCase(source_factory=speech_source_factory, exporter=exporter)

        summary = use_case.execute(self.request(output_directory))

        assert output_directory.is_dir()
        assert summary.generated == 2
        assert summary.skipped == 0
        assert [os.path.basename(call[0]) for call in exporter.calls] == ['speech_001.wav', 'speech_002.wav']
        assert [call[1] for call in exporter.calls] == [AudioSegment(0, 3600), AudioSegment(5900, 10000)]
        assert all(call[2] == 'pcm_f32le' and call[3] == 1000 for call in exporter.calls)
        assert summary.output_paths == tuple(call[0] for call in exporter.calls)

    def test_existing_files_skipped_unless_overwrite(self, speech_source_factory, exporter, tmp_path):
        (tmp_path / 'speech_001.wav').write_bytes(b'existing')
        use_case = SplitAudioUseCase(source_factory=speech_source_factory, exporter=exporter)

        summary = use_case.execute(self.request(tmp_path))
        assert (summary.generated, summary.skipped) == (1, 1)
        assert (tmp_path / 'speech_001.wav').read_bytes() == b'existing'

        summary = use_case.execute(self.request(tmp_path, overwrite=True))
        assert (summary.generated, summary.skipped) == (2, 0)

    def test_resolution_overrides_format(self, speech_source_factory, exporter, tmp_path):
        use_case = SplitAudioUseCase(source_factory=speech_source_factory, exporter=exporter)

        use_case.execute(self.request(tmp_path, resolution=ResolutionType.parse('16bit,8000hz')))

        assert all(call[2] == 'pcm_s16le' and call[3] == 8000 for call in exporter.calls)

    def test_unsupported_input_format_fails_before_analysis(self, speech_with_gap, exporter, tmp_path):
        source = RecordingSource(ArrayFrameSource(speech_with_gap, 1000, bit_depth=BitDepth.UNSUPPORTED))
        use_case = SplitAudioUseCase(source_factory=lambda path: source, exporter=exporter)

        with pytest.raises(UnsupportedSampleFormatError):
            use_case.execute(self.request(tmp_path))
        assert source.read_calls == []

    def test_unsupported_input_format_with_resolution(self, speech_with_gap, exporter, tmp_path):
        source = ArrayFrameSource(speech_with_gap, 1000, bit_depth=BitDepth.UNSUPPORTED)
        use_case = SplitAudioUseCase(source_factory=lambda path: source, exporter=exporter)

        summary = use_case.execute(self.request(tmp_path, resolution=ResolutionType.parse('24bit,1000hz')))

        assert summary.generated == 2

    def test_entirely_silent_input_exports_nothing(self, signal_builder, exporter, tmp_path):
        silent = signal_builder((5000, 0.0))
        use_case = SplitAudioUseCase(source_factory=lambda path: ArrayFrameSource(silent, 1000), exporter=exporter)

        summary = use_case.execute(self.request(tmp_path))

        assert summary.total_segments == 0
        assert exporter.calls == []

    def test_invalid_request(self, exporter, tmp_path):
        use_case = SplitAudioUseCase(source_factory=never_called, exporter=exporter)

        with pytest.raises(InvalidArgumentError):
            use_case.execute(self.request(tmp_path, duration=TimeArgument.parse('0ms')))

    def test_output_directory_failure(self, speech_source_factory, exporter, tmp_path):
        blocker = tmp_path / 'file'
        blocker.write_bytes(b'')
        use_case = SplitAudioUseCase(source_factory=speech_source_factory, exporter=exporter)

        with pytest.raises(OutputDirectoryError):
            use_case.execute(self.request(blocker / 'out'))

    def test_cancelled(self, speech_source_factory, exporter, tmp_path):
        event = threading.Event()
        event.set()
        use_case = SplitAudioUseCase(source_factory=speech_source_factory, exporter=exporter)

        with pytest.raises(AnalysisCancelledError):
            use_case.execute(self.request(tmp_path), cancel_event=event)
        assert exporter.calls == []

    def test_progress_reported(self, speech_source_factory, exporter, tmp_path):
        calls = []
        use_case = SplitAudioUseCase(source_factory=speech_source_factory, exporter=exporter)

        use_case.execute(self.request(tmp_path), progress_callback=lambda done, total: calls.append(done))

        assert calls == [2048, 4096, 6144, 8192, 10000]


class TestPeakAnalysisUseCase:
    """Test suite for PeakAnalysisUseCase."""

    def test_execute(self, speech_source_factory):
        points = []
        use_case = PeakAnalysisUseCase(source_factory=speech_source_factory)

        summary = use_case.execute(PeakAnalysisRequest('/data/speech.wav', 'env', window_ms=50, hop_ms=10), points.append)

        assert summary.point_count == 1000
        assert summary.total_frames == 10000
        assert summary.last_anchor == 10000
        assert points[0].stem == 'speech'
        assert points[0].name == 'env'

    def test_invalid_request_opens_nothing(self):
        use_case = PeakAnalysisUseCase(source_factory=never_called)

        with pytest.raises(InvalidArgumentError):
            use_case.execute(PeakAnalysisRequest('x.wav', 'env', window_ms=0), lambda p: None)


class TestStftAnalysisUseCase:
    """Test suite for StftAnalysisUseCase."""

    def test_execute_at_stream_rate(self, speech_with_gap):
        source = RecordingSource(ArrayFrameSource(speech_with_gap, 1000))
        points = []
        use_case = StftAnalysisUseCase(source_factory=lambda path: source)
        request = StftAnalysisRequest('s.wav', 'spectrum', window_samples=256, hop_samples=500,
                                      analysis_sample_rate=1000, bin_count=16)

        summary = use_case.execute(request, points.append)

        assert source.read_calls == [None]
        assert summary.point_count == 20
        assert summary.last_anchor == 10000

    def test_resampling_requested_for_other_rate(self, speech_with_gap):
        source = RecordingSource(ArrayFrameSource(speech_with_gap, 1000))
        use_case = StftAnalysisUseCase(source_factory=lambda path: source)
        request = StftAnalysisRequest('s.wav', 'spectrum', window_samples=256, hop_samples=1000,
                                      analysis_sample_rate=2000, bin_count=16)

        summary = use_case.execute(request, lambda p: None)

        assert source.read_calls == [2000]
        assert abs(summary.total_frames - 20000) <= 64

    def test_bin_count_checked_before_probe(self):
        """Test an oversized bin count fails before the input is touched."""
        use_case = StftAnalysisUseCase(source_factory=never_called)
        request = StftAnalysisRequest('s.wav', 'spectrum', window_samples=1000, hop_samples=100,
                                      analysis_sample_rate=44100, bin_count=514)

        with pytest.raises(InvalidArgumentError) as exc_info:
            use_case.execute(request, lambda p: None)
        assert 'binCount=514, max=513' in str(exc_info.value)


class TestSfftAnalysisUseCase:
    """Test suite for SfftAnalysisUseCase."""

    def test_execute(self, speech_source_factory):
        points = []
        use_case = SfftAnalysisUseCase(source_factory=speech_source_factory)

        summary = use_case.execute(SfftAnalysisRequest('s.wav', 'spectrum', window_ms=64, hop_ms=250, bin_count=8),
                                   points.append)

        assert summary.point_count == 40
        assert all(p.window == 64 for p in points)

    def test_bin_count_checked_before_reading(self, speech_with_gap):
        """Test the rate-dependent maximum is enforced before any frame is read."""
        source = RecordingSource(ArrayFrameSource(speech_with_gap, 1000))
        use_case = SfftAnalysisUseCase(source_factory=lambda path: source)

        with pytest.raises(InvalidArgumentError):
            use_case.execute(SfftAnalysisRequest('s.wav', 'spectrum', window_ms=4, hop_ms=10, bin_count=4),
                             lambda p: None)
        assert source.probed == 1
        assert source.read_calls == []
