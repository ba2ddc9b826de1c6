"""
PCM Stream Analysis Package.

This package derives time-indexed events from a pushed stream of decoded
PCM frames in a single forward pass: silence runs and the segments
between them, sliding-window peak envelopes, and windowed-FFT band
spectra.
"""

__version__ = '1.0.0'

# Import main classes for convenient access
from pcm_analysis.exceptions import (
    AnalysisCancelledError,
    AnalysisErrorKind,
    IncompleteFrameDataError,
    InputNotFoundError,
    InvalidArgumentError,
    PcmAnalysisError,
    UnsupportedSampleFormatError,
)
from pcm_analysis.models import (
    AnalysisSummary,
    AnchorUnit,
    AudioSegment,
    BitDepth,
    OutputAudioFormat,
    PeakAnalysisRequest,
    PeakPoint,
    ResolutionType,
    SfftAnalysisRequest,
    SilenceAnalysisResult,
    SilenceRun,
    SpectralPoint,
    SplitRequest,
    SplitSummary,
    StftAnalysisRequest,
    StreamInfo,
    TimeArgument,
)
from pcm_analysis.analyzers import (
    PeakWindowAnalyzer,
    SfftWindowAnalyzer,
    SilenceStateMachine,
    SlidingWindowMax,
    StftWindowAnalyzer,
    build_segments,
)
from pcm_analysis.sources import ArrayFrameSource, RawPcmFrameSource, SoundFileFrameSource, probe_stream
from pcm_analysis.processors import (
    BatchProgressCoordinator,
    PeakAnalysisUseCase,
    SfftAnalysisUseCase,
    SplitAudioUseCase,
    StftAnalysisUseCase,
)

__all__ = [
    'AnalysisCancelledError',
    'AnalysisErrorKind',
    'IncompleteFrameDataError',
    'InputNotFoundError',
    'InvalidArgumentError',
    'PcmAnalysisError',
    'UnsupportedSampleFormatError',
    'AnalysisSummary',
    'AnchorUnit',
    'AudioSegment',
    'BitDepth',
    'OutputAudioFormat',
    'PeakAnalysisRequest',
    'PeakPoint',
    'ResolutionType',
    'SfftAnalysisRequest',
    'SilenceAnalysisResult',
    'SilenceRun',
    'SpectralPoint',
    'SplitRequest',
    'SplitSummary',
    'StftAnalysisRequest',
    'StreamInfo',
    'TimeArgument',
    'PeakWindowAnalyzer',
    'SfftWindowAnalyzer',
    'SilenceStateMachine',
    'SlidingWindowMax',
    'StftWindowAnalyzer',
    'build_segments',
    'ArrayFrameSource',
    'RawPcmFrameSource',
    'SoundFileFrameSource',
    'probe_stream',
    'BatchProgressCoordinator',
    'PeakAnalysisUseCase',
    'SfftAnalysisUseCase',
    'SplitAudioUseCase',
    'StftAnalysisUseCase',
]
