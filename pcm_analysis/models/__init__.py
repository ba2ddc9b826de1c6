"""
PCM analysis data models.

This module contains dataclasses and value objects for stream metadata,
silence results, segments, analysis points and requests.
"""

from pcm_analysis.models.stream_info import BitDepth, StreamInfo
from pcm_analysis.models.silence import AudioSegment, SilenceAnalysisResult, SilenceRun, SplitSummary
from pcm_analysis.models.points import AnalysisSummary, AnchorUnit, PeakPoint, SpectralPoint
from pcm_analysis.models.value_objects import OutputAudioFormat, ResolutionType, TimeArgument
from pcm_analysis.models.requests import (
    PeakAnalysisRequest,
    SfftAnalysisRequest,
    SplitRequest,
    StftAnalysisRequest,
)

__all__ = [
    'BitDepth',
    'StreamInfo',
    'AudioSegment',
    'SilenceAnalysisResult',
    'SilenceRun',
    'SplitSummary',
    'AnalysisSummary',
    'AnchorUnit',
    'PeakPoint',
    'SpectralPoint',
    'OutputAudioFormat',
    'ResolutionType',
    'TimeArgument',
    'PeakAnalysisRequest',
    'SfftAnalysisRequest',
    'SplitRequest',
    'StftAnalysisRequest',
]
