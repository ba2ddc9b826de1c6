"""
Custom exceptions for PCM stream analysis.

This module defines the error taxonomy surfaced by analyzers, frame
sources and use cases. Every error carries an error kind plus a detail
string so callers can map failures without parsing messages.
"""

from enum import Enum


class AnalysisErrorKind(str, Enum):
    """Error kinds surfaced to callers."""

    INVALID_ARGUMENT = 'InvalidArgument'
    INPUT_NOT_FOUND = 'InputNotFound'
    UNSUPPORTED_SAMPLE_FORMAT = 'UnsupportedSampleFormat'
    INCOMPLETE_FRAME_DATA = 'IncompleteFrameData'
    CANCELLED = 'Cancelled'
    PROBE_FAILED = 'ProbeFailed'
    FRAME_READ_FAILED = 'FrameReadFailed'
    EXPORT_FAILED = 'ExportFailed'
    OUTPUT_DIRECTORY_FAILED = 'OutputDirectoryFailed'


class PcmAnalysisError(Exception):
    """
    Base exception for PCM analysis errors.

    All analysis-specific exceptions inherit from this base class,
    allowing for easy catching of all analysis-related errors.

    Attributes:
        kind: Error kind
        detail: Detail string describing the failure
        original_error: Original exception that caused the failure (if any)

    Examples:
        >>> try:
        ...     run_peak_analysis(request, sink)
        ... except PcmAnalysisError as e:
        ...     print(e.kind.value, e.detail)
    """

    kind = AnalysisErrorKind.INVALID_ARGUMENT

    def __init__(self, detail: str, original_error: Exception = None):
        """
        Initialize PcmAnalysisError.

        Args:
            detail: Detail string
            original_error: Original exception that caused the failure (optional)
        """
        super().__init__(detail)
        self.detail = detail
        self.original_error = original_error

    def __str__(self):
        """Return string representation prefixed with the error kind."""
        return f"{self.kind.value}: {self.detail}"


class InvalidArgumentError(PcmAnalysisError, ValueError):
    """
    Raised when an analysis parameter is invalid.

    This exception is raised when:
    - Window, hop, bin count or sample rate is not positive
    - Minimum dB limit is NaN or infinite
    - Bin count exceeds the positive-frequency maximum
    - A frame carries an unexpected channel count

    Raised before any frame is processed.
    """

    kind = AnalysisErrorKind.INVALID_ARGUMENT


class InputNotFoundError(PcmAnalysisError):
    """Raised when the input audio file does not exist."""

    kind = AnalysisErrorKind.INPUT_NOT_FOUND


class UnsupportedSampleFormatError(PcmAnalysisError):
    """Raised when the decoder reports a sample format that cannot be exported."""

    kind = AnalysisErrorKind.UNSUPPORTED_SAMPLE_FORMAT


class IncompleteFrameDataError(PcmAnalysisError):
    """
    Raised when a frame stream ends in the middle of a frame.

    Attributes:
        leftover_bytes: Number of dangling bytes at end of stream
    """

    kind = AnalysisErrorKind.INCOMPLETE_FRAME_DATA

    def __init__(self, detail: str, leftover_bytes: int = 0):
        """
        Initialize IncompleteFrameDataError.

        Args:
            detail: Detail string
            leftover_bytes: Number of dangling bytes (default: 0)
        """
        super().__init__(detail)
        self.leftover_bytes = leftover_bytes


class AnalysisCancelledError(PcmAnalysisError):
    """Raised when cooperative cancellation is observed between frames."""

    kind = AnalysisErrorKind.CANCELLED


class ProbeFailedError(PcmAnalysisError):
    """Raised when stream metadata cannot be read."""

    kind = AnalysisErrorKind.PROBE_FAILED


class FrameReadError(PcmAnalysisError):
    """Raised when the decoder fails part way through a stream."""

    kind = AnalysisErrorKind.FRAME_READ_FAILED


class SegmentExportError(PcmAnalysisError):
    """Raised when writing a segment file fails."""

    kind = AnalysisErrorKind.EXPORT_FAILED


class OutputDirectoryError(PcmAnalysisError):
    """Raised when the output directory cannot be created."""

    kind = AnalysisErrorKind.OUTPUT_DIRECTORY_FAILED
