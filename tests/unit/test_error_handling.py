"""Unit tests for the error taxonomy."""

import pytest

from pcm_analysis.exceptions import (
    AnalysisCancelledError,
    AnalysisErrorKind,
    FrameReadError,
    IncompleteFrameDataError,
    InputNotFoundError,
    InvalidArgumentError,
    OutputDirectoryError,
    PcmAnalysisError,
    ProbeFailedError,
    SegmentExportError,
    UnsupportedSampleFormatError,
)


class TestErrorTaxonomy:
    """Test suite for PcmAnalysisError and its kinds."""

    @pytest.mark.parametrize('error_class, kind', [
        (InvalidArgumentError, AnalysisErrorKind.INVALID_ARGUMENT),
        (InputNotFoundError, AnalysisErrorKind.INPUT_NOT_FOUND),
        (UnsupportedSampleFormatError, AnalysisErrorKind.UNSUPPORTED_SAMPLE_FORMAT),
        (IncompleteFrameDataError, AnalysisErrorKind.INCOMPLETE_FRAME_DATA),
        (AnalysisCancelledError, AnalysisErrorKind.CANCELLED),
        (ProbeFailedError, AnalysisErrorKind.PROBE_FAILED),
        (FrameReadError, AnalysisErrorKind.FRAME_READ_FAILED),
        (SegmentExportError, AnalysisErrorKind.EXPORT_FAILED),
        (OutputDirectoryError, AnalysisErrorKind.OUTPUT_DIRECTORY_FAILED),
    ])
    def test_kind_and_base(self, error_class, kind):
        error = error_class('detail')
        assert error.kind == kind
        assert isinstance(error, PcmAnalysisError)
        assert error.detail == 'detail'

    def test_str_prefixes_kind(self):
        assert str(InvalidArgumentError('binCount=600, max=513')) == 'InvalidArgument: binCount=600, max=513'
        assert str(InputNotFoundError('missing.wav')) == 'InputNotFound: missing.wav'

    def test_invalid_argument_is_value_error(self):
        with pytest.raises(ValueError):
            raise InvalidArgumentError('bad')

    def test_original_error_preserved(self):
        cause = OSError('disk full')
        error = SegmentExportError('out.wav', original_error=cause)
        assert error.original_error is cause

    def test_incomplete_frame_data_carries_leftover(self):
        error = IncompleteFrameDataError('3 bytes left over', leftover_bytes=3)
        assert error.leftover_bytes == 3

    def test_kind_values_are_strings(self):
        assert AnalysisErrorKind.CANCELLED == 'Cancelled'
