"""Unit tests for structured logging helpers."""

import json
import logging
import sys

import numpy as np
import pytest

from pcm_analysis.exceptions import InputNotFoundError
from pcm_analysis.models import AnalysisSummary, SilenceAnalysisResult, SilenceRun
from pcm_analysis.utils.structured_logger import (
    StructuredFormatter,
    configure_logging,
    log_analysis_summary,
    log_batch_outcome,
    log_silence_result,
)


def logged_entries(caplog):
    return [json.loads(record.getMessage()) for record in caplog.records]


@pytest.fixture
def restore_package_logger():
    package_logger = logging.getLogger('pcm_analysis')
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield package_logger
    package_logger.handlers = handlers
    package_logger.setLevel(level)


class TestStructuredFormatter:
    """Test suite for StructuredFormatter."""

    def test_formats_extra_fields_as_json(self):
        record = logging.LogRecord('pcm_analysis.test', logging.INFO, __file__, 1, 'hello', None, None)
        record.frames = np.int64(42)
        record.levels = np.array([0.5, 0.25])

        entry = json.loads(StructuredFormatter().format(record))

        assert entry['level'] == 'INFO'
        assert entry['component'] == 'pcm_analysis.test'
        assert entry['message'] == 'hello'
        assert entry['frames'] == 42
        assert entry['levels'] == [0.5, 0.25]

    def test_includes_exception(self):
        try:
            raise InputNotFoundError('missing.wav')
        except InputNotFoundError:
            record = logging.LogRecord('x', logging.ERROR, __file__, 1, 'failed', None, sys.exc_info())

        entry = json.loads(StructuredFormatter().format(record))
        assert 'InputNotFound: missing.wav' in entry['exception']


class TestConfigureLogging:
    """Test suite for configure_logging."""

    def test_installs_single_handler(self, restore_package_logger):
        restore_package_logger.handlers = []

        configure_logging(level='debug', use_json=True)
        configured = configure_logging(level='WARNING', use_json=False)

        assert len(configured.handlers) == 1
        assert configured.level == logging.WARNING
        assert not isinstance(configured.handlers[0].formatter, StructuredFormatter)

    def test_defaults_from_settings(self, monkeypatch, restore_package_logger):
        restore_package_logger.handlers = []
        monkeypatch.setenv('PCM_ANALYSIS_LOG_LEVEL', 'ERROR')

        configured = configure_logging()

        assert configured.level == logging.ERROR
        assert isinstance(configured.handlers[0].formatter, StructuredFormatter)


class TestEventHelpers:
    """Test suite for structured event helpers."""

    def test_log_analysis_summary(self, caplog):
        caplog.set_level(logging.INFO, logger='pcm_analysis')

        log_analysis_summary('take.wav', 'peak', AnalysisSummary(3, 7, 6))

        entry = logged_entries(caplog)[0]
        assert entry['event'] == 'analysis_summary'
        assert entry['analysis'] == 'peak'
        assert entry['summary'] == {'point_count': 3, 'total_frames': 7, 'last_anchor': 6}

    def test_log_silence_result(self, caplog):
        caplog.set_level(logging.INFO, logger='pcm_analysis')
        result = SilenceAnalysisResult(10000, 100, (SilenceRun(3100, 6100),))

        log_silence_result('take.wav', result, segment_count=2)

        entry = logged_entries(caplog)[0]
        assert entry['event'] == 'silence_analysis'
        assert entry['result']['silence_run_count'] == 1
        assert entry['result']['segment_count'] == 2
        assert entry['result']['entirely_silent'] is False

    def test_log_batch_failure_uses_error_level(self, caplog):
        caplog.set_level(logging.INFO, logger='pcm_analysis')

        log_batch_outcome('missing.wav', False, InputNotFoundError('missing.wav'))

        record = caplog.records[0]
        entry = json.loads(record.getMessage())
        assert record.levelno == logging.ERROR
        assert entry['error']['kind'] == 'InputNotFound'
        assert entry['error']['type'] == 'InputNotFoundError'

    def test_log_batch_success(self, caplog):
        caplog.set_level(logging.INFO, logger='pcm_analysis')

        log_batch_outcome('take.wav', True)

        assert caplog.records[0].levelno == logging.INFO
        assert 'error' not in logged_entries(caplog)[0]
