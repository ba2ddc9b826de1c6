"""
Structured logging utilities for PCM analysis.

Provides JSON-formatted logging and structured event helpers for
analysis results, silence results and batch outcomes.
"""

import json
import logging
import sys
from datetime import datetime
from typing import Any, Dict, Optional

from pcm_analysis.config.settings import get_settings
from pcm_analysis.models.points import AnalysisSummary
from pcm_analysis.models.silence import SilenceAnalysisResult


logger = logging.getLogger(__name__)

_STANDARD_FIELDS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'pathname', 'process', 'processName', 'relativeCreated',
    'thread', 'threadName', 'exc_info', 'exc_text', 'stack_info', 'taskName'
}


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Formats log records as JSON with consistent fields including:
    - timestamp: ISO 8601 timestamp
    - level: Log level
    - component: Logger name
    - message: Log message
    - Additional fields from extra dict
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_entry = {
            'timestamp': datetime.utcnow().isoformat() + 'Z',
            'level': record.levelname,
            'component': record.name,
            'message': record.getMessage()
        }

        for key, value in record.__dict__.items():
            if key in _STANDARD_FIELDS or key.startswith('_'):
                continue
            value = _convert_to_json_serializable(value)
            try:
                json.dumps(value)
                log_entry[key] = value
            except (TypeError, ValueError):
                log_entry[key] = str(value)

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def configure_logging(level: Optional[str] = None, use_json: Optional[bool] = None) -> logging.Logger:
    """
    Configure the package logger.

    Installs one stdout handler on the 'pcm_analysis' logger; calling it
    again replaces the formatter and level instead of adding handlers.

    Args:
        level: Log level name (default: settings log_level)
        use_json: Whether to use JSON formatting (default: settings json_logs)

    Returns:
        The configured package logger
    """
    settings = get_settings()
    if level is None:
        level = settings.log_level
    if use_json is None:
        use_json = settings.json_logs

    package_logger = logging.getLogger('pcm_analysis')
    package_logger.setLevel(level.upper())

    if use_json:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    if not package_logger.handlers:
        package_logger.addHandler(logging.StreamHandler(sys.stdout))
    for handler in package_logger.handlers:
        handler.setFormatter(formatter)

    return package_logger


def _emit(log_entry: Dict[str, Any], level: str) -> None:
    log_message = json.dumps(_convert_to_json_serializable(log_entry))
    logger.log(logging.getLevelName(level.upper()), log_message)


def log_analysis_summary(
    input_path: str,
    analysis: str,
    summary: AnalysisSummary,
    level: str = 'INFO'
) -> None:
    """
    Logs a windowed analysis summary in structured JSON format.

    Args:
        input_path: Analyzed input
        analysis: Analysis type ('peak', 'stft', 'sfft')
        summary: Summary returned by the analyzer
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    _emit({
        'event': 'analysis_summary',
        'timestamp': datetime.utcnow().isoformat() + 'Z',
        'input': input_path,
        'analysis': analysis,
        'summary': {
            'point_count': summary.point_count,
            'total_frames': summary.total_frames,
            'last_anchor': summary.last_anchor,
        }
    }, level)


def log_silence_result(
    input_path: str,
    result: SilenceAnalysisResult,
    segment_count: Optional[int] = None,
    level: str = 'INFO'
) -> None:
    """
    Logs a silence analysis result in structured JSON format.

    Args:
        input_path: Analyzed input
        result: Finished silence analysis
        segment_count: Number of planned segments, if planned
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    entry = {
        'event': 'silence_analysis',
        'timestamp': datetime.utcnow().isoformat() + 'Z',
        'input': input_path,
        'result': {
            'total_frames': result.total_frames,
            'first_sound_frame': result.first_sound_frame,
            'silence_run_count': len(result.silence_runs),
            'entirely_silent': result.is_entirely_silent,
        }
    }
    if segment_count is not None:
        entry['result']['segment_count'] = segment_count
    _emit(entry, level)


def log_batch_outcome(
    label: str,
    succeeded: bool,
    error: Optional[BaseException] = None,
    level: Optional[str] = None
) -> None:
    """
    Logs the outcome of one batch job in structured JSON format.

    Args:
        label: Job label (usually the input path)
        succeeded: Whether the job completed
        error: Failure, when the job did not complete
        level: Log level; defaults to INFO on success and ERROR on failure
    """
    entry = {
        'event': 'batch_job',
        'timestamp': datetime.utcnow().isoformat() + 'Z',
        'job': label,
        'succeeded': succeeded,
    }
    if error is not None:
        entry['error'] = {
            'type': type(error).__name__,
            'kind': getattr(getattr(error, 'kind', None), 'value', None),
            'message': str(error),
        }
    _emit(entry, level or ('INFO' if succeeded else 'ERROR'))


def _convert_to_json_serializable(obj: Any) -> Any:
    """
    Converts numpy types to Python native types for JSON serialization.

    Args:
        obj: Object to convert

    Returns:
        JSON-serializable version of the object
    """
    import numpy as np

    if isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.bool_):
        return bool(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, dict):
        return {key: _convert_to_json_serializable(value) for key, value in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_convert_to_json_serializable(item) for item in obj]
    return obj
