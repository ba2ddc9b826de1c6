"""
Utility modules for PCM analysis.

This package contains the structured logging helpers.
"""

from pcm_analysis.utils.structured_logger import (
    StructuredFormatter,
    configure_logging,
    log_analysis_summary,
    log_batch_outcome,
    log_silence_result,
)

__all__ = [
    'StructuredFormatter',
    'configure_logging',
    'log_analysis_summary',
    'log_batch_outcome',
    'log_silence_result',
]
