"""
Analysis processors.

This module contains the single-file use cases and the batch
coordinator that runs them concurrently.
"""

from pcm_analysis.processors.use_cases import (
    PeakAnalysisUseCase,
    SfftAnalysisUseCase,
    SplitAudioUseCase,
    StftAnalysisUseCase,
    analyze_silence,
    segment_output_path,
)
from pcm_analysis.processors.batch_coordinator import (
    AtomicCounter,
    BatchJobOutcome,
    BatchProgressCoordinator,
    BatchSnapshot,
    BatchSummary,
    CountingPointSink,
    WorkerProgress,
    WorkerSnapshot,
)
from pcm_analysis.processors.batch_jobs import (
    peak_batch_job,
    sfft_batch_job,
    split_batch_job,
    stft_batch_job,
)

__all__ = [
    'PeakAnalysisUseCase',
    'SfftAnalysisUseCase',
    'SplitAudioUseCase',
    'StftAnalysisUseCase',
    'analyze_silence',
    'segment_output_path',
    'AtomicCounter',
    'BatchJobOutcome',
    'BatchProgressCoordinator',
    'BatchSnapshot',
    'BatchSummary',
    'CountingPointSink',
    'WorkerProgress',
    'WorkerSnapshot',
    'peak_batch_job',
    'sfft_batch_job',
    'split_batch_job',
    'stft_batch_job',
]
