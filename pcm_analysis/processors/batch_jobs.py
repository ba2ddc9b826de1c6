"""
Batch job builders.

Adapts the single-file use cases to the BatchProgressCoordinator job
signature: each job validates its request, probes the stream once to set
its expected point count, hands that probe to the use case, counts
points through a CountingPointSink and forwards the shared cancellation
event.
"""

from typing import Any, Callable, Optional

from pcm_analysis.models.requests import (
    PeakAnalysisRequest,
    SfftAnalysisRequest,
    SplitRequest,
    StftAnalysisRequest,
)
from pcm_analysis.processors.batch_coordinator import (
    BatchJob,
    CountingPointSink,
    estimate_anchor_count,
    estimate_anchor_count_by_samples,
)
from pcm_analysis.processors.use_cases import (
    PeakAnalysisUseCase,
    SfftAnalysisUseCase,
    SplitAudioUseCase,
    StftAnalysisUseCase,
)


def peak_batch_job(
    request: PeakAnalysisRequest,
    point_sink: Callable[[Any], None],
    use_case: Optional[PeakAnalysisUseCase] = None
) -> BatchJob:
    use_case = use_case or PeakAnalysisUseCase()

    def job(progress, cancel_event):
        use_case.validate_request(request)
        info = use_case.source_factory(request.input_path).probe()
        progress.set_expected(
            estimate_anchor_count(info.estimated_total_frames, info.sample_rate, request.hop_ms)
        )
        return use_case.execute(request, CountingPointSink(point_sink, progress), cancel_event, info)

    return job


def stft_batch_job(
    request: StftAnalysisRequest,
    point_sink: Callable[[Any], None],
    use_case: Optional[StftAnalysisUseCase] = None
) -> BatchJob:
    use_case = use_case or StftAnalysisUseCase()

    def job(progress, cancel_event):
        use_case.validate_request(request)
        info = use_case.source_factory(request.input_path).probe()
        anchors = estimate_anchor_count_by_samples(
            info.estimated_total_frames,
            info.sample_rate,
            request.analysis_sample_rate,
            request.hop_samples,
        )
        progress.set_expected(anchors * info.channel_count)
        return use_case.execute(request, CountingPointSink(point_sink, progress), cancel_event, info)

    return job


def sfft_batch_job(
    request: SfftAnalysisRequest,
    point_sink: Callable[[Any], None],
    use_case: Optional[SfftAnalysisUseCase] = None
) -> BatchJob:
    use_case = use_case or SfftAnalysisUseCase()

    def job(progress, cancel_event):
        use_case.validate_request(request)
        info = use_case.source_factory(request.input_path).probe()
        anchors = estimate_anchor_count(info.estimated_total_frames, info.sample_rate, request.hop_ms)
        progress.set_expected(anchors * info.channel_count)
        return use_case.execute(request, CountingPointSink(point_sink, progress), cancel_event, info)

    return job


def split_batch_job(
    request: SplitRequest,
    use_case: Optional[SplitAudioUseCase] = None
) -> BatchJob:
    """Split job; progress counts analyzed frames against the frame estimate."""
    use_case = use_case or SplitAudioUseCase()

    def job(progress, cancel_event):
        def on_progress(processed, estimated_total):
            progress.set_expected(estimated_total)
            progress.enqueued.set(processed)
            progress.inserted.set(processed)

        return use_case.execute(request, cancel_event, on_progress)

    return job
