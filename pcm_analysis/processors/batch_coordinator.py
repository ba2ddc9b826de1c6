"""
Batch progress coordination.

This module runs one analysis pipeline per input file on a thread pool
and exposes thread-safe progress counters to a single rendering
consumer. Each worker owns its progress record; the only shared state is
the counters inside those records and one cancellation event.
"""

import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from pcm_analysis.config.settings import get_settings
from pcm_analysis.exceptions import AnalysisCancelledError
from pcm_analysis.utils.structured_logger import log_batch_outcome

logger = logging.getLogger(__name__)

DEFAULT_RENDER_INTERVAL_MS = 80


def estimate_anchor_count(total_frames: Optional[int], sample_rate: int, hop_ms: int) -> int:
    """Expected number of ms-hop anchors for a stream, 0 when the length is unknown."""
    if not total_frames or total_frames <= 0 or sample_rate <= 0 or hop_ms <= 0:
        return 0
    return (total_frames * 1000 // sample_rate) // hop_ms


def scale_frame_count(total_frames: int, source_rate: int, target_rate: int) -> int:
    """Frame count of a stream after conversion to target_rate."""
    return total_frames * target_rate // source_rate


def estimate_anchor_count_by_samples(
    total_frames: Optional[int],
    source_rate: int,
    target_rate: int,
    hop_samples: int
) -> int:
    """Expected number of sample-hop anchors at the analysis rate, 0 when unknown."""
    if not total_frames or total_frames <= 0 or source_rate <= 0 or target_rate <= 0 or hop_samples <= 0:
        return 0
    return scale_frame_count(total_frames, source_rate, target_rate) // hop_samples


def convert_duration_ms_to_samples(duration_ms: int, sample_rate: int) -> int:
    """Frames covered by duration_ms, at least one."""
    return max(1, duration_ms * sample_rate // 1000)


def to_ratio(done: int, total: Optional[int]) -> Optional[float]:
    """Completion ratio clamped to [0, 1], None when total is unknown."""
    if not total or total <= 0:
        return None
    return min(1.0, max(0.0, done / total))


class AtomicCounter:
    """
    Integer counter safe under concurrent increment and read.

    Each counter owns its lock, so workers never contend on a shared map.
    """

    def __init__(self, initial: int = 0):
        self._value = initial
        self._lock = threading.Lock()

    def increment(self, amount: int = 1) -> int:
        with self._lock:
            self._value += amount
            return self._value

    def set(self, value: int) -> None:
        with self._lock:
            self._value = value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


@dataclass(frozen=True)
class WorkerSnapshot:
    """Point-in-time copy of one worker's progress."""

    label: str
    enqueued: int
    inserted: int
    expected: Optional[int]
    analyze_completed: bool
    failed: bool
    cancelled: bool = False

    @property
    def ratio(self) -> Optional[float]:
        return to_ratio(self.inserted, self.expected)

    @property
    def is_complete(self) -> bool:
        return self.analyze_completed and self.inserted >= self.enqueued


@dataclass(frozen=True)
class BatchSnapshot:
    """Point-in-time copy of every worker's progress plus totals."""

    workers: Tuple[WorkerSnapshot, ...]

    @property
    def total_enqueued(self) -> int:
        return sum(w.enqueued for w in self.workers)

    @property
    def total_inserted(self) -> int:
        return sum(w.inserted for w in self.workers)

    @property
    def completed_count(self) -> int:
        return sum(1 for w in self.workers if w.is_complete)

    @property
    def failed_count(self) -> int:
        return sum(1 for w in self.workers if w.failed)

    @property
    def cancelled_count(self) -> int:
        return sum(1 for w in self.workers if w.cancelled)


class WorkerProgress:
    """
    Mutable progress record owned by one worker.

    The worker updates it; any thread may take a snapshot.

    Attributes:
        label: Job label (usually the input path)
        enqueued: Points produced by the analyzer
        inserted: Points accepted by the sink
        expected: Expected point count, 0 while unknown
    """

    def __init__(self, label: str):
        self.label = label
        self.enqueued = AtomicCounter()
        self.inserted = AtomicCounter()
        self.expected = AtomicCounter()
        self._analyze_completed = threading.Event()
        self._failed = threading.Event()
        self._cancelled = threading.Event()

    def set_expected(self, expected: Optional[int]) -> None:
        self.expected.set(expected or 0)

    def mark_analyze_completed(self) -> None:
        self._analyze_completed.set()

    def mark_failed(self) -> None:
        self._failed.set()

    def mark_cancelled(self) -> None:
        self._cancelled.set()

    def snapshot(self) -> WorkerSnapshot:
        return WorkerSnapshot(
            label=self.label,
            enqueued=self.enqueued.value,
            inserted=self.inserted.value,
            expected=self.expected.value or None,
            analyze_completed=self._analyze_completed.is_set(),
            failed=self._failed.is_set(),
            cancelled=self._cancelled.is_set(),
        )


class CountingPointSink:
    """
    Point sink wrapper that records enqueued/inserted counts.

    Examples:
        >>> points = []
        >>> sink = CountingPointSink(points.append, progress)
        >>> analyzer = PeakWindowAnalyzer(..., point_sink=sink)
    """

    def __init__(self, sink: Callable[[Any], None], progress: WorkerProgress):
        self.sink = sink
        self.progress = progress

    def __call__(self, point: Any) -> None:
        self.progress.enqueued.increment()
        self.sink(point)
        self.progress.inserted.increment()


@dataclass
class BatchJobOutcome:
    """Result or failure of one batch job."""

    label: str
    result: Any = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def cancelled(self) -> bool:
        return isinstance(self.error, AnalysisCancelledError)


@dataclass
class BatchSummary:
    """Outcomes of a batch run, in job order."""

    outcomes: List[BatchJobOutcome] = field(default_factory=list)
    cancelled: bool = False

    @property
    def succeeded_count(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded)

    @property
    def failed_count(self) -> int:
        return sum(1 for o in self.outcomes if not o.succeeded and not o.cancelled)


BatchJob = Callable[[WorkerProgress, threading.Event], Any]


class BatchProgressCoordinator:
    """
    Runs batch jobs concurrently and renders their progress.

    Each job receives its own WorkerProgress and the shared cancellation
    event, which frame sources check before every frame. A failing job is
    recorded in its outcome and does not affect other workers. Rendering
    happens only on the thread that called run(), throttled to
    render_interval_ms.
    """

    def __init__(
        self,
        max_workers: int = 1,
        render_interval_ms: int = DEFAULT_RENDER_INTERVAL_MS,
        renderer: Optional[Callable[[BatchSnapshot], None]] = None,
        cancel_event: Optional[threading.Event] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize coordinator.

        Args:
            max_workers: Number of concurrent workers (default: 1)
            render_interval_ms: Minimum time between renders (default: 80)
            renderer: Optional callable receiving BatchSnapshot
            cancel_event: Shared cancellation signal; created when None
            clock: Monotonic clock in seconds
        """
        if max_workers <= 0:
            raise ValueError(f"max_workers must be positive, got {max_workers}")
        if render_interval_ms < 0:
            raise ValueError(f"render_interval_ms must be non-negative, got {render_interval_ms}")

        self.max_workers = max_workers
        self.render_interval_ms = render_interval_ms
        self.renderer = renderer
        self.cancel_event = cancel_event or threading.Event()
        self._clock = clock
        self._workers: List[WorkerProgress] = []
        self._last_render: Optional[float] = None

    @classmethod
    def from_settings(
        cls,
        renderer: Optional[Callable[[BatchSnapshot], None]] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> 'BatchProgressCoordinator':
        """Build a coordinator sized by the environment settings."""
        settings = get_settings()
        return cls(
            max_workers=settings.max_workers,
            render_interval_ms=settings.render_interval_ms,
            renderer=renderer,
            cancel_event=cancel_event,
        )

    def register(self, label: str) -> WorkerProgress:
        """Create the progress record for one job. run() registers its own jobs."""
        progress = WorkerProgress(label)
        self._workers.append(progress)
        return progress

    def snapshot(self) -> BatchSnapshot:
        return BatchSnapshot(workers=tuple(w.snapshot() for w in self._workers))

    def cancel(self) -> None:
        """Request cooperative cancellation of every worker."""
        logger.info('Batch cancellation requested')
        self.cancel_event.set()

    def render(self, force: bool = False) -> bool:
        """
        Hand a snapshot to the renderer if the throttle interval has passed.

        Returns:
            True if the renderer was invoked
        """
        if self.renderer is None:
            return False
        now = self._clock()
        if not force and self._last_render is not None:
            if (now - self._last_render) * 1000 < self.render_interval_ms:
                return False
        self._last_render = now
        self.renderer(self.snapshot())
        return True

    def run(self, jobs: Sequence[Tuple[str, BatchJob]]) -> BatchSummary:
        """
        Run every job and wait for all of them.

        Progress records of earlier runs are dropped, so snapshots only
        describe this run's jobs.

        Args:
            jobs: (label, job) pairs; job(progress, cancel_event) returns a result

        Returns:
            BatchSummary with one outcome per job, in job order
        """
        self._workers = []
        self._last_render = None
        progresses = [self.register(label) for label, _ in jobs]
        outcomes: Dict[int, BatchJobOutcome] = {}

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures: Dict[Future, int] = {}
            for index, ((label, job), progress) in enumerate(zip(jobs, progresses)):
                futures[executor.submit(self._run_job, job, progress)] = index

            pending = set(futures)
            while pending:
                done, pending = wait(
                    pending,
                    timeout=max(self.render_interval_ms, 1) / 1000,
                    return_when=FIRST_COMPLETED,
                )
                for future in done:
                    index = futures[future]
                    label = jobs[index][0]
                    result, error = future.result()
                    outcomes[index] = BatchJobOutcome(label=label, result=result, error=error)
                    log_batch_outcome(label, error is None, error)
                self.render()

        self.render(force=True)
        return BatchSummary(
            outcomes=[outcomes[i] for i in range(len(jobs))],
            cancelled=self.cancel_event.is_set(),
        )

    def _run_job(self, job: BatchJob, progress: WorkerProgress):
        if self.cancel_event.is_set():
            progress.mark_cancelled()
            return None, AnalysisCancelledError(f"{progress.label}: cancelled before start")
        try:
            result = job(progress, self.cancel_event)
        except AnalysisCancelledError as e:
            progress.mark_cancelled()
            logger.info(f"Batch job cancelled: {progress.label}")
            return None, e
        except Exception as e:
            progress.mark_failed()
            logger.error(f"Batch job failed: {progress.label}: {e}", exc_info=True)
            return None, e
        progress.mark_analyze_completed()
        return result, None
