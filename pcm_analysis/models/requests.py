"""
Analysis request data models.

This module defines the request dataclasses accepted by the analysis
use cases. Each request reports its own parameter problems through
validate(), in the same manner as the package's configuration models.
"""

import math
from dataclasses import dataclass
from typing import List, Optional

from pcm_analysis.config.settings import get_settings
from pcm_analysis.models.points import AnchorUnit
from pcm_analysis.models.value_objects import ResolutionType, TimeArgument


def _check_min_limit_db(value: float, errors: List[str]) -> None:
    if value is None or math.isnan(value) or math.isinf(value):
        errors.append(f'Minimum dB limit must be finite, got {value}')


def _default_min_limit_db(request) -> None:
    if request.min_limit_db is None:
        request.min_limit_db = get_settings().min_limit_db


def _check_name(value: str, errors: List[str]) -> None:
    if not value or not value.strip():
        errors.append('Name must not be empty')


@dataclass
class SplitRequest:
    """Configuration for silence-based splitting of one input file."""

    input_path: str
    output_directory: str
    level_db: float = -48.0
    duration: TimeArgument = TimeArgument.from_milliseconds(2000)
    after_offset: TimeArgument = TimeArgument.from_milliseconds(0)
    resume_offset: TimeArgument = TimeArgument.from_milliseconds(0)
    resolution: Optional[ResolutionType] = None
    overwrite: bool = False

    def validate(self) -> List[str]:
        """
        Validates request parameters.

        Returns:
            List of error messages. Empty list if request is valid.
        """
        errors = []

        if not self.input_path:
            errors.append('Input path must not be empty')

        if not self.output_directory:
            errors.append('Output directory must not be empty')

        if self.level_db is None or math.isnan(self.level_db):
            errors.append('Silence level must be a number')

        if not self.duration.is_positive:
            errors.append(f'Silence duration must be positive, got {self.duration.seconds}s')

        return errors


@dataclass
class PeakAnalysisRequest:
    """Configuration for a sliding-window peak envelope pass."""

    input_path: str
    name: str
    window_ms: int = 50
    hop_ms: int = 10
    min_limit_db: Optional[float] = None

    def __post_init__(self):
        _default_min_limit_db(self)

    def validate(self) -> List[str]:
        """
        Validates request parameters.

        Returns:
            List of error messages. Empty list if request is valid.
        """
        errors = []
        _check_name(self.name, errors)

        if self.window_ms <= 0:
            errors.append(f'Window must be positive, got {self.window_ms}ms')

        if self.hop_ms <= 0:
            errors.append(f'Hop must be positive, got {self.hop_ms}ms')

        _check_min_limit_db(self.min_limit_db, errors)
        return errors


@dataclass
class StftAnalysisRequest:
    """
    Configuration for a sample-anchored spectral pass.

    Attributes:
        input_path: Input audio file
        name: Identifying label written on every point
        window_samples: Analysis window length in frames at the analysis rate
        hop_samples: Distance between anchors in frames
        analysis_sample_rate: Rate the frames are analyzed at; resampling is
            requested from the frame source when it differs from the input
        anchor_unit: Whether anchors are reported in samples or elapsed ms
        window_persisted_value: Window value written on points (as given by
            the caller, in its own unit)
        bin_count: Number of output bands
        min_limit_db: Floor applied to every band value
    """

    input_path: str
    name: str
    window_samples: int
    hop_samples: int
    analysis_sample_rate: int
    anchor_unit: AnchorUnit = AnchorUnit.SAMPLE
    window_persisted_value: Optional[int] = None
    bin_count: int = 64
    min_limit_db: Optional[float] = None

    def __post_init__(self):
        if self.window_persisted_value is None:
            self.window_persisted_value = self.window_samples
        _default_min_limit_db(self)

    def validate(self) -> List[str]:
        """
        Validates request parameters.

        Returns:
            List of error messages. Empty list if request is valid.
        """
        errors = []
        _check_name(self.name, errors)

        if self.window_samples <= 0:
            errors.append(f'Window must be positive, got {self.window_samples} samples')

        if self.hop_samples <= 0:
            errors.append(f'Hop must be positive, got {self.hop_samples} samples')

        if self.analysis_sample_rate <= 0:
            errors.append(f'Analysis sample rate must be positive, got {self.analysis_sample_rate}')

        if self.window_persisted_value is None or self.window_persisted_value <= 0:
            errors.append('Persisted window value must be positive')

        if self.bin_count <= 0:
            errors.append(f'Bin count must be positive, got {self.bin_count}')

        _check_min_limit_db(self.min_limit_db, errors)
        return errors


@dataclass
class SfftAnalysisRequest:
    """Configuration for a millisecond-anchored spectral pass."""

    input_path: str
    name: str
    window_ms: int
    hop_ms: int
    bin_count: int = 64
    min_limit_db: Optional[float] = None

    def __post_init__(self):
        _default_min_limit_db(self)

    def validate(self) -> List[str]:
        """
        Validates request parameters.

        Returns:
            List of error messages. Empty list if request is valid.
        """
        errors = []
        _check_name(self.name, errors)

        if self.window_ms <= 0:
            errors.append(f'Window must be positive, got {self.window_ms}ms')

        if self.hop_ms <= 0:
            errors.append(f'Hop must be positive, got {self.hop_ms}ms')

        if self.bin_count <= 0:
            errors.append(f'Bin count must be positive, got {self.bin_count}')

        _check_min_limit_db(self.min_limit_db, errors)
        return errors
