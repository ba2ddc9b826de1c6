"""
Parsed value objects for durations, offsets and output resolutions.

This module provides TimeArgument (durations and signed offsets such as
"500ms", "-0.2s", "1m"), ResolutionType ("24bit,48000hz") and the
OutputAudioFormat they resolve to.
"""

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar, Dict

from pcm_analysis.exceptions import InvalidArgumentError, UnsupportedSampleFormatError
from pcm_analysis.models.stream_info import BitDepth, StreamInfo


_TIME_PATTERN = re.compile(r'^(?P<value>[+-]?\d+(?:\.\d+)?)(?P<unit>ms|s|m)$', re.IGNORECASE)
_RESOLUTION_PATTERN = re.compile(r'^(?P<depth>16bit|24bit|32float),(?P<rate>[1-9]\d*)hz$', re.IGNORECASE)

_UNIT_SECONDS: Dict[str, Decimal] = {
    'ms': Decimal('0.001'),
    's': Decimal(1),
    'm': Decimal(60),
}


@dataclass(frozen=True)
class TimeArgument:
    """
    A signed time value held as exact decimal seconds.

    Examples:
        >>> TimeArgument.parse('500ms').seconds
        Decimal('0.500')
        >>> TimeArgument.parse('-0.2s').milliseconds
        Decimal('-200.0')
    """

    seconds: Decimal

    @classmethod
    def parse(cls, text: str) -> 'TimeArgument':
        """
        Parse a duration or offset.

        Args:
            text: Number followed by a unit of ms, s or m (case-insensitive)

        Returns:
            Parsed TimeArgument

        Raises:
            InvalidArgumentError: If the text does not match the expected form
        """
        if text is None:
            raise InvalidArgumentError('time argument is missing')
        match = _TIME_PATTERN.match(text.strip())
        if match is None:
            raise InvalidArgumentError(f"invalid time argument: {text!r}")
        value = Decimal(match.group('value'))
        return cls(value * _UNIT_SECONDS[match.group('unit').lower()])

    @classmethod
    def from_milliseconds(cls, milliseconds) -> 'TimeArgument':
        return cls(Decimal(str(milliseconds)) / 1000)

    @property
    def milliseconds(self) -> Decimal:
        return self.seconds * 1000

    @property
    def is_positive(self) -> bool:
        return self.seconds > 0


@dataclass(frozen=True)
class OutputAudioFormat:
    """Sample format of exported segment files."""

    bit_depth: BitDepth

    CODEC_NAMES: ClassVar[Dict[BitDepth, str]] = {
        BitDepth.PCM16: 'pcm_s16le',
        BitDepth.PCM24: 'pcm_s24le',
        BitDepth.F32: 'pcm_f32le',
    }
    SOUNDFILE_SUBTYPES: ClassVar[Dict[BitDepth, str]] = {
        BitDepth.PCM16: 'PCM_16',
        BitDepth.PCM24: 'PCM_24',
        BitDepth.F32: 'FLOAT',
    }

    def __post_init__(self):
        """Validates the bit depth is exportable."""
        if self.bit_depth not in self.CODEC_NAMES:
            raise UnsupportedSampleFormatError(f"cannot export bit depth {self.bit_depth.name}")

    @classmethod
    def from_stream(cls, stream_info: StreamInfo) -> 'OutputAudioFormat':
        """
        Build the output format matching an input stream.

        Raises:
            UnsupportedSampleFormatError: If the stream's bit depth is unsupported
        """
        return cls(stream_info.bit_depth)

    @property
    def codec_name(self) -> str:
        return self.CODEC_NAMES[self.bit_depth]

    @property
    def soundfile_subtype(self) -> str:
        return self.SOUNDFILE_SUBTYPES[self.bit_depth]


@dataclass(frozen=True)
class ResolutionType:
    """Requested output resolution: bit depth plus sample rate."""

    bit_depth: BitDepth
    sample_rate: int

    _DEPTHS: ClassVar[Dict[str, BitDepth]] = {
        '16bit': BitDepth.PCM16,
        '24bit': BitDepth.PCM24,
        '32float': BitDepth.F32,
    }

    @classmethod
    def parse(cls, text: str) -> 'ResolutionType':
        """
        Parse a resolution such as "16bit,44100hz".

        Raises:
            InvalidArgumentError: If the text does not match the expected form
        """
        if text is None:
            raise InvalidArgumentError('resolution is missing')
        match = _RESOLUTION_PATTERN.match(text.strip())
        if match is None:
            raise InvalidArgumentError(f"invalid resolution: {text!r}")
        return cls(
            bit_depth=cls._DEPTHS[match.group('depth').lower()],
            sample_rate=int(match.group('rate')),
        )

    def to_output_format(self) -> OutputAudioFormat:
        return OutputAudioFormat(self.bit_depth)
