"""Unit tests for parsed value objects."""

from decimal import Decimal

import pytest

from pcm_analysis.exceptions import InvalidArgumentError, UnsupportedSampleFormatError
from pcm_analysis.models import BitDepth, OutputAudioFormat, ResolutionType, StreamInfo, TimeArgument


class TestTimeArgument:
    """Test suite for TimeArgument parsing."""

    @pytest.mark.parametrize('text, seconds', [
        ('500ms', Decimal('0.5')),
        ('2s', Decimal('2')),
        ('1m', Decimal('60')),
        ('-0.2s', Decimal('-0.2')),
        ('+15ms', Decimal('0.015')),
        ('1.5MS', Decimal('0.0015')),
        (' 10ms ', Decimal('0.01')),
    ])
    def test_parse(self, text, seconds):
        assert TimeArgument.parse(text).seconds == seconds

    @pytest.mark.parametrize('text', ['', 'abc', '10', '10h', '1.ms', 'ms', '1 ms', None])
    def test_invalid_text(self, text):
        with pytest.raises(InvalidArgumentError):
            TimeArgument.parse(text)

    def test_milliseconds(self):
        assert TimeArgument.parse('-0.2s').milliseconds == Decimal('-200')
        assert TimeArgument.from_milliseconds(2000).seconds == Decimal('2')

    def test_is_positive(self):
        assert TimeArgument.parse('1ms').is_positive
        assert not TimeArgument.parse('0ms').is_positive
        assert not TimeArgument.parse('-1ms').is_positive


class TestResolutionType:
    """Test suite for ResolutionType parsing."""

    @pytest.mark.parametrize('text, depth, rate', [
        ('16bit,44100hz', BitDepth.PCM16, 44100),
        ('24bit,48000hz', BitDepth.PCM24, 48000),
        ('32FLOAT,96000HZ', BitDepth.F32, 96000),
    ])
    def test_parse(self, text, depth, rate):
        resolution = ResolutionType.parse(text)
        assert resolution.bit_depth == depth
        assert resolution.sample_rate == rate

    @pytest.mark.parametrize('text', ['8bit,44100hz', '16bit,0hz', '16bit,044100hz', '16bit', '16bit;44100hz'])
    def test_invalid_text(self, text):
        with pytest.raises(InvalidArgumentError):
            ResolutionType.parse(text)

    def test_to_output_format(self):
        assert ResolutionType.parse('24bit,48000hz').to_output_format().codec_name == 'pcm_s24le'


class TestOutputAudioFormat:
    """Test suite for OutputAudioFormat."""

    @pytest.mark.parametrize('depth, codec, subtype', [
        (BitDepth.PCM16, 'pcm_s16le', 'PCM_16'),
        (BitDepth.PCM24, 'pcm_s24le', 'PCM_24'),
        (BitDepth.F32, 'pcm_f32le', 'FLOAT'),
    ])
    def test_codec_and_subtype(self, depth, codec, subtype):
        output_format = OutputAudioFormat(depth)
        assert output_format.codec_name == codec
        assert output_format.soundfile_subtype == subtype

    def test_unsupported_depth_rejected(self):
        with pytest.raises(UnsupportedSampleFormatError):
            OutputAudioFormat(BitDepth.UNSUPPORTED)

    def test_from_stream(self):
        info = StreamInfo(sample_rate=44100, channel_count=2, bit_depth=BitDepth.PCM24)
        assert OutputAudioFormat.from_stream(info).bit_depth == BitDepth.PCM24
