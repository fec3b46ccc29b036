"""Tests for play time and byte count conversions."""

import pytest
from wavy.core.models import PcmFormat
from wavy.core.timing import align_to_frame, byte_count_from_play_time, play_time_from_byte_count

CD = PcmFormat(sample_rate=44100, channels=2, bytes_per_sample=2)


def test_cd_format_byte_rate():
    assert CD.bytes_per_frame == 4
    assert CD.bytes_per_second == 176400
    assert CD.bits_per_sample == 16


def test_play_time_from_byte_count():
    assert play_time_from_byte_count(CD, 70560) == pytest.approx(0.4)
    assert play_time_from_byte_count(CD, 176400) == 1.0
    assert play_time_from_byte_count(CD, 0) == 0.0


def test_play_time_truncates_to_milliseconds():
    # 176 bytes is just under 1 ms at 176400 B/s
    assert play_time_from_byte_count(CD, 176) == 0.0
    assert play_time_from_byte_count(CD, 177) == 0.001


def test_byte_count_from_play_time():
    assert byte_count_from_play_time(CD, 0.4) == 70560
    assert byte_count_from_play_time(CD, 1.0) == 176400


def test_ten_millisecond_multiples_round_trip():
    for tens in range(0, 500):
        seconds = tens / 100.0
        byte_count = byte_count_from_play_time(CD, seconds)
        assert play_time_from_byte_count(CD, byte_count) == pytest.approx(seconds)
        assert byte_count_from_play_time(CD, play_time_from_byte_count(CD, byte_count)) == byte_count


def test_align_to_frame():
    assert align_to_frame(CD, 0) == 0
    assert align_to_frame(CD, 7) == 4
    assert align_to_frame(CD, 8) == 8
    mono8 = PcmFormat(sample_rate=48000, channels=1, bytes_per_sample=1)
    assert align_to_frame(mono8, 7) == 7


@pytest.mark.parametrize(
    "kwargs",
    [
        {"sample_rate": 22050},
        {"channels": 3},
        {"bytes_per_sample": 3},
    ],
)
def test_pcm_format_rejects_unsupported_values(kwargs):
    with pytest.raises(ValueError):
        PcmFormat(**kwargs)
