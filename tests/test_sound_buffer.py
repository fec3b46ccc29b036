"""Tests for the in-memory PCM buffer."""

import io
import pytest
from wavy.core.exceptions import InvalidWhenceError, NegativeSeekPositionError, SeekError
from wavy.sources.buffer import SoundBuffer


def test_read_advances_position():
    buf = SoundBuffer(b"abcdefgh")

    assert buf.read(3) == b"abc"
    assert buf.tell() == 3
    assert buf.read(100) == b"defgh"
    assert buf.tell() == 8


def test_read_at_end_returns_empty():
    buf = SoundBuffer(b"abcd")
    buf.seek(0, io.SEEK_END)

    assert buf.read(10) == b""
    # Past the end is allowed, reads are still empty
    assert buf.seek(10) == 10
    assert buf.read(1) == b""


def test_read_all():
    buf = SoundBuffer(b"abcd")
    buf.seek(1)
    assert buf.read() == b"bcd"


def test_seek_whence():
    buf = SoundBuffer(b"0123456789")

    assert buf.seek(4) == 4
    assert buf.seek(2, io.SEEK_CUR) == 6
    assert buf.seek(-3, io.SEEK_END) == 7
    assert buf.read(1) == b"7"


def test_negative_seek_leaves_position_unchanged():
    buf = SoundBuffer(b"0123456789")
    buf.seek(5)

    with pytest.raises(NegativeSeekPositionError):
        buf.seek(-6, io.SEEK_CUR)
    with pytest.raises(SeekError):
        buf.seek(-1)

    assert buf.tell() == 5


def test_invalid_whence():
    buf = SoundBuffer(b"0123")

    with pytest.raises(InvalidWhenceError):
        buf.seek(0, 3)
    # Also usable as a plain ValueError
    with pytest.raises(ValueError):
        buf.seek(0, -1)
    assert buf.tell() == 0


def test_copy_shares_bytes_with_independent_position():
    buf = SoundBuffer(b"0123456789")
    buf.seek(6)

    other = buf.copy()

    assert other.tell() == 0
    assert other.read(2) == b"01"
    assert buf.read(2) == b"67"


def test_clip_covers_fraction_of_data():
    buf = SoundBuffer(bytes(range(100)))

    clip = buf.clip(0.25, 0.5)

    assert len(clip) == 25
    assert clip.read() == bytes(range(25, 50))
    assert buf.tell() == 0


def test_clip_aligns_both_ends():
    buf = SoundBuffer(bytes(range(10)))

    clip = buf.clip(0.15, 0.95, align=4)

    # 1 -> 0, 9 -> 8
    assert clip.read() == bytes(range(0, 8))


def test_clip_clamps_fractions_and_handles_reversed_range():
    buf = SoundBuffer(bytes(range(10)))

    assert len(buf.clip(-1.0, 2.0)) == 10
    assert len(buf.clip(0.8, 0.2)) == 0
    assert buf.clip(0.8, 0.2).read(1) == b""


def test_clip_of_clip_is_relative():
    buf = SoundBuffer(bytes(range(100)))
    half = buf.clip(0.5, 1.0)

    quarter = half.clip(0.0, 0.5)

    assert quarter.read() == bytes(range(50, 75))


def test_data_is_read_only():
    buf = SoundBuffer(bytearray(b"abcd"))
    with pytest.raises(TypeError):
        buf.data[0] = 0
