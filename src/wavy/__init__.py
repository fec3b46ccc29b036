"""
wavy - seekable, loopable playback of MP3, WAV and OGG files.

This package decodes sounds to a shared PCM format and plays them through
an output backend, either streaming from disk or fully decoded in memory,
with pause, seek, loop and volume controls per sound.
"""

from wavy.api.engine import AudioSystem
from wavy.api.sound import Sound
from wavy.core.models import PcmFormat, SoundInfo, SoundMode, SoundType
from wavy.core.timing import byte_count_from_play_time, play_time_from_byte_count
from wavy.core.pcm import f32_to_pcm16
from wavy.core.exceptions import (
    WavyError,
    EngineNotStartedError,
    SoundLoadError,
    UnsupportedFormatError,
    DecoderError,
    SeekError,
    NegativeSeekPositionError,
    InvalidWhenceError,
    SoundClosedError,
    SoundModeError,
    CloseError,
    BackendError,
)

__version__ = "0.1.0"

__all__ = [
    "AudioSystem",
    "Sound",
    "PcmFormat",
    "SoundInfo",
    "SoundMode",
    "SoundType",
    "byte_count_from_play_time",
    "play_time_from_byte_count",
    "f32_to_pcm16",
    "WavyError",
    "EngineNotStartedError",
    "SoundLoadError",
    "UnsupportedFormatError",
    "DecoderError",
    "SeekError",
    "NegativeSeekPositionError",
    "InvalidWhenceError",
    "SoundClosedError",
    "SoundModeError",
    "CloseError",
    "BackendError",
]
