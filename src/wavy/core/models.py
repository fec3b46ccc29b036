"""Data models and configuration classes."""

from dataclasses import dataclass
from enum import Enum


class SoundType(Enum):
    """Container format of a sound file, detected from its extension."""

    UNKNOWN = "unknown"
    MP3 = "mp3"
    WAV = "wav"
    OGG = "ogg"


class SoundMode(Enum):
    """How the decoded PCM of a sound is held."""

    STREAMING = "streaming"
    MEMORY = "memory"


SUPPORTED_SAMPLE_RATES = (44100, 48000)
SUPPORTED_CHANNELS = (1, 2)
SUPPORTED_BYTES_PER_SAMPLE = (1, 2)


@dataclass(frozen=True)
class PcmFormat:
    """PCM layout shared by the output device and every sound opened on it."""

    sample_rate: int = 44100
    """Sample rate in Hz (44100 or 48000)."""

    channels: int = 2
    """Number of interleaved channels (1=mono, 2=stereo)."""

    bytes_per_sample: int = 2
    """Bytes per single-channel sample (1 or 2)."""

    def __post_init__(self):
        if self.sample_rate not in SUPPORTED_SAMPLE_RATES:
            raise ValueError(
                f"Unsupported sample rate: {self.sample_rate} Hz "
                f"(only 44100 or 48000 supported)"
            )
        if self.channels not in SUPPORTED_CHANNELS:
            raise ValueError(
                f"Unsupported channel count: {self.channels} (only mono=1 or stereo=2)"
            )
        if self.bytes_per_sample not in SUPPORTED_BYTES_PER_SAMPLE:
            raise ValueError(
                f"Unsupported bytes per sample: {self.bytes_per_sample} (only 1 or 2)"
            )

    @property
    def bytes_per_frame(self) -> int:
        """Size of one multi-channel sample set in bytes."""
        return self.channels * self.bytes_per_sample

    @property
    def bytes_per_second(self) -> int:
        """Byte rate of the PCM stream."""
        return self.bytes_per_frame * self.sample_rate

    @property
    def bits_per_sample(self) -> int:
        return self.bytes_per_sample * 8


@dataclass(frozen=True)
class SoundInfo:
    """Static information about a loaded sound."""

    sound_type: SoundType
    mode: SoundMode

    total_size: int
    """Size of the decoded PCM payload in bytes."""
