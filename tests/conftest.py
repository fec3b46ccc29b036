"""Shared fixtures: in-memory WAV files and a started audio system on NullBackend."""

import io
import struct
import pytest
from wavy.api.engine import AudioSystem
from wavy.backends.null_backend import NullBackend
from wavy.core.models import PcmFormat


def pcm_pattern(size: int) -> bytes:
    """Deterministic, non-silent PCM bytes."""
    return bytes(i % 251 for i in range(size))


def create_test_wav(
    sample_rate: int = 44100,
    channels: int = 2,
    bits_per_sample: int = 16,
    num_samples: int = 1000,
    audio_format: int = 1,
    extra_chunk: bytes = b"",
) -> bytes:
    """Create a test WAV file in memory."""
    block_align = (channels * bits_per_sample) // 8
    byte_rate = sample_rate * block_align
    data_size = num_samples * block_align
    file_size = 36 + len(extra_chunk) + data_size

    wav = io.BytesIO()

    # RIFF header
    wav.write(b"RIFF")
    wav.write(struct.pack("<I", file_size))
    wav.write(b"WAVE")

    # fmt chunk
    wav.write(b"fmt ")
    wav.write(struct.pack("<I", 16))
    wav.write(struct.pack("<HHIIHH", audio_format, channels, sample_rate, byte_rate, block_align, bits_per_sample))

    wav.write(extra_chunk)

    # data chunk
    wav.write(b"data")
    wav.write(struct.pack("<I", data_size))
    wav.write(pcm_pattern(data_size))

    return wav.getvalue()


def wav_duration_samples(seconds: float, sample_rate: int = 44100) -> int:
    return int(seconds * sample_rate)


@pytest.fixture
def fmt() -> PcmFormat:
    return PcmFormat(sample_rate=44100, channels=2, bytes_per_sample=2)


@pytest.fixture
def backend() -> NullBackend:
    return NullBackend(buffer_ms=20, tick=0.002)


@pytest.fixture
def system(fmt, backend):
    audio_system = AudioSystem(fmt, backend=backend)
    audio_system.start()
    yield audio_system
    audio_system.shutdown()


@pytest.fixture
def wav_path(tmp_path):
    """A 0.2 second stereo 16-bit 44.1 kHz WAV file."""
    path = tmp_path / "tone.wav"
    path.write_bytes(create_test_wav(num_samples=wav_duration_samples(0.2)))
    return str(path)
