"""Conversion between float samples and 16-bit PCM bytes."""

from typing import Sequence, Union
import numpy as np

FloatSamples = Union[Sequence[float], np.ndarray]


def f32_to_pcm16(samples: FloatSamples) -> bytes:
    """
    Convert float samples in [-1, 1] to little-endian 16-bit PCM.

    Negative samples are scaled by 32768 and the rest by 32767, so -1 maps to
    0x8000 and 1 maps to 0x7FFF. Every sample produces two bytes; multi-channel
    input must already be interleaved (or be a (frames, channels) array).
    """
    x = np.asarray(samples, dtype=np.float32).reshape(-1)
    scaled = np.where(x < 0, x * 32768.0, x * 32767.0)
    return np.clip(np.rint(scaled), -32768, 32767).astype("<i2").tobytes()


def pcm16_to_f32(data: bytes) -> np.ndarray:
    """Inverse of f32_to_pcm16, returns a flat float32 array."""
    ints = np.frombuffer(data, dtype="<i2").astype(np.float32)
    return np.where(ints < 0, ints / 32768.0, ints / 32767.0).astype(np.float32)
