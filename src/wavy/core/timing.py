"""Conversions between play time and PCM byte counts.

Durations are float seconds truncated to whole milliseconds, so that
byte counts computed from them are stable across repeated conversions.
"""

from wavy.core.models import PcmFormat


def _to_milliseconds(seconds: float) -> int:
    # round away float noise (0.29 * 1000 == 289.99999999999997) before truncating
    return int(round(seconds * 1000.0, 6))


def play_time_from_byte_count(fmt: PcmFormat, byte_count: int) -> float:
    """Return the time in seconds taken to play byte_count bytes."""
    return (byte_count * 1000 // fmt.bytes_per_second) / 1000.0


def byte_count_from_play_time(fmt: PcmFormat, seconds: float) -> int:
    """Return how many bytes are needed to play for the given time."""
    return _to_milliseconds(seconds) * fmt.bytes_per_second // 1000


def align_to_frame(fmt: PcmFormat, byte_count: int) -> int:
    """Round byte_count down to a whole number of frames."""
    return byte_count - byte_count % fmt.bytes_per_frame
