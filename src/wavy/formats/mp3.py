"""MP3 decoder backed by pydub."""

from typing import BinaryIO
import numpy as np
from wavy.core.exceptions import DecoderError
from wavy.core.interfaces import IAudioFormat
from wavy.core.models import PcmFormat, SoundType
from wavy.utils.log import get_logger

logger = get_logger(__name__)

try:
    from pydub import AudioSegment
    PYDUB_AVAILABLE = True
    PYDUB_ERROR = None
except ImportError as e:
    PYDUB_AVAILABLE = False
    PYDUB_ERROR = str(e)


class Mp3Decoder:
    """Serves the PCM decoded by pydub through the forward-read decoder interface."""

    data_start = 0
    seekable = True

    def __init__(self, pcm: bytes, fmt: PcmFormat):
        self._pcm = memoryview(pcm)
        self._fmt = fmt
        self._pos = 0

    def known_length(self) -> int:
        return len(self._pcm)

    def read(self, size: int) -> bytes:
        chunk = self._pcm[self._pos:self._pos + size].tobytes()
        self._pos += len(chunk)
        return chunk

    def seek_forward(self, frame_index: int) -> None:
        self._pos = min(frame_index * self._fmt.bytes_per_frame, len(self._pcm))

    def rewind(self) -> None:
        self._pos = 0

    def close(self) -> None:
        self._pcm = memoryview(b"")
        self._pos = 0


def _require_pydub() -> None:
    if PYDUB_AVAILABLE:
        return
    error_msg = "pydub is required for MP3 support."
    if PYDUB_ERROR and "audioop" in PYDUB_ERROR.lower():
        error_msg += (
            "\n\npydub is installed but missing the 'audioop' module. "
            "This is common on Python 3.13+ where audioop was removed. "
            "Install audioop-lts to fix this:\n"
            "  pip install audioop-lts"
        )
    elif PYDUB_ERROR:
        error_msg += f"\n\nImport error: {PYDUB_ERROR}"
    raise ImportError(error_msg)


class Mp3Format(IAudioFormat):
    """MP3 format handler implementing IAudioFormat."""

    @property
    def sound_type(self) -> SoundType:
        return SoundType.MP3

    @property
    def extensions(self) -> tuple[str, ...]:
        """Supported file extensions."""
        return (".mp3",)

    def open_decoder(self, stream: BinaryIO, fmt: PcmFormat) -> Mp3Decoder:
        """
        Decode an MP3 stream to PCM in the output channel layout and sample width.

        The sample rate is left as decoded; a mismatch is only logged.

        Raises:
            DecoderError: If the data cannot be decoded or ffmpeg is missing.
            ImportError: If pydub is not installed.
        """
        _require_pydub()

        try:
            audio = AudioSegment.from_file(stream, format="mp3")
        except FileNotFoundError as e:
            # pydub spawns ffmpeg/ffprobe, a missing binary surfaces as FileNotFoundError
            raise DecoderError(
                "ffmpeg is required for MP3 decoding with pydub. "
                "Ensure 'ffmpeg' and 'ffprobe' are available in your PATH."
            ) from e
        except Exception as e:
            raise DecoderError(f"Failed to decode MP3 data: {e}") from e

        if audio.frame_rate != fmt.sample_rate:
            logger.warning(
                f"MP3 sample rate {audio.frame_rate} Hz differs from output rate "
                f"{fmt.sample_rate} Hz, playing as-is"
            )
        if audio.channels != fmt.channels:
            audio = audio.set_channels(fmt.channels)
        if audio.sample_width != fmt.bytes_per_sample:
            audio = audio.set_sample_width(fmt.bytes_per_sample)

        pcm = audio.raw_data
        if fmt.bytes_per_sample == 1:
            # pydub keeps 8-bit samples signed, PCM expects them unsigned
            pcm = (np.frombuffer(pcm, dtype=np.int8).astype(np.int16) + 128).astype(np.uint8).tobytes()

        logger.info(
            f"Decoded MP3: {audio.channels}ch, {audio.frame_rate}Hz, "
            f"{len(pcm)} bytes ({len(audio) / 1000.0:.2f}s)"
        )
        return Mp3Decoder(pcm, fmt)


# Format instance for registration
mp3_format = Mp3Format()
