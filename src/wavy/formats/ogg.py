"""OGG Vorbis decoder backed by soundfile."""

from typing import BinaryIO
import soundfile as sf
from wavy.core.exceptions import DecoderError
from wavy.core.interfaces import IAudioFormat
from wavy.core.models import PcmFormat, SoundType
from wavy.core.pcm import f32_to_pcm16
from wavy.utils.log import get_logger

logger = get_logger(__name__)

PCM16_WIDTH = 2


class OggDecoder:
    """
    Decodes Vorbis frames as float32 and converts them to 16-bit PCM.

    Frame indices handed to seek_forward() are counted in the decoder's own
    frames, which match output frames when the channel counts agree.
    """

    data_start = 0
    seekable = True

    def __init__(self, sound_file: sf.SoundFile):
        self._file = sound_file
        self._frame_size = sound_file.channels * PCM16_WIDTH
        self._pending = b""

    def known_length(self) -> int:
        return self._file.frames * self._frame_size

    def read(self, size: int) -> bytes:
        if len(self._pending) < size:
            wanted = size - len(self._pending)
            frames = -(-wanted // self._frame_size)
            try:
                samples = self._file.read(frames, dtype="float32", always_2d=True)
            except RuntimeError as e:
                raise DecoderError(f"Failed to decode OGG data: {e}") from e
            self._pending += f32_to_pcm16(samples)

        chunk, self._pending = self._pending[:size], self._pending[size:]
        return chunk

    def seek_forward(self, frame_index: int) -> None:
        self._file.seek(min(frame_index, self._file.frames))
        self._pending = b""

    def rewind(self) -> None:
        self._file.seek(0)
        self._pending = b""

    def close(self) -> None:
        self._file.close()


class OggFormat(IAudioFormat):
    """OGG Vorbis format handler implementing IAudioFormat."""

    @property
    def sound_type(self) -> SoundType:
        return SoundType.OGG

    @property
    def extensions(self) -> tuple[str, ...]:
        """Supported file extensions."""
        return (".ogg",)

    def open_decoder(self, stream: BinaryIO, fmt: PcmFormat) -> OggDecoder:
        """
        Open an OGG Vorbis decoder producing 16-bit PCM.

        Raises:
            DecoderError: If libsndfile cannot open the stream.
        """
        try:
            sound_file = sf.SoundFile(stream)
        except RuntimeError as e:
            raise DecoderError(f"Failed to open OGG data: {e}") from e

        if sound_file.samplerate != fmt.sample_rate or sound_file.channels != fmt.channels:
            logger.warning(
                f"OGG format {sound_file.channels}ch/{sound_file.samplerate}Hz differs from "
                f"output format {fmt.channels}ch/{fmt.sample_rate}Hz, playing as-is"
            )
        if fmt.bytes_per_sample != PCM16_WIDTH:
            logger.warning("OGG decodes to 16-bit PCM but the output format is 8-bit")

        logger.info(
            f"Opened OGG: {sound_file.channels}ch, {sound_file.samplerate}Hz, "
            f"{sound_file.frames} frames"
        )
        return OggDecoder(sound_file)


# Format instance for registration
ogg_format = OggFormat()
