"""RIFF WAV streaming decoder."""

import io
import struct
from typing import BinaryIO, Optional
from wavy.core.exceptions import DecoderError
from wavy.core.interfaces import IAudioFormat
from wavy.core.models import PcmFormat, SoundType
from wavy.utils.log import get_logger

logger = get_logger(__name__)

WAVE_FORMAT_PCM = 1


class WavDecoder:
    """
    Reads the PCM payload of a WAV file straight from its data chunk.

    Positions are file offsets: after advance_to_data_chunk() the offset of
    the first PCM byte becomes data_start.
    """

    seekable = True

    def __init__(self, stream: BinaryIO, fmt: PcmFormat):
        self._stream = stream
        self._fmt = fmt
        self._data_offset: Optional[int] = None
        self._data_size = 0
        self._consumed = 0

        self.audio_format = 0
        self.channels = 0
        self.sample_rate = 0
        self.bits_per_sample = 0
        self.block_align = 0

    @property
    def data_start(self) -> int:
        self._require_data_chunk()
        return self._data_offset

    def known_length(self) -> int:
        self._require_data_chunk()
        return self._data_size

    def advance_to_data_chunk(self) -> None:
        """
        Parse the RIFF header and chunks up to the start of the data chunk.

        Must be called once before reading. Calling it again is a no-op.

        Raises:
            DecoderError: If the stream is not a supported PCM WAV file.
        """
        if self._data_offset is not None:
            return

        f = self._stream
        if self._read_exact(4) != b"RIFF":
            raise DecoderError("Not a RIFF file")
        struct.unpack("<I", self._read_exact(4))  # riff size, unreliable when streamed
        if self._read_exact(4) != b"WAVE":
            raise DecoderError("Not a WAVE file")

        fmt_data = None
        while True:
            header = f.read(8)
            if len(header) < 8:
                break
            chunk_id = header[:4]
            chunk_size = struct.unpack("<I", header[4:])[0]

            if chunk_id == b"fmt ":
                fmt_data = self._read_exact(chunk_size)
                if chunk_size & 1:
                    f.seek(1, io.SEEK_CUR)
            elif chunk_id == b"data":
                if fmt_data is None:
                    raise DecoderError("data chunk found before fmt chunk")
                self._parse_fmt(fmt_data)
                self._data_offset = f.tell()
                self._data_size = self._available(chunk_size)
                logger.info(
                    f"WAV data chunk at {self._data_offset}: {self.channels}ch, "
                    f"{self.sample_rate}Hz, {self.bits_per_sample}bit, {self._data_size} bytes"
                )
                return
            else:
                # Skip unknown chunks (odd sizes are padded to a word)
                f.seek(chunk_size + (chunk_size & 1), io.SEEK_CUR)

        if fmt_data is None:
            raise DecoderError("Missing fmt chunk")
        raise DecoderError("Missing data chunk")

    def read(self, size: int) -> bytes:
        self._require_data_chunk()
        size = min(size, self._data_size - self._consumed)
        if size <= 0:
            return b""
        chunk = self._stream.read(size)
        self._consumed += len(chunk)
        return chunk

    def seek_forward(self, frame_index: int) -> None:
        self._require_data_chunk()
        self._consumed = min(frame_index * self._fmt.bytes_per_frame, self._data_size)
        self._stream.seek(self._data_offset + self._consumed)

    def rewind(self) -> None:
        self._require_data_chunk()
        self._stream.seek(self._data_offset)
        self._consumed = 0

    def close(self) -> None:
        # the file belongs to the caller
        pass

    def _require_data_chunk(self) -> None:
        if self._data_offset is None:
            raise DecoderError("advance_to_data_chunk() must be called before use")

    def _read_exact(self, size: int) -> bytes:
        data = self._stream.read(size)
        if len(data) < size:
            raise DecoderError("Unexpected end of WAV header")
        return data

    def _available(self, declared_size: int) -> int:
        """Declared data size, trimmed to what the file actually holds."""
        here = self._stream.tell()
        end = self._stream.seek(0, io.SEEK_END)
        self._stream.seek(here)
        return min(declared_size, end - here)

    def _parse_fmt(self, fmt_data: bytes) -> None:
        # Format: audio_format(2), num_channels(2), sample_rate(4),
        #         byte_rate(4), block_align(2), bits_per_sample(2)
        if len(fmt_data) < 16:
            raise DecoderError("Invalid fmt chunk size")

        (
            self.audio_format,
            self.channels,
            self.sample_rate,
            _byte_rate,
            self.block_align,
            self.bits_per_sample,
        ) = struct.unpack("<HHIIHH", fmt_data[:16])

        if self.audio_format != WAVE_FORMAT_PCM:
            raise DecoderError(
                f"Unsupported audio format: {self.audio_format} (only PCM=1 is supported)"
            )
        if self.bits_per_sample not in (8, 16):
            raise DecoderError(
                f"Unsupported bits per sample: {self.bits_per_sample} (only 8 or 16-bit)"
            )
        if self.channels not in (1, 2):
            raise DecoderError(
                f"Unsupported channel count: {self.channels} (only mono=1 or stereo=2)"
            )

        if (
            self.sample_rate != self._fmt.sample_rate
            or self.channels != self._fmt.channels
            or self.bits_per_sample != self._fmt.bits_per_sample
        ):
            logger.warning(
                f"WAV format {self.channels}ch/{self.sample_rate}Hz/{self.bits_per_sample}bit "
                f"differs from output format {self._fmt.channels}ch/{self._fmt.sample_rate}Hz/"
                f"{self._fmt.bits_per_sample}bit, playing as-is"
            )


class WavFormat(IAudioFormat):
    """WAV format handler implementing IAudioFormat."""

    @property
    def sound_type(self) -> SoundType:
        return SoundType.WAV

    @property
    def extensions(self) -> tuple[str, ...]:
        """Supported file extensions."""
        return (".wav", ".wave")

    def open_decoder(self, stream: BinaryIO, fmt: PcmFormat) -> WavDecoder:
        """
        Open a WAV decoder positioned at the first PCM byte.

        Supports:
        - PCM format (fmt=1)
        - 8 or 16-bit samples
        - Mono or stereo

        Raises:
            DecoderError: If the format is not supported or the file is malformed.
        """
        decoder = WavDecoder(stream, fmt)
        decoder.advance_to_data_chunk()
        return decoder


# Format instance for registration
wav_format = WavFormat()
