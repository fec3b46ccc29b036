"""Seekable PCM stream over a forward-only decoder."""

import io
import threading
from wavy.core.exceptions import InvalidWhenceError
from wavy.core.interfaces import IDecoder
from wavy.core.models import PcmFormat
from wavy.utils.log import get_logger

logger = get_logger(__name__)

SKIP_CHUNK_SIZE = 64 * 1024


class DecoderStream:
    """
    Bidirectionally seekable byte stream over a decoder that only reads forward.

    Positions are in the decoder's byte space: the first audio byte sits at
    decoder.data_start, and nothing before it can be reached by seeking.
    Backward seeks rewind the decoder to its start and move forward again.

    The player reads from this stream on its own thread while callers seek
    from theirs, and the decoder has a single internal cursor, so read, seek
    and tell are serialized on one lock.
    """

    def __init__(self, decoder: IDecoder, fmt: PcmFormat):
        self._decoder = decoder
        self._fmt = fmt
        self._data_start = decoder.data_start
        self._pos = decoder.data_start
        self._lock = threading.Lock()

    @property
    def data_start(self) -> int:
        return self._data_start

    @property
    def decoder(self) -> IDecoder:
        return self._decoder

    @property
    def size(self) -> int:
        """Decoded PCM length in bytes."""
        return self._decoder.known_length()

    def read(self, size: int) -> bytes:
        """Read up to size bytes from the decoder. Returns b"" at end of stream."""
        with self._lock:
            chunk = self._decoder.read(size)
            self._pos += len(chunk)
            return chunk

    def tell(self) -> int:
        with self._lock:
            return self._pos

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        """
        Move to a new position and return it.

        The target is clamped to data_start and rounded down to a frame
        boundary. Errors raised by the decoder while rewinding or seeking
        propagate unchanged.

        Raises:
            InvalidWhenceError: If whence is not SEEK_SET, SEEK_CUR or SEEK_END.
        """
        with self._lock:
            if whence == io.SEEK_SET:
                target = offset
            elif whence == io.SEEK_CUR:
                target = self._pos + offset
            elif whence == io.SEEK_END:
                target = self._data_start + self._decoder.known_length() + offset
            else:
                raise InvalidWhenceError(
                    f"invalid whence {whence!r}, must be SEEK_SET, SEEK_CUR or SEEK_END"
                )

            if target < self._data_start:
                target = self._data_start
            relative = target - self._data_start
            target = self._data_start + relative - relative % self._fmt.bytes_per_frame

            if target < self._pos:
                logger.debug(f"Rewinding decoder for backward seek {self._pos} -> {target}")
                self._decoder.rewind()
                self._pos = self._data_start

            if target > self._pos:
                self._seek_forward(target)

            self._pos = target
            return target

    def _seek_forward(self, target: int) -> None:
        if self._decoder.seekable:
            self._decoder.seek_forward((target - self._data_start) // self._fmt.bytes_per_frame)
            return

        # decoder cannot jump, decode and drop the bytes in between
        remaining = target - self._pos
        while remaining > 0:
            skipped = self._decoder.read(min(remaining, SKIP_CHUNK_SIZE))
            if not skipped:
                break
            remaining -= len(skipped)
