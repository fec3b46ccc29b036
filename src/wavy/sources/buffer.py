"""In-memory random-access PCM buffer."""

import io
import threading
from typing import Union
from wavy.core.exceptions import InvalidWhenceError, NegativeSeekPositionError
from wavy.utils.validate import clamp01

BufferData = Union[bytes, bytearray, memoryview]


class SoundBuffer:
    """
    Read/seek cursor over an immutable PCM payload.

    Several buffers can share one payload, each with its own position:
    copy() and clip() never copy bytes, they only create new views.
    """

    data_start = 0

    def __init__(self, data: BufferData):
        self._data = memoryview(data).cast("B")
        self._pos = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._data)

    @property
    def data(self) -> memoryview:
        """Read-only view over the bytes this buffer covers."""
        return self._data.toreadonly()

    def read(self, size: int = -1) -> bytes:
        """
        Read up to size bytes (all remaining bytes if size < 0).

        Returns b"" only when nothing could be read, i.e. the position is at
        or past the end of the data.
        """
        with self._lock:
            if self._pos >= len(self._data):
                return b""
            end = len(self._data) if size < 0 else self._pos + size
            chunk = self._data[self._pos:end].tobytes()
            self._pos += len(chunk)
            return chunk

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        """
        Move the read position and return it.

        Positions at or past the end are allowed; reads then return b"".

        Raises:
            InvalidWhenceError: If whence is not SEEK_SET, SEEK_CUR or SEEK_END.
            NegativeSeekPositionError: If the resulting position is negative.
                The position is left unchanged.
        """
        with self._lock:
            if whence == io.SEEK_SET:
                new_pos = offset
            elif whence == io.SEEK_CUR:
                new_pos = self._pos + offset
            elif whence == io.SEEK_END:
                new_pos = len(self._data) + offset
            else:
                raise InvalidWhenceError(
                    f"invalid whence {whence!r}, must be SEEK_SET, SEEK_CUR or SEEK_END"
                )

            if new_pos < 0:
                raise NegativeSeekPositionError(f"negative seek position: {new_pos}")

            self._pos = new_pos
            return self._pos

    def tell(self) -> int:
        with self._lock:
            return self._pos

    def copy(self) -> "SoundBuffer":
        """Return a buffer over the same bytes with its position at 0."""
        return SoundBuffer(self._data)

    def clip(
        self, start_fraction: float, end_fraction: float, align: int = 1
    ) -> "SoundBuffer":
        """
        Return a buffer over a sub-range of this buffer's bytes.

        Fractions are clamped to [0, 1] and taken against this buffer's
        length. Both ends are rounded down to a multiple of align (the frame
        size, for PCM). An end before the start gives an empty buffer.
        """
        size = len(self._data)
        start = int(size * clamp01(start_fraction))
        end = int(size * clamp01(end_fraction))
        start -= start % align
        end -= end % align
        return SoundBuffer(self._data[start:max(start, end)])
