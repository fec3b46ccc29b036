"""Protocol interfaces for decoders, sound sources and output backends."""

from typing import BinaryIO, Callable, Optional, Protocol, TypeVar
from wavy.core.models import PcmFormat, SoundType

T = TypeVar("T")


class ISoundSource(Protocol):
    """A readable, seekable PCM byte source that a player pulls from."""

    @property
    def data_start(self) -> int:
        """Lowest addressable position (first byte of audio data)."""
        ...

    def read(self, size: int) -> bytes:
        """Read up to size bytes. Returns b"" at end of stream."""
        ...

    def seek(self, offset: int, whence: int = 0) -> int:
        """Move the read position and return the new position."""
        ...

    def tell(self) -> int:
        """Return the current read position."""
        ...


class IDecoder(Protocol):
    """Interface for a forward-only PCM decoder."""

    @property
    def data_start(self) -> int:
        """Position of the first PCM byte in the decoder's byte space."""
        ...

    @property
    def seekable(self) -> bool:
        """Whether seek_forward() is supported."""
        ...

    def read(self, size: int) -> bytes:
        """Decode up to size bytes of canonical PCM. Returns b"" when exhausted."""
        ...

    def known_length(self) -> int:
        """Length of the decoded PCM in bytes."""
        ...

    def seek_forward(self, frame_index: int) -> None:
        """Move to the given frame, counted from the start of audio data."""
        ...

    def rewind(self) -> None:
        """Go back to the first frame of audio data."""
        ...

    def close(self) -> None:
        """Release decoder resources (not the underlying file)."""
        ...


class IAudioFormat(Protocol):
    """Interface for a container format handler."""

    @property
    def sound_type(self) -> SoundType:
        ...

    @property
    def extensions(self) -> tuple[str, ...]:
        """
        File extensions supported by this format (e.g., ('.wav', '.wave')).

        Returns:
            Tuple of supported file extensions (lowercase, with dot).
        """
        ...

    def open_decoder(self, stream: BinaryIO, fmt: PcmFormat) -> IDecoder:
        """
        Create a decoder reading from an open binary stream.

        Args:
            stream: Binary file object positioned at the start of the file.
            fmt: Output PCM format of the audio system.

        Returns:
            Decoder producing canonical PCM bytes.

        Raises:
            DecoderError: If the stream cannot be decoded.
        """
        ...


class IPlayer(Protocol):
    """Interface for a device player pulling PCM from one source."""

    def play(self) -> None:
        """Start or resume pulling and playing from the source."""
        ...

    def pause(self) -> None:
        """Pause playback, keeping buffered data."""
        ...

    def is_playing(self) -> bool:
        ...

    def set_volume(self, volume: float) -> None:
        """Set volume (0.0 to 1.0)."""
        ...

    def volume(self) -> float:
        ...

    def unplayed_buffer_bytes(self) -> int:
        """Bytes read from the source but not yet played."""
        ...

    def reset(self) -> None:
        """Pause and drop buffered data so the next play reads the source afresh."""
        ...

    def close(self) -> None:
        """Release the player."""
        ...


class IAudioBackend(Protocol):
    """Interface for an output device backend."""

    def initialize(self, fmt: PcmFormat) -> None:
        """Open the output device with the given format (called in worker thread)."""
        ...

    def create_player(self, source: ISoundSource) -> IPlayer:
        """Create a player that pulls from source."""
        ...

    def suspend(self) -> None:
        """
        Freeze the device output.

        Players keep reporting their own play state and hold their position,
        so waits and loops stay blocked until resume().
        """
        ...

    def resume(self) -> None:
        """Unfreeze the device output."""
        ...

    def shutdown(self) -> None:
        """Shutdown the backend and free all resources."""
        ...


class IBackendWorker(Protocol):
    """Interface for backend worker thread communication."""

    def start(self) -> None:
        """Start the worker thread."""
        ...

    def stop(self) -> None:
        """Stop the worker thread (blocks until done)."""
        ...

    def execute(self, command: Callable[[], T], timeout: Optional[float] = None) -> T:
        """Execute a command in the worker thread and return result."""
        ...
