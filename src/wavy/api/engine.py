"""AudioSystem - main public API."""

from typing import Optional
from wavy.api.sound import Sound
from wavy.core.exceptions import EngineNotStartedError
from wavy.core.interfaces import IAudioBackend, IPlayer, ISoundSource
from wavy.core.models import PcmFormat
from wavy.core.registry import SoundRegistry
from wavy.services.engine_lifecycle import EngineLifecycleService
from wavy.services.loader import open_memory, open_streaming
from wavy.utils.log import get_logger

logger = get_logger(__name__)


class AudioSystem:
    """
    Audio system facade.

    Holds the PCM format every sound is decoded to and the output backend
    that plays them. Backend-level operations run in a dedicated worker
    thread; sounds talk to their own players directly.
    """

    def __init__(
        self, fmt: PcmFormat = PcmFormat(), backend: Optional[IAudioBackend] = None
    ):
        """
        Initialize AudioSystem.

        Args:
            fmt: Output PCM format (sample rate, channels, sample width).
            backend: Optional backend implementation (default: SoundDeviceBackend).
        """
        if backend is None:
            # Lazy import to avoid loading PortAudio on import
            from wavy.backends.sounddevice_backend import SoundDeviceBackend
            backend = SoundDeviceBackend()

        self._lifecycle_service = EngineLifecycleService(backend, fmt)
        self._registry = SoundRegistry()

    def start(self) -> None:
        """Open the output device."""
        self._lifecycle_service.start()

    def shutdown(self) -> None:
        """Close every open sound and release the output device."""
        if not self._lifecycle_service.is_started:
            return

        for sound in self._registry.get_all():
            try:
                sound.close()
            except Exception as e:
                logger.warning(f"Error closing {sound.path}: {e}")
        self._registry.clear()

        self._lifecycle_service.shutdown()

    @property
    def is_started(self) -> bool:
        return self._lifecycle_service.is_started

    @property
    def format(self) -> PcmFormat:
        """
        Get the output PCM format.

        Raises:
            EngineNotStartedError: If the system is not started.
        """
        if not self._lifecycle_service.is_started:
            raise EngineNotStartedError("Audio system must be started before opening sounds")
        return self._lifecycle_service.format

    @property
    def backend(self) -> IAudioBackend:
        return self._lifecycle_service.backend

    @property
    def registry(self) -> SoundRegistry:
        return self._registry

    @property
    def open_sounds(self) -> int:
        """Number of sounds opened and not yet closed."""
        return self._registry.count()

    def load_streaming(self, path: str) -> Sound:
        """
        Open a sound that is decoded from the file while it plays.

        Args:
            path: Path to an .mp3, .wav/.wave or .ogg file.

        Returns:
            Sound in streaming mode.

        Raises:
            EngineNotStartedError: If the system is not started.
            UnsupportedFormatError: If the extension is not supported.
            SoundLoadError: If the file cannot be opened or decoded.
        """
        return open_streaming(self, path)

    def load_memory(self, path: str) -> Sound:
        """
        Decode a whole sound file into memory.

        Args:
            path: Path to an .mp3, .wav/.wave or .ogg file.

        Returns:
            Sound in memory mode.

        Raises:
            EngineNotStartedError: If the system is not started.
            UnsupportedFormatError: If the extension is not supported.
            SoundLoadError: If the file cannot be read or decoded.
        """
        return open_memory(self, path)

    def create_player(self, source: ISoundSource) -> IPlayer:
        """Create a device player pulling from source (runs in the worker thread)."""
        worker = self._lifecycle_service.worker
        return worker.execute(lambda: self.backend.create_player(source))

    def pause_all(self) -> None:
        """Pause every sound at the device level."""
        self._lifecycle_service.worker.execute(self.backend.suspend)
        logger.debug("Paused all sounds")

    def resume_all(self) -> None:
        """Resume the sounds paused by pause_all()."""
        self._lifecycle_service.worker.execute(self.backend.resume)
        logger.debug("Resumed all sounds")

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.shutdown()
