"""sounddevice (PortAudio) backend."""

import threading
from typing import List, Optional
import numpy as np
import sounddevice as sd
from wavy.core.exceptions import BackendError
from wavy.core.interfaces import IAudioBackend, IPlayer, ISoundSource
from wavy.core.models import PcmFormat
from wavy.core.pcm import f32_to_pcm16, pcm16_to_f32
from wavy.utils.log import get_logger

logger = get_logger(__name__)


class SoundDevicePlayer(IPlayer):
    """
    Player backed by one PortAudio output stream.

    The stream runs from the first play() until close() and the callback
    outputs silence while paused or while the backend is suspended. Bytes
    pulled from the source but not yet handed to the device are kept as the
    unplayed buffer.
    """

    def __init__(
        self,
        source: ISoundSource,
        fmt: PcmFormat,
        blocksize: int,
        device: Optional[int] = None,
        suspended: Optional[threading.Event] = None,
    ):
        self._source = source
        # set by the backend while the device is suspended
        self._suspended = suspended if suspended is not None else threading.Event()
        self._fmt = fmt
        self._lock = threading.Lock()
        self._pending = b""
        self._playing = False
        self._closed = False
        self._volume = 1.0
        self._silence = b"\x80" if fmt.bytes_per_sample == 1 else b"\x00"
        try:
            self._stream = sd.RawOutputStream(
                samplerate=fmt.sample_rate,
                channels=fmt.channels,
                dtype="uint8" if fmt.bytes_per_sample == 1 else "int16",
                blocksize=blocksize,
                device=device,
                callback=self._callback,
            )
        except sd.PortAudioError as e:
            raise BackendError(f"Failed to open output stream: {e}") from e

    def _callback(self, outdata, frames, time_info, status) -> None:
        needed = len(outdata)
        with self._lock:
            if not self._playing or self._suspended.is_set():
                outdata[:] = self._silence * needed
                return

            data = self._pending
            exhausted = False
            while len(data) < needed:
                chunk = self._source.read(needed - len(data))
                if not chunk:
                    exhausted = True
                    break
                data += chunk
            out, self._pending = data[:needed], data[needed:]
            if exhausted and not self._pending:
                self._playing = False
            volume = self._volume

        out = self._apply_volume(out, volume)
        outdata[:len(out)] = out
        if len(out) < needed:
            outdata[len(out):] = self._silence * (needed - len(out))

    def _apply_volume(self, data: bytes, volume: float) -> bytes:
        if volume >= 1.0 or not data:
            return data
        if self._fmt.bytes_per_sample == 1:
            samples = np.frombuffer(data, dtype=np.uint8).astype(np.float32) - 128.0
            return (samples * volume + 128.0).astype(np.uint8).tobytes()
        return f32_to_pcm16(pcm16_to_f32(data) * volume)

    def play(self) -> None:
        with self._lock:
            if self._closed:
                raise BackendError("Player is closed")
            self._playing = True
        if not self._stream.active:
            try:
                self._stream.start()
            except sd.PortAudioError as e:
                raise BackendError(f"Failed to start output stream: {e}") from e

    def pause(self) -> None:
        with self._lock:
            self._playing = False

    def is_playing(self) -> bool:
        with self._lock:
            return self._playing

    def set_volume(self, volume: float) -> None:
        with self._lock:
            self._volume = volume

    def volume(self) -> float:
        return self._volume

    def unplayed_buffer_bytes(self) -> int:
        with self._lock:
            return len(self._pending)

    def reset(self) -> None:
        with self._lock:
            self._playing = False
            self._pending = b""

    def close(self) -> None:
        with self._lock:
            if self._closed:
                raise BackendError("Player already closed")
            self._closed = True
            self._playing = False
            self._pending = b""
        try:
            self._stream.abort()
            self._stream.close()
        except sd.PortAudioError as e:
            raise BackendError(f"Failed to close output stream: {e}") from e

    @property
    def is_closed(self) -> bool:
        return self._closed


class SoundDeviceBackend(IAudioBackend):
    """Output through the default (or given) PortAudio device."""

    def __init__(self, blocksize: int = 1024, device: Optional[int] = None):
        self._blocksize = blocksize
        self._device = device
        self._format: Optional[PcmFormat] = None
        self._players: List[SoundDevicePlayer] = []
        self._suspended = threading.Event()
        self._lock = threading.Lock()

    def initialize(self, fmt: PcmFormat) -> None:
        """Check the output device accepts the format (called in worker thread)."""
        if self._format is not None:
            return
        try:
            sd.check_output_settings(
                device=self._device,
                channels=fmt.channels,
                dtype="uint8" if fmt.bytes_per_sample == 1 else "int16",
                samplerate=fmt.sample_rate,
            )
        except (sd.PortAudioError, ValueError) as e:
            raise BackendError(f"Output device rejected format: {e}") from e
        self._format = fmt
        logger.info(
            f"SoundDeviceBackend initialized: {fmt.channels}ch, {fmt.sample_rate}Hz, "
            f"{fmt.bits_per_sample}bit"
        )

    def create_player(self, source: ISoundSource) -> SoundDevicePlayer:
        if self._format is None:
            raise BackendError("SoundDeviceBackend not initialized")
        player = SoundDevicePlayer(
            source, self._format, self._blocksize, self._device, self._suspended
        )
        with self._lock:
            self._players = [p for p in self._players if not p.is_closed]
            self._players.append(player)
        return player

    def suspend(self) -> None:
        """Silence every player without changing its play state."""
        self._suspended.set()
        logger.debug("SoundDeviceBackend: suspended")

    def resume(self) -> None:
        self._suspended.clear()
        logger.debug("SoundDeviceBackend: resumed")

    def shutdown(self) -> None:
        with self._lock:
            players, self._players = self._players, []
        self._suspended.clear()
        for player in players:
            if not player.is_closed:
                try:
                    player.close()
                except BackendError as e:
                    logger.warning(f"Error closing player during shutdown: {e}")
        self._format = None
        logger.info("SoundDeviceBackend shut down")
