"""Null backend for testing (no actual audio output).

Players consume their source in real time at the PCM byte rate, keeping a
small read-ahead buffer the way a device ring buffer does, so timing-based
behavior (waiting, remaining time, looping) works without a sound card.
"""

import threading
import time
from typing import List, Optional
from wavy.core.exceptions import BackendError
from wavy.core.interfaces import IAudioBackend, IPlayer, ISoundSource
from wavy.core.models import PcmFormat
from wavy.utils.log import get_logger

logger = get_logger(__name__)


class NullPlayer(IPlayer):
    """Null player implementation for testing."""

    def __init__(
        self,
        player_id: str,
        source: ISoundSource,
        fmt: PcmFormat,
        buffer_bytes: int,
        tick: float,
        suspended: Optional[threading.Event] = None,
    ):
        self.player_id = player_id
        self.source = source
        self.format = fmt
        self._buffer_bytes = max(buffer_bytes, fmt.bytes_per_frame)
        self._tick = tick
        # set by the backend while the device is suspended
        self._suspended = suspended if suspended is not None else threading.Event()

        self._cond = threading.Condition()
        # held across a whole fill so reset() never races a source read
        self._fill_lock = threading.Lock()
        self._buffer = bytearray()
        self._playing = False
        self._eof = False
        self._closed = False
        self._volume = 1.0
        self._generation = 0
        self._clock = 0.0
        self._thread: Optional[threading.Thread] = None

        # Counters for tests
        self.bytes_played = 0
        self.completed_count = 0
        self.close_count = 0

    def play(self) -> None:
        """Start playback."""
        with self._cond:
            if self._closed:
                raise BackendError(f"NullPlayer {self.player_id} is closed")
            if self._playing:
                return
            self._playing = True
            self._eof = False
            self._clock = time.monotonic()
            if self._thread is None:
                self._thread = threading.Thread(
                    target=self._run, name=f"wavy-{self.player_id}", daemon=True
                )
                self._thread.start()
            self._cond.notify_all()
        logger.debug(f"NullPlayer {self.player_id}: playing")

    def pause(self) -> None:
        """Pause playback."""
        with self._cond:
            self._playing = False
            self._cond.notify_all()
        logger.debug(f"NullPlayer {self.player_id}: paused")

    def is_playing(self) -> bool:
        with self._cond:
            return self._playing

    def set_volume(self, volume: float) -> None:
        """Set volume."""
        self._volume = volume
        logger.debug(f"NullPlayer {self.player_id}: volume={volume}")

    def volume(self) -> float:
        return self._volume

    def unplayed_buffer_bytes(self) -> int:
        with self._cond:
            return len(self._buffer)

    def reset(self) -> None:
        """Pause and drop the read-ahead buffer."""
        with self._fill_lock, self._cond:
            self._playing = False
            self._eof = False
            self._buffer.clear()
            self._generation += 1
            self._cond.notify_all()
        logger.debug(f"NullPlayer {self.player_id}: reset")

    def close(self) -> None:
        """Close the player and stop its playback thread."""
        with self._cond:
            self.close_count += 1
            if self._closed:
                raise BackendError(f"NullPlayer {self.player_id} already closed")
            self._closed = True
            self._playing = False
            self._buffer.clear()
            thread = self._thread
            self._cond.notify_all()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)
        logger.debug(f"NullPlayer {self.player_id}: closed")

    @property
    def is_closed(self) -> bool:
        return self._closed

    def _fill(self) -> None:
        """Top up the read-ahead buffer from the source."""
        with self._fill_lock:
            with self._cond:
                wanted = self._buffer_bytes - len(self._buffer)
                if wanted <= 0 or self._eof or not self._playing:
                    return
                generation = self._generation

            # Read outside the condition so play state stays queryable
            chunk = self.source.read(wanted)

            with self._cond:
                if generation != self._generation or self._closed:
                    return
                if chunk:
                    self._buffer += chunk
                else:
                    self._eof = True

    def _run(self) -> None:
        bytes_per_second = self.format.bytes_per_second
        frame = self.format.bytes_per_frame
        while True:
            self._fill()
            with self._cond:
                if self._closed or not self._playing:
                    self._thread = None
                    return

                now = time.monotonic()
                if self._suspended.is_set():
                    # device frozen: nothing is played and no time is owed
                    self._clock = now
                    self._cond.wait(self._tick)
                    continue

                due = int((now - self._clock) * bytes_per_second)
                due -= due % frame
                if due > 0:
                    self._clock += due / bytes_per_second
                    played = min(due, len(self._buffer))
                    del self._buffer[:played]
                    self.bytes_played += played

                if self._eof and not self._buffer:
                    self._playing = False
                    self.completed_count += 1
                    self._thread = None
                    logger.debug(f"NullPlayer {self.player_id}: drained")
                    return

                self._cond.wait(self._tick)


class NullBackend(IAudioBackend):
    """Null backend implementation for testing."""

    def __init__(self, buffer_ms: int = 50, tick: float = 0.005):
        self._buffer_ms = buffer_ms
        self._tick = tick
        self._format: Optional[PcmFormat] = None
        self._players: List[NullPlayer] = []
        self._suspended = threading.Event()
        self._next_player_id = 0
        self._lock = threading.Lock()

    @property
    def players(self) -> List[NullPlayer]:
        with self._lock:
            return list(self._players)

    def initialize(self, fmt: PcmFormat) -> None:
        """Initialize backend."""
        if self._format is not None:
            return
        self._format = fmt
        logger.info(
            f"NullBackend initialized: {fmt.channels}ch, {fmt.sample_rate}Hz, "
            f"{fmt.bits_per_sample}bit"
        )

    def create_player(self, source: ISoundSource) -> NullPlayer:
        """Create a player."""
        if self._format is None:
            raise BackendError("NullBackend not initialized")
        buffer_bytes = self._format.bytes_per_second * self._buffer_ms // 1000
        buffer_bytes -= buffer_bytes % self._format.bytes_per_frame
        with self._lock:
            player_id = f"null_{self._next_player_id}"
            self._next_player_id += 1
            player = NullPlayer(
                player_id, source, self._format, buffer_bytes, self._tick, self._suspended
            )
            self._players.append(player)
        logger.debug(f"Created NullPlayer {player_id}")
        return player

    @property
    def is_suspended(self) -> bool:
        return self._suspended.is_set()

    def suspend(self) -> None:
        """Freeze output. Players keep their play state and report it unchanged."""
        self._suspended.set()
        logger.debug("NullBackend: suspended")

    def resume(self) -> None:
        """Unfreeze output; players that were playing carry on where they were."""
        self._suspended.clear()
        logger.debug("NullBackend: resumed")

    def shutdown(self) -> None:
        """Shutdown backend."""
        with self._lock:
            players, self._players = self._players, []
        self._suspended.clear()
        for player in players:
            if not player.is_closed:
                player.close()
        self._format = None
        logger.info("NullBackend shut down")
