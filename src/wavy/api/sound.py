"""Sound - playback control over one device player and one PCM source."""

import io
import threading
from dataclasses import replace
from typing import TYPE_CHECKING, BinaryIO, Optional, Union
from wavy.concurrency.loop_task import LoopTask
from wavy.core.exceptions import CloseError, SoundClosedError, SoundModeError
from wavy.core.interfaces import IPlayer
from wavy.core.models import PcmFormat, SoundInfo, SoundMode
from wavy.core.timing import align_to_frame, byte_count_from_play_time, play_time_from_byte_count
from wavy.sources.buffer import SoundBuffer
from wavy.sources.stream import DecoderStream
from wavy.utils.log import get_logger
from wavy.utils.validate import clamp01, require_volume

if TYPE_CHECKING:
    from wavy.api.engine import AudioSystem

logger = get_logger(__name__)

SoundSource = Union[DecoderStream, SoundBuffer]

WAIT_SLICES = 25
MIN_WAIT_STEP = 0.001


class Sound:
    """
    A loaded sound with play/pause/loop/seek/volume controls.

    The source is either a DecoderStream (streaming mode) or a SoundBuffer
    (memory mode); the device player pulls PCM from it on its own thread.
    Looping runs in a LoopTask; the looping flag and the check-then-replay
    step are guarded by one lock so pause() from any thread always wins.

    Sounds are created by AudioSystem.load_streaming/load_memory, copy() and
    clip().
    """

    def __init__(
        self,
        system: "AudioSystem",
        player: IPlayer,
        source: SoundSource,
        info: SoundInfo,
        path: str,
        file: Optional[BinaryIO] = None,
    ):
        """
        Initialize Sound.

        Args:
            system: Audio system that opened the sound.
            player: Device player pulling from source.
            source: PCM source, matching info.mode.
            info: Static sound information.
            path: Path to the source file.
            file: Open file being streamed (streaming mode only).
        """
        self._system = system
        self._format: PcmFormat = system.format
        self._player = player
        self._source: Optional[SoundSource] = source
        self._info = info
        self._path = path
        self._file = file

        self._lock = threading.RLock()
        self._state_changed = threading.Condition(self._lock)
        self._looping = False
        self._loop_task: Optional[LoopTask] = None
        # bumped by pause() and close() to release waiters
        self._interrupts = 0

    def __repr__(self) -> str:
        state = "closed" if self.is_closed else ("looping" if self._looping else "open")
        return f"Sound({self._path!r}, {self._info.mode.value}, {state})"

    @property
    def info(self) -> SoundInfo:
        """Get static sound information."""
        return self._info

    @property
    def path(self) -> str:
        """Get source file path."""
        return self._path

    @property
    def mode(self) -> SoundMode:
        return self._info.mode

    @property
    def player(self) -> IPlayer:
        """Get the device player."""
        return self._player

    @property
    def source(self) -> Optional[SoundSource]:
        """Get the PCM source, None once closed."""
        return self._source

    @property
    def is_closed(self) -> bool:
        return self._source is None

    @property
    def is_looping(self) -> bool:
        return self._looping

    # Playback

    def is_playing(self) -> bool:
        if self.is_closed:
            return False
        return self._player.is_playing()

    def play_async(self) -> None:
        """Start playing in the background and return. No-op if already playing."""
        with self._lock:
            if self.is_closed:
                raise SoundClosedError(f"{self._path} is closed")
            if not self._player.is_playing():
                self._player.play()

    def play_sync(self) -> None:
        """Play and block until the sound finishes."""
        self.play_async()
        self.wait()

    def pause(self) -> None:
        """Pause playback and stop looping. Legal in every state."""
        with self._lock:
            self._looping = False
            self._interrupts += 1
            if not self.is_closed:
                self._player.pause()
            self._state_changed.notify_all()
        logger.debug(f"Paused {self._path}")

    def wait(self) -> None:
        """
        Block until the sound finishes playing. Returns at once if not playing.

        Finished means the player reports not playing and its unplayed buffer
        is empty. Sleeps in slices of 1/25 of the remaining time so a pause
        during the wait is noticed quickly, then polls every millisecond for
        the tail. pause() and close() end the wait, buffered bytes or not.
        """
        with self._lock:
            interrupts = self._interrupts
        if not self.is_playing():
            return

        step = max(self.remaining_time() / WAIT_SLICES, MIN_WAIT_STEP)
        while self.is_playing() and self.remaining_time() > step:
            self._sleep(step)

        while self._still_draining(interrupts):
            self._sleep(MIN_WAIT_STEP)

    def _still_draining(self, interrupts: int) -> bool:
        if self.is_playing():
            return True
        with self._lock:
            if self._interrupts != interrupts or self.is_closed:
                return False
            return self._player.unplayed_buffer_bytes() > 0

    def _sleep(self, seconds: float) -> None:
        # Condition.wait releases the lock while sleeping
        with self._state_changed:
            self._state_changed.wait(seconds)

    # Looping

    def loop_async(self, times: int) -> None:
        """
        Play the sound times times in the background.

        If times < 0 the sound loops until paused; 0 does nothing. A sound
        that is already playing or looping is paused first and its previous
        loop is waited for, so only one loop task exists per sound.
        """
        if times == 0:
            return

        with self._lock:
            previous = self._loop_task
        if self.is_playing() or previous is not None:
            self.pause()
            if previous is not None:
                previous.join()
            else:
                self.wait()

        with self._lock:
            self.play_async()
            self._looping = True
            task = LoopTask(
                times,
                wait=self.wait,
                replay=self._replay_if_looping,
                on_exit=self._loop_finished,
                name=f"wavy-loop-{id(self):x}",
            )
            self._loop_task = task
        task.start()
        logger.debug(f"Looping {self._path} {'forever' if times < 0 else f'{times} times'}")

    def wait_loop(self) -> None:
        """Block until the sound stops looping."""
        while self._looping:
            with self._lock:
                task = self._loop_task
            if task is None:
                break
            task.join()

    def _replay_if_looping(self) -> bool:
        with self._lock:
            if not self._looping or self.is_closed:
                return False
            self.seek_to_percent(0)
            self._player.play()
            return True

    def _loop_finished(self, task: LoopTask) -> None:
        with self._lock:
            if self._loop_task is task:
                self._loop_task = None
                self._looping = False
            self._state_changed.notify_all()

    # Seeking

    def seek_to_percent(self, percent: float) -> None:
        """
        Move the play position to a fraction of the total length.

        percent is clamped to [0, 1]. Can be used while playing.
        """
        offset = int(self._info.total_size * clamp01(percent))
        self._seek_bytes(offset)

    def seek_to_time(self, seconds: float) -> None:
        """
        Move the play position to the given time in seconds.

        The time is clamped to [0, total_time]. Can be used while playing.
        """
        offset = byte_count_from_play_time(self._format, seconds)
        offset = min(max(offset, 0), self._info.total_size)
        self._seek_bytes(offset)

    def _seek_bytes(self, offset: int) -> None:
        with self._lock:
            source = self._source
            if source is None:
                raise SoundClosedError(f"{self._path} is closed")
            # drop stale device buffering so the next play starts at the new position
            if not self._player.is_playing():
                self._player.reset()
            source.seek(source.data_start + align_to_frame(self._format, offset), io.SEEK_SET)

    # Volume

    def set_volume(self, volume: float) -> None:
        """
        Set the volume, between 0 and 1 inclusive. The default volume is 1.

        Raises:
            ValueError: If volume is outside [0, 1].
        """
        self._player.set_volume(require_volume(volume))

    @property
    def volume(self) -> float:
        return self._player.volume()

    # Time

    @property
    def total_time(self) -> float:
        """Seconds needed to play the whole sound. Valid after close."""
        return play_time_from_byte_count(self._format, self._info.total_size)

    def remaining_time(self) -> float:
        """
        Seconds left to play from the current position, 0 once closed.

        Accounts for bytes the player has buffered but not played yet.
        """
        source = self._source
        if source is None:
            return 0.0
        played = source.tell() - source.data_start - self._player.unplayed_buffer_bytes()
        return play_time_from_byte_count(self._format, max(self._info.total_size - played, 0))

    # Derived sounds

    def copy(self) -> "Sound":
        """
        Return a new sound over the same decoded bytes with independent controls.

        The bytes are shared, so this is cheap. The copy starts at position 0
        with this sound's volume.

        Raises:
            SoundModeError: If the sound is not in memory mode.
        """
        buffer = self._memory_buffer("copy")
        return self._derive(buffer.copy(), self._info)

    def clip(self, from_percent: float, to_percent: float) -> "Sound":
        """
        Like copy() but the new sound only covers [from_percent, to_percent).

        Both fractions are clamped to [0, 1].

        Raises:
            SoundModeError: If the sound is not in memory mode.
        """
        buffer = self._memory_buffer("clip").clip(
            from_percent, to_percent, align=self._format.bytes_per_frame
        )
        return self._derive(buffer, replace(self._info, total_size=len(buffer)))

    def _memory_buffer(self, operation: str) -> SoundBuffer:
        source = self._source
        if self._info.mode != SoundMode.MEMORY:
            raise SoundModeError(
                f"only in-memory sounds can {operation}, open {self._path} with "
                f"load_memory or load it again with load_streaming"
            )
        if source is None:
            raise SoundClosedError(f"{self._path} is closed")
        return source

    def _derive(self, buffer: SoundBuffer, info: SoundInfo) -> "Sound":
        player = self._system.create_player(buffer)
        player.set_volume(self.volume)
        sound = Sound(self._system, player, buffer, info, self._path)
        self._system.registry.register(sound)
        return sound

    # Lifecycle

    def close(self) -> None:
        """
        Release the streamed file and the device player.

        Repeated calls are no-ops.

        Raises:
            CloseError: If both the file and the player fail to close.
            Exception: The single error when only one of them fails.
        """
        with self._lock:
            if self._source is None:
                return
            self._looping = False
            self._interrupts += 1
            source, self._source = self._source, None
            self._state_changed.notify_all()

        file_error: Optional[Exception] = None
        player_error: Optional[Exception] = None

        try:
            try:
                if isinstance(source, DecoderStream):
                    source.decoder.close()
            finally:
                if self._file is not None:
                    self._file.close()
        except Exception as e:
            file_error = e

        try:
            self._player.close()
        except Exception as e:
            player_error = e

        self._system.registry.remove(self)
        logger.debug(f"Closed {self._path}")

        if file_error is not None and player_error is not None:
            raise CloseError(file_error, player_error) from player_error
        if player_error is not None:
            raise player_error
        if file_error is not None:
            raise file_error

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
