"""Tests for Sound playback control, driven through NullBackend."""

import threading
import time
import pytest
from wavy.api.sound import Sound
from wavy.core.exceptions import (
    BackendError,
    CloseError,
    DecoderError,
    SoundClosedError,
    SoundModeError,
)
from wavy.core.models import SoundInfo, SoundMode, SoundType
from wavy.sources.buffer import SoundBuffer
from wavy.sources.stream import DecoderStream

TOTAL_SIZE = 8820 * 4  # 0.2 s of 44.1 kHz stereo 16-bit


@pytest.fixture(params=["memory", "streaming"])
def sound(request, system, wav_path):
    if request.param == "memory":
        snd = system.load_memory(wav_path)
    else:
        snd = system.load_streaming(wav_path)
    yield snd
    snd.close()


@pytest.fixture
def memory_sound(system, wav_path):
    snd = system.load_memory(wav_path)
    yield snd
    snd.close()


def test_sound_info(sound):
    assert sound.info.sound_type == SoundType.WAV
    assert sound.info.total_size == TOTAL_SIZE
    assert sound.total_time == pytest.approx(0.2)
    assert sound.remaining_time() == pytest.approx(0.2)
    assert not sound.is_playing()


def test_play_sync_plays_to_the_end(sound):
    start = time.monotonic()
    sound.play_sync()
    elapsed = time.monotonic() - start

    assert elapsed >= 0.15
    assert not sound.is_playing()
    assert sound.remaining_time() == 0.0
    assert sound.player.completed_count == 1
    assert sound.player.bytes_played == TOTAL_SIZE


def test_play_async_returns_immediately(sound):
    sound.play_async()

    assert sound.is_playing()
    assert 0.1 < sound.remaining_time() <= 0.2

    sound.wait()
    assert not sound.is_playing()


def test_play_async_twice_is_noop(memory_sound):
    memory_sound.play_async()
    memory_sound.play_async()
    memory_sound.wait()

    assert memory_sound.player.completed_count == 1


def test_wait_returns_at_once_when_not_playing(memory_sound):
    start = time.monotonic()
    memory_sound.wait()
    assert time.monotonic() - start < 0.05


def test_pause_and_resume(sound):
    sound.play_async()
    time.sleep(0.05)
    sound.pause()

    assert not sound.is_playing()
    remaining = sound.remaining_time()
    assert 0.0 < remaining < 0.2

    time.sleep(0.05)
    assert sound.remaining_time() == pytest.approx(remaining, abs=0.001)

    sound.play_sync()
    assert sound.remaining_time() == 0.0
    assert sound.player.completed_count == 1


def test_pause_is_legal_in_every_state(memory_sound):
    memory_sound.pause()
    memory_sound.close()
    memory_sound.pause()


def test_seek_to_percent(sound):
    sound.seek_to_percent(0.5)
    assert sound.remaining_time() == pytest.approx(0.1, abs=0.001)

    sound.seek_to_percent(0)
    assert sound.remaining_time() == pytest.approx(0.2, abs=0.001)
    assert sound.source.tell() == sound.source.data_start


def test_seek_to_percent_clamps(sound):
    sound.seek_to_percent(7.0)
    assert sound.remaining_time() == 0.0

    sound.seek_to_percent(-1.0)
    assert sound.remaining_time() == pytest.approx(0.2)


def test_seek_to_time(sound):
    sound.seek_to_time(0.05)
    assert sound.remaining_time() == pytest.approx(0.15, abs=0.001)

    sound.seek_to_time(10.0)
    assert sound.remaining_time() == 0.0

    sound.seek_to_time(-1.0)
    assert sound.remaining_time() == pytest.approx(0.2)


def test_seek_stays_frame_aligned(sound):
    sound.seek_to_percent(0.3333)
    position = sound.source.tell() - sound.source.data_start
    assert position % 4 == 0


def test_seek_after_finish_replays(sound):
    sound.play_sync()
    sound.seek_to_percent(0.75)
    sound.play_sync()

    assert sound.player.completed_count == 2
    assert sound.player.bytes_played == TOTAL_SIZE + TOTAL_SIZE // 4


def test_seek_while_playing(sound):
    sound.play_async()
    sound.seek_to_percent(0.9)

    start = time.monotonic()
    sound.wait()
    assert time.monotonic() - start < 0.15


def test_loop_plays_given_number_of_times(sound):
    start = time.monotonic()
    sound.loop_async(3)
    assert sound.is_looping

    sound.wait_loop()

    assert time.monotonic() - start >= 0.5
    assert not sound.is_looping
    assert not sound.is_playing()
    assert sound.player.completed_count == 3


def test_loop_once_is_a_single_play(memory_sound):
    memory_sound.loop_async(1)
    memory_sound.wait_loop()

    assert memory_sound.player.completed_count == 1


def test_loop_zero_times_does_nothing(memory_sound):
    memory_sound.loop_async(0)

    assert not memory_sound.is_playing()
    assert not memory_sound.is_looping


def test_pause_stops_infinite_loop(sound):
    sound.loop_async(-1)
    time.sleep(0.3)

    sound.pause()
    start = time.monotonic()
    sound.wait_loop()

    assert time.monotonic() - start < 0.1
    assert not sound.is_looping
    assert not sound.is_playing()
    assert sound.player.completed_count >= 1


def test_pause_from_another_thread_stops_loop(memory_sound):
    memory_sound.loop_async(-1)
    threading.Timer(0.1, memory_sound.pause).start()

    memory_sound.wait_loop()

    assert not memory_sound.is_playing()


def test_new_loop_replaces_previous(memory_sound):
    memory_sound.loop_async(-1)
    time.sleep(0.05)

    memory_sound.loop_async(2)
    memory_sound.wait_loop()

    assert memory_sound.player.completed_count == 2
    assert not memory_sound.is_looping


def test_close_stops_loop(memory_sound):
    memory_sound.loop_async(-1)
    time.sleep(0.05)

    memory_sound.close()
    start = time.monotonic()
    memory_sound.wait_loop()

    assert time.monotonic() - start < 0.1
    assert not memory_sound.is_looping


def test_set_volume(memory_sound):
    assert memory_sound.volume == 1.0

    memory_sound.set_volume(0.25)
    assert memory_sound.volume == 0.25
    assert memory_sound.player.volume() == 0.25

    memory_sound.set_volume(0)
    assert memory_sound.volume == 0.0


@pytest.mark.parametrize("volume", [-0.1, 1.01, 5])
def test_set_volume_out_of_range(memory_sound, volume):
    memory_sound.set_volume(0.5)

    with pytest.raises(ValueError):
        memory_sound.set_volume(volume)

    assert memory_sound.volume == 0.5


def test_close_is_idempotent(sound, system):
    opened = system.open_sounds
    sound.close()
    sound.close()

    assert sound.is_closed
    assert sound.player.close_count == 1
    assert system.open_sounds == opened - 1


def test_closed_sound(sound):
    sound.close()

    assert sound.remaining_time() == 0.0
    assert sound.total_time == pytest.approx(0.2)
    assert not sound.is_playing()
    with pytest.raises(SoundClosedError):
        sound.play_async()
    with pytest.raises(SoundClosedError):
        sound.seek_to_percent(0.5)


def test_streaming_close_closes_file(system, wav_path):
    sound = system.load_streaming(wav_path)
    file = sound._file

    sound.close()

    assert file.closed


def test_context_manager(system, wav_path):
    with system.load_memory(wav_path) as sound:
        sound.seek_to_percent(0.5)
    assert sound.is_closed


def test_copy_is_independent(memory_sound, system):
    memory_sound.set_volume(0.5)

    copy = memory_sound.copy()

    assert copy is not memory_sound
    assert copy.player is not memory_sound.player
    assert copy.info == memory_sound.info
    assert copy.volume == 0.5
    assert system.open_sounds == 2

    memory_sound.seek_to_percent(0.5)
    assert copy.remaining_time() == pytest.approx(0.2)

    copy.play_sync()
    assert copy.remaining_time() == 0.0
    assert memory_sound.remaining_time() == pytest.approx(0.1, abs=0.001)
    assert memory_sound.player.completed_count == 0

    copy.close()
    assert not memory_sound.is_closed


def test_copy_survives_original_close(memory_sound):
    copy = memory_sound.copy()
    memory_sound.close()

    copy.play_sync()

    assert copy.player.bytes_played == TOTAL_SIZE
    copy.close()


def test_clip(memory_sound):
    clip = memory_sound.clip(0.25, 0.75)

    assert clip.info.total_size == TOTAL_SIZE // 2
    assert clip.info.sound_type == SoundType.WAV
    assert clip.mode == SoundMode.MEMORY
    assert clip.total_time == pytest.approx(0.1)

    clip.play_sync()
    assert clip.player.bytes_played == TOTAL_SIZE // 2
    expected = memory_sound.source.data[TOTAL_SIZE // 4:TOTAL_SIZE * 3 // 4]
    assert bytes(clip.source.data) == bytes(expected)
    clip.close()


def test_clip_reversed_range_is_empty(memory_sound):
    clip = memory_sound.clip(0.9, 0.1)

    assert clip.info.total_size == 0
    assert clip.total_time == 0.0
    clip.play_sync()
    clip.close()


def test_copy_and_clip_need_memory_mode(system, wav_path):
    sound = system.load_streaming(wav_path)

    with pytest.raises(SoundModeError):
        sound.copy()
    with pytest.raises(SoundModeError):
        sound.clip(0.0, 0.5)

    sound.close()


def test_copy_after_close(memory_sound):
    memory_sound.close()

    with pytest.raises(SoundClosedError):
        memory_sound.copy()


class FailingPlayer:
    """Player whose close() fails."""

    def __init__(self, error=None):
        self.error = error
        self.close_count = 0

    def play(self):
        pass

    def pause(self):
        pass

    def is_playing(self):
        return False

    def set_volume(self, volume):
        pass

    def volume(self):
        return 1.0

    def unplayed_buffer_bytes(self):
        return 0

    def reset(self):
        pass

    def close(self):
        self.close_count += 1
        if self.error is not None:
            raise self.error


class FailingFile:
    def __init__(self, error=None):
        self.error = error
        self.closed = False

    def close(self):
        self.closed = True
        if self.error is not None:
            raise self.error


class FailingDecoder:
    """Decoder with no data whose close() fails."""

    data_start = 0
    seekable = True

    def __init__(self, error):
        self.error = error

    def read(self, size):
        return b""

    def known_length(self):
        return 0

    def seek_forward(self, frame_index):
        pass

    def rewind(self):
        pass

    def close(self):
        raise self.error


def make_sound(system, player, file, source=None):
    if source is None:
        source = SoundBuffer(bytes(16))
    mode = SoundMode.STREAMING if isinstance(source, DecoderStream) else SoundMode.MEMORY
    info = SoundInfo(SoundType.WAV, mode, 16)
    sound = Sound(system, player, source, info, "fake.wav", file=file)
    system.registry.register(sound)
    return sound


def test_close_reports_both_errors(system):
    file_error = OSError("disk gone")
    player_error = BackendError("device gone")
    sound = make_sound(system, FailingPlayer(player_error), FailingFile(file_error))

    with pytest.raises(CloseError) as exc_info:
        sound.close()

    assert exc_info.value.file_error is file_error
    assert exc_info.value.player_error is player_error
    assert sound.is_closed
    assert sound not in system.registry.get_all()


def test_close_reports_player_error(system):
    sound = make_sound(system, FailingPlayer(BackendError("device gone")), FailingFile())

    with pytest.raises(BackendError, match="device gone"):
        sound.close()

    assert sound.is_closed


def test_close_reports_file_error(system):
    sound = make_sound(system, FailingPlayer(), FailingFile(OSError("disk gone")))

    with pytest.raises(OSError, match="disk gone"):
        sound.close()

    # Already closed, nothing is retried
    sound.close()


def test_decoder_close_failure_still_releases_file_and_player(system):
    player = FailingPlayer()
    file = FailingFile()
    stream = DecoderStream(FailingDecoder(DecoderError("codec state lost")), system.format)
    sound = make_sound(system, player, file, source=stream)

    with pytest.raises(DecoderError, match="codec state lost"):
        sound.close()

    assert file.closed
    assert player.close_count == 1
    assert sound.is_closed
    assert sound not in system.registry.get_all()


def test_decoder_and_player_close_failures_combine(system):
    player = FailingPlayer(BackendError("device gone"))
    stream = DecoderStream(FailingDecoder(DecoderError("codec state lost")), system.format)
    sound = make_sound(system, player, FailingFile(), source=stream)

    with pytest.raises(CloseError) as exc_info:
        sound.close()

    assert isinstance(exc_info.value.file_error, DecoderError)
    assert exc_info.value.player_error is player.error


class EarlyStopPlayer(FailingPlayer):
    """Reports not playing before its buffered bytes have drained."""

    def __init__(self, stops_after=0.02, drains_after=0.12):
        super().__init__()
        self.stops_after = stops_after
        self.drains_after = drains_after
        self.started = None
        self.paused = False

    def play(self):
        self.started = time.monotonic()

    def pause(self):
        self.paused = True

    def _elapsed(self):
        return time.monotonic() - self.started

    def is_playing(self):
        return self.started is not None and not self.paused and self._elapsed() < self.stops_after

    def unplayed_buffer_bytes(self):
        if self.started is None or self._elapsed() >= self.drains_after:
            return 0
        return 4


def test_wait_blocks_until_buffer_drained(system):
    player = EarlyStopPlayer()
    sound = make_sound(system, player, None)

    start = time.monotonic()
    sound.play_sync()

    assert time.monotonic() - start >= 0.1
    assert player.unplayed_buffer_bytes() == 0


def test_pause_ends_wait_with_bytes_still_buffered(system):
    player = EarlyStopPlayer(stops_after=0.5, drains_after=5.0)
    sound = make_sound(system, player, None)
    sound.play_async()
    threading.Timer(0.05, sound.pause).start()

    start = time.monotonic()
    sound.wait()

    assert time.monotonic() - start < 0.3
    assert player.unplayed_buffer_bytes() > 0
