"""Service for opening sound files in streaming or memory mode."""

import io
from pathlib import Path
from typing import TYPE_CHECKING
from wavy.api.sound import Sound
from wavy.core.exceptions import DecoderError, SoundLoadError, UnsupportedFormatError
from wavy.core.interfaces import IAudioFormat, IDecoder
from wavy.core.models import SoundInfo, SoundMode, SoundType
from wavy.formats import get_format, get_sound_type
from wavy.sources.buffer import SoundBuffer
from wavy.sources.stream import DecoderStream
from wavy.utils.log import get_logger

if TYPE_CHECKING:
    from wavy.api.engine import AudioSystem

logger = get_logger(__name__)

MIN_READ_CHUNK = 4096


def read_all(decoder: IDecoder, chunk_size: int = MIN_READ_CHUNK, expected_size: int = 0) -> bytes:
    """
    Read a decoder until end of stream.

    Args:
        decoder: Decoder to drain.
        chunk_size: Bytes requested per read, at least 4096.
        expected_size: Decoded length if known. The first read asks for all
            of it, so decoders with exact lengths finish in two reads.

    Returns:
        Everything the decoder produced.

    Raises:
        DecoderError: If decoding fails part way.
    """
    chunk_size = max(chunk_size, MIN_READ_CHUNK)
    out = bytearray()
    request = max(chunk_size, expected_size)
    while True:
        chunk = decoder.read(request)
        request = chunk_size
        if not chunk:
            return bytes(out)
        out += chunk


def _format_for(path: str) -> tuple[SoundType, IAudioFormat]:
    sound_type = get_sound_type(path)
    audio_format = get_format(sound_type)
    if audio_format is None:
        raise UnsupportedFormatError(path)
    return sound_type, audio_format


def open_streaming(system: "AudioSystem", path: str) -> Sound:
    """
    Open a sound that is decoded while it plays.

    The file stays open until the sound is closed. Good for large files.

    Args:
        system: Started audio system.
        path: Path to an .mp3, .wav/.wave or .ogg file.

    Returns:
        Sound in streaming mode.

    Raises:
        UnsupportedFormatError: If the extension is not supported.
        SoundLoadError: If the file cannot be opened or decoded.
        EngineNotStartedError: If the system is not started.
    """
    sound_type, audio_format = _format_for(path)
    fmt = system.format

    try:
        file = open(path, "rb")
    except OSError as e:
        raise SoundLoadError(path, e) from e

    try:
        decoder = audio_format.open_decoder(file, fmt)
        stream = DecoderStream(decoder, fmt)
        info = SoundInfo(sound_type, SoundMode.STREAMING, decoder.known_length())
        player = system.create_player(stream)
    except (DecoderError, OSError) as e:
        file.close()
        raise SoundLoadError(path, e) from e
    except BaseException:
        file.close()
        raise

    sound = Sound(system, player, stream, info, path, file=file)
    system.registry.register(sound)
    logger.info(f"Opened {path} for streaming ({info.total_size} PCM bytes)")
    return sound


def open_memory(system: "AudioSystem", path: str) -> Sound:
    """
    Open a sound by decoding the whole file into memory.

    Memory sounds seek cheaply and can be copied and clipped.

    Args:
        system: Started audio system.
        path: Path to an .mp3, .wav/.wave or .ogg file.

    Returns:
        Sound in memory mode.

    Raises:
        UnsupportedFormatError: If the extension is not supported.
        SoundLoadError: If the file cannot be read or decoded.
        EngineNotStartedError: If the system is not started.
    """
    sound_type, audio_format = _format_for(path)
    fmt = system.format

    try:
        file_bytes = Path(path).read_bytes()
    except OSError as e:
        raise SoundLoadError(path, e) from e

    try:
        decoder = audio_format.open_decoder(io.BytesIO(file_bytes), fmt)
        try:
            pcm = read_all(decoder, expected_size=decoder.known_length())
        finally:
            decoder.close()
    except DecoderError as e:
        raise SoundLoadError(path, e) from e

    buffer = SoundBuffer(pcm)
    info = SoundInfo(sound_type, SoundMode.MEMORY, len(buffer))
    player = system.create_player(buffer)

    sound = Sound(system, player, buffer, info, path)
    system.registry.register(sound)
    logger.info(f"Loaded {path} into memory ({info.total_size} PCM bytes)")
    return sound
