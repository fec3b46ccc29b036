"""Audio format handlers and file type detection."""

from pathlib import Path
from typing import Dict, Optional
from wavy.core.interfaces import IAudioFormat
from wavy.core.models import SoundType
from wavy.formats.mp3 import mp3_format
from wavy.formats.ogg import ogg_format
from wavy.formats.wav import wav_format
from wavy.utils.log import get_logger

logger = get_logger(__name__)

# Registry of all available formats
_format_registry: Dict[str, IAudioFormat] = {}


def _register_format(format: IAudioFormat) -> None:
    """
    Register an audio format.

    Args:
        format: Format instance implementing IAudioFormat.
    """
    for ext in format.extensions:
        ext_lower = ext.lower()
        if ext_lower in _format_registry:
            logger.warning(
                f"Format with extension {ext_lower} already registered, "
                f"overwriting with {type(format).__name__}"
            )
        _format_registry[ext_lower] = format
    logger.debug(f"Registered format {type(format).__name__} for extensions: {format.extensions}")


def get_sound_type(path: str) -> SoundType:
    """
    Detect the sound type from the file extension (case-insensitive).

    Args:
        path: Path to audio file.

    Returns:
        SoundType, UNKNOWN if the extension is not supported.
    """
    format = _format_registry.get(Path(path).suffix.lower())
    if format is None:
        return SoundType.UNKNOWN
    return format.sound_type


def get_format(sound_type: SoundType) -> Optional[IAudioFormat]:
    """
    Get the format handler for a sound type.

    Returns:
        IAudioFormat instance, None for UNKNOWN.
    """
    for format in _format_registry.values():
        if format.sound_type == sound_type:
            return format
    return None


def supported_extensions() -> tuple[str, ...]:
    return tuple(sorted(_format_registry))


_register_format(mp3_format)
_register_format(wav_format)
_register_format(ogg_format)

__all__ = ["get_sound_type", "get_format", "supported_extensions", "IAudioFormat"]
