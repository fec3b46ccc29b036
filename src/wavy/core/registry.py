"""Registry of the sounds an AudioSystem has open."""

import threading
from typing import TYPE_CHECKING, Dict, List

if TYPE_CHECKING:
    from wavy.api.sound import Sound


class SoundRegistry:
    """
    Registry for the open sounds of one audio system.

    Responsibilities:
    - Track sounds from open until close
    - Hand the open sounds to shutdown so they can be closed
    - Provide thread-safe access (sounds close from any thread)
    """

    def __init__(self):
        """Initialize the registry."""
        self._sounds: Dict[int, "Sound"] = {}
        self._lock = threading.Lock()

    def register(self, sound: "Sound") -> None:
        """
        Register a newly opened sound.

        Args:
            sound: Sound to track.
        """
        with self._lock:
            self._sounds[id(sound)] = sound

    def remove(self, sound: "Sound") -> None:
        """
        Remove a sound from the registry. Unknown sounds are ignored.

        Args:
            sound: Sound to forget.
        """
        with self._lock:
            self._sounds.pop(id(sound), None)

    def get_all(self) -> List["Sound"]:
        """
        Get all open sounds.

        Returns:
            Snapshot list of the registered sounds.
        """
        with self._lock:
            return list(self._sounds.values())

    def clear(self) -> None:
        """Forget all sounds."""
        with self._lock:
            self._sounds.clear()

    def count(self) -> int:
        """
        Get number of open sounds.

        Returns:
            Number of registered sounds.
        """
        with self._lock:
            return len(self._sounds)
