"""Exception classes for wavy."""

from typing import Optional


class WavyError(Exception):
    """Base exception for wavy errors."""
    pass


class EngineNotStartedError(WavyError):
    """Raised when sounds are opened before AudioSystem.start()."""
    pass


class BackendError(WavyError):
    """Raised when an output backend operation fails."""

    def __init__(self, message: str, code: int = 0):
        self.code = code
        self.message = message
        if code != 0:
            super().__init__(f"Backend error ({code}): {message}")
        else:
            super().__init__(f"Backend error: {message}")


class DecoderError(WavyError):
    """Raised when container or codec data cannot be decoded."""
    pass


class SoundLoadError(WavyError):
    """Raised when a sound file cannot be opened. Carries the offending path."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        if cause is not None:
            super().__init__(f"failed to load '{path}': {cause}")
        else:
            super().__init__(f"failed to load '{path}'")


class UnsupportedFormatError(SoundLoadError):
    """Raised when the file extension is not one of .mp3, .wav, .wave, .ogg."""

    def __init__(self, path: str):
        super().__init__(path)
        self.args = (
            f"failed to load '{path}': unknown sound type, "
            f"extension must be one of: .mp3, .wav, .wave, .ogg",
        )


class SeekError(WavyError):
    """Base class for seek contract violations."""
    pass


class NegativeSeekPositionError(SeekError):
    """Raised when a seek would move the position below zero."""
    pass


class InvalidWhenceError(SeekError, ValueError):
    """Raised for a whence other than SEEK_SET, SEEK_CUR or SEEK_END."""
    pass


class SoundClosedError(WavyError):
    """Raised when a closed sound is seeked or copied."""
    pass


class SoundModeError(WavyError):
    """Raised when copy/clip is used on a sound that is not held in memory."""
    pass


class CloseError(WavyError):
    """Raised when both the file and the player fail to close."""

    def __init__(self, file_error: BaseException, player_error: BaseException):
        self.file_error = file_error
        self.player_error = player_error
        super().__init__(
            f"closing file failed: {file_error}; closing player failed: {player_error}"
        )
