"""Validation utilities."""


def clamp01(value: float) -> float:
    """Clamp value to [0.0, 1.0]."""
    if value < 0.0:
        return 0.0
    if value > 1.0:
        return 1.0
    return value


def require_volume(volume: float) -> float:
    """
    Check that volume lies in [0.0, 1.0].

    Out-of-range volumes are rejected, not clamped.

    Raises:
        ValueError: If volume is outside [0.0, 1.0].
    """
    if not 0.0 <= volume <= 1.0:
        raise ValueError(f"sound volume must be between 0 and 1, got {volume}")
    return volume
