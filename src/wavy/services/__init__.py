"""Services layer for audio system orchestration."""

from wavy.services.engine_lifecycle import EngineLifecycleService
from wavy.services.loader import open_memory, open_streaming, read_all

__all__ = ["EngineLifecycleService", "open_memory", "open_streaming", "read_all"]
