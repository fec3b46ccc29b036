"""Service for managing audio system lifecycle."""

from typing import Optional
from wavy.concurrency.worker import BackendWorker
from wavy.core.exceptions import EngineNotStartedError
from wavy.core.interfaces import IAudioBackend, IBackendWorker
from wavy.core.models import PcmFormat
from wavy.utils.log import get_logger

logger = get_logger(__name__)


class EngineLifecycleService:
    """
    Service for managing audio system lifecycle.

    Responsibilities:
    - Open the output device with the system's PCM format
    - Manage worker thread lifecycle
    - Shut the backend down exactly once
    """

    def __init__(
        self,
        backend: IAudioBackend,
        fmt: PcmFormat,
        worker: Optional[IBackendWorker] = None,
    ):
        """
        Initialize lifecycle service.

        Args:
            backend: Audio backend implementation.
            fmt: PCM format the device is opened with.
            worker: Optional worker implementation (for testing).
        """
        self._backend = backend
        self._format = fmt
        self._worker: Optional[IBackendWorker] = worker
        self._started = False

    def start(self) -> None:
        """
        Start the worker and initialize the backend in it.

        Raises:
            BackendError: If the backend cannot open the device.
        """
        if self._started:
            logger.warning("Audio system already started")
            return

        if self._worker is None:
            self._worker = BackendWorker(
                initializer=lambda: self._backend.initialize(self._format)
            )
            self._worker.start()
        else:
            self._worker.start()
            self._worker.execute(lambda: self._backend.initialize(self._format))

        self._started = True
        logger.info("Audio system started")

    def shutdown(self) -> None:
        """
        Shutdown the backend and the worker thread.

        This method is idempotent and safe to call multiple times.
        """
        if not self._started:
            logger.debug("Audio system not started, skipping shutdown")
            return

        logger.info("Shutting down audio system...")

        if self._worker is not None:
            try:
                self._worker.execute(self._backend.shutdown)
            except Exception as e:
                logger.warning(f"Error during backend shutdown: {e}")

            try:
                self._worker.stop()
            except Exception as e:
                logger.warning(f"Error stopping worker thread: {e}")

            self._worker = None

        self._started = False
        logger.info("Audio system shut down")

    @property
    def is_started(self) -> bool:
        return self._started

    @property
    def format(self) -> PcmFormat:
        return self._format

    @property
    def worker(self) -> IBackendWorker:
        """
        Get worker instance.

        Raises:
            EngineNotStartedError: If the system is not started.
        """
        if not self._started or self._worker is None:
            raise EngineNotStartedError("Audio system must be started first")
        return self._worker

    @property
    def backend(self) -> IAudioBackend:
        return self._backend
