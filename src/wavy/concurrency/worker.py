"""Worker thread for backend command execution."""

import queue
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar
from wavy.core.interfaces import IBackendWorker
from wavy.utils.log import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class Command:
    """Command to execute in worker thread."""

    id: str
    func: Callable[[], Any]
    result_event: threading.Event
    result: Optional[Any] = None
    error: Optional[Exception] = None


class BackendWorker(IBackendWorker):
    """
    Worker thread that executes backend commands.

    Device-level operations (opening the device, creating players, global
    suspend/resume, shutdown) run on this one thread so backends never see
    them concurrently. Player calls made by sounds do not go through here.
    """

    def __init__(self, initializer: Optional[Callable[[], None]] = None, name: str = "wavy-backend"):
        """
        Initialize worker.

        Args:
            initializer: Run in the worker thread right after it starts.
            name: Thread name.
        """
        self._initializer = initializer
        self._name = name
        self._queue: queue.Queue[Optional[Command]] = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._ready_event = threading.Event()
        self._initialized = False

    def start(self) -> None:
        """
        Start the worker thread and run the initializer in it.

        Blocks until the thread accepts commands. Errors raised by the
        initializer propagate after the thread is stopped again.
        """
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._ready_event.clear()
        self._initialized = False

        self._thread = threading.Thread(target=self._worker_loop, name=self._name, daemon=True)
        self._thread.start()

        if not self._ready_event.wait(timeout=5.0):
            raise RuntimeError("Worker thread failed to start within timeout")

        self._initialized = True

        if self._initializer is not None:
            try:
                self.execute(self._initializer)
            except Exception:
                self.stop()
                raise
        logger.info("Backend worker thread started")

    def stop(self) -> None:
        """
        Stop the worker thread (blocks until done).

        This method is idempotent and safe to call multiple times.
        """
        if self._thread is None or not self._thread.is_alive():
            self._initialized = False
            self._thread = None
            return

        logger.info("Stopping backend worker thread...")
        self._initialized = False
        self._stop_event.set()
        self._queue.put(None)

        self._thread.join(timeout=5.0)
        if self._thread.is_alive():
            logger.error("Worker thread did not stop within timeout")
        else:
            logger.info("Backend worker thread stopped")
        self._thread = None

    def execute(self, func: Callable[[], T], timeout: Optional[float] = None) -> T:
        """
        Execute a function in the worker thread and return result.

        Calls made from the worker thread itself run inline.

        Args:
            func: Function to execute (no arguments).
            timeout: Maximum time to wait for result (None = infinite).

        Returns:
            Result of function execution.

        Raises:
            RuntimeError: If worker thread is not initialized.
            TimeoutError: If timeout is exceeded.
            Exception: Any exception raised by the function.
        """
        if not self._initialized:
            raise RuntimeError("Worker thread not initialized")

        if threading.current_thread() is self._thread:
            return func()

        cmd = Command(
            id=str(uuid.uuid4()),
            func=func,
            result_event=threading.Event(),
        )

        self._queue.put(cmd)

        if not cmd.result_event.wait(timeout=timeout):
            raise TimeoutError(f"Command execution timeout after {timeout}s")

        if cmd.error is not None:
            raise cmd.error

        return cmd.result

    def _worker_loop(self) -> None:
        """Main worker loop."""
        logger.debug("Worker thread started")
        self._ready_event.set()
        try:
            while not self._stop_event.is_set():
                try:
                    cmd = self._queue.get(timeout=0.1)
                except queue.Empty:
                    continue

                if cmd is None:  # Sentinel
                    logger.debug("Received sentinel, exiting worker loop")
                    break

                try:
                    cmd.result = cmd.func()
                except Exception as e:
                    logger.debug(f"Command {cmd.id} raised {type(e).__name__}: {e}")
                    cmd.error = e
                finally:
                    cmd.result_event.set()
        finally:
            # Fail commands nobody will run
            while True:
                try:
                    cmd = self._queue.get_nowait()
                except queue.Empty:
                    break
                if cmd is not None:
                    cmd.error = RuntimeError("Worker thread stopped")
                    cmd.result_event.set()
            logger.debug("Worker thread exiting")
