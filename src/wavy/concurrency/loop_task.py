"""Background task that replays a sound a number of times."""

import threading
from typing import Callable, Optional
from wavy.utils.log import get_logger

logger = get_logger(__name__)


class LoopTask:
    """
    Waits for each play to finish and starts the next one.

    The task only drives its sound through three callables:

    - wait: block until the current play finishes (or is paused)
    - replay: atomically check that looping is still wanted, rewind and play;
      returns False when looping was cancelled
    - on_exit: called with the task once it stops, whatever the reason

    Cancellation is cooperative: the owner clears its looping flag so the
    next replay() returns False.
    """

    def __init__(
        self,
        times: int,
        wait: Callable[[], None],
        replay: Callable[[], bool],
        on_exit: Callable[["LoopTask"], None],
        name: str = "wavy-loop",
    ):
        """
        Args:
            times: Total number of plays including the one already started.
                Negative loops until cancelled. Must not be 0.
        """
        if times == 0:
            raise ValueError("times must be non-zero")
        self._plays_left = times
        self._wait = wait
        self._replay = replay
        self._on_exit = on_exit
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self.completed_plays = 0

    def start(self) -> None:
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> None:
        """Block until the task has exited. No-op from the task's own thread."""
        if threading.current_thread() is self._thread:
            return
        self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    @property
    def infinite(self) -> bool:
        return self._plays_left < 0

    def _run(self) -> None:
        try:
            while True:
                self._wait()
                self.completed_plays += 1
                if self._plays_left > 0:
                    self._plays_left -= 1
                if self._plays_left == 0 or not self._replay():
                    break
        except Exception:
            logger.exception("Loop task failed")
        finally:
            logger.debug(f"Loop task exiting after {self.completed_plays} plays")
            self._on_exit(self)
