"""
The supervision loop.

Starts the command once, then restarts it for every debounced change in the
watched tree. Restart cycles run one at a time on the main thread; the loop
does not read the next change until the current stop and start are done.
"""

import logging
import signal
from typing import Callable

from .process import ProcessSupervisor
from .watcher import DebouncedWatcher

logger = logging.getLogger(__name__)


class WatchLoop:
    """Drives a ProcessSupervisor from a DebouncedWatcher."""

    def __init__(
        self,
        supervisor: ProcessSupervisor,
        watcher_factory: Callable[[], DebouncedWatcher] = DebouncedWatcher,
    ):
        self.supervisor = supervisor
        self.watcher_factory = watcher_factory
        self.watcher: DebouncedWatcher | None = None

    def run(self):
        """Supervise until interrupted. WatchError and SpawnError propagate."""
        try:
            # A command that cannot start fails here, before anything is watched.
            self.supervisor.start()

            self.watcher = self.watcher_factory()
            self.watcher.start()
            for event in self.watcher:
                logger.info(f"Change detected ({len(event.paths)} paths), restarting")
                self.supervisor.restart()
        finally:
            if self.watcher is not None:
                self.watcher.stop()
            self.supervisor.shutdown()


def install_interrupt_handler(console) -> None:
    """Exit with status 0 on SIGINT, whatever the loop is doing."""

    def _handle_interrupt(signum, frame):
        console.blank()
        console.notice("Exiting program...")
        raise SystemExit(0)

    signal.signal(signal.SIGINT, _handle_interrupt)
