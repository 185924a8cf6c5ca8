"""
Debounced filesystem change stream.

Uses watchdog's polling observer to re-scan the tree on a fixed interval and
collapses bursts of raw events into single ChangeEvents. Iterating a started
DebouncedWatcher blocks until the next batch and never ends on its own.
"""

import logging
import os
import queue
import threading
import time
from dataclasses import dataclass, field

from watchdog.events import EVENT_TYPE_DELETED, FileSystemEvent, FileSystemEventHandler
from watchdog.observers.polling import PollingObserver

from .config import config
from .errors import WatchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeEvent:
    """The watched tree changed. One per debounced batch."""

    paths: frozenset = field(default_factory=frozenset)


class Debouncer:
    """Collects raw events and releases them once they have gone quiet.

    A batch is released when ``timeout`` seconds have passed since the most
    recent raw event, so a burst of events closer together than the timeout
    becomes a single ChangeEvent.
    """

    def __init__(self, timeout: float):
        self.timeout = timeout
        self._paths: set[str] = set()
        self._last_event: float | None = None
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._last_event is not None

    def add(self, path: str, now: float | None = None):
        """Record a raw event for ``path``."""
        now = time.monotonic() if now is None else now
        with self._lock:
            self._paths.add(path)
            self._last_event = now

    def poll(self, now: float | None = None) -> ChangeEvent | None:
        """Return the pending batch if it has settled, else None."""
        now = time.monotonic() if now is None else now
        with self._lock:
            if self._last_event is None or now - self._last_event < self.timeout:
                return None
            event = ChangeEvent(paths=frozenset(self._paths))
            self._paths.clear()
            self._last_event = None
        return event


class _EventHandler(FileSystemEventHandler):
    """Feeds raw watchdog events into the debouncer."""

    def __init__(self, watcher: "DebouncedWatcher"):
        super().__init__()
        self._watcher = watcher

    def on_any_event(self, event: FileSystemEvent):
        path = os.fsdecode(event.src_path)
        if event.event_type == EVENT_TYPE_DELETED and os.path.abspath(path) == self._watcher.root:
            self._watcher._fail(WatchError(f"watched directory {self._watcher.root} was removed"))
            return
        self._watcher.debouncer.add(path)


class DebouncedWatcher:
    """Recursive, debounced change stream over one directory."""

    def __init__(
        self,
        root: str | None = None,
        poll_interval: float | None = None,
        debounce: float | None = None,
    ):
        self.root = os.path.abspath(config.watch_root if root is None else root)
        self.poll_interval = config.poll_interval if poll_interval is None else poll_interval
        self.debounce = config.debounce if debounce is None else debounce
        self.debouncer = Debouncer(self.debounce)
        self._queue: queue.Queue = queue.Queue()
        self._observer: PollingObserver | None = None
        self._ticker: threading.Thread | None = None
        self._stop_event = threading.Event()

    def start(self):
        """Begin watching. Raises WatchError if the root cannot be watched."""
        if self._observer is not None:
            raise RuntimeError("watcher already started")
        if not os.path.isdir(self.root):
            raise WatchError(f"cannot watch {self.root}: not a directory")

        self._observer = PollingObserver(timeout=self.poll_interval)
        try:
            self._observer.schedule(_EventHandler(self), self.root, recursive=True)
            self._observer.start()
        except OSError as e:
            raise WatchError(f"cannot watch {self.root}: {e}") from e

        self._ticker = threading.Thread(target=self._tick, name="dirwatch-debounce", daemon=True)
        self._ticker.start()
        logger.info(
            f"Watching {self.root} (poll every {self.poll_interval}s, debounce {self.debounce}s)"
        )

    def stop(self):
        """Stop the observer and the debounce ticker."""
        self._stop_event.set()
        if self._observer is not None:
            self._observer.stop()
            if self._observer.is_alive():
                self._observer.join()
        if self._ticker is not None and self._ticker is not threading.current_thread():
            self._ticker.join()
        logger.info(f"Stopped watching {self.root}")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()

    def __iter__(self):
        """Yield ChangeEvents forever. Raises WatchError on failure."""
        if self._observer is None:
            raise RuntimeError("watcher not started")
        while True:
            try:
                item = self._queue.get(timeout=self.poll_interval or 1.0)
            except queue.Empty:
                if self._stop_event.is_set():
                    return
                if not self._observer.is_alive():
                    raise WatchError("filesystem observer stopped unexpectedly")
                continue

            if isinstance(item, WatchError):
                raise item
            logger.debug(f"Change batch of {len(item.paths)} paths")
            yield item

    def _fail(self, error: WatchError):
        self._queue.put(error)

    def _tick(self):
        interval = max(self.debounce / 4, 0.01)
        while not self._stop_event.wait(interval):
            event = self.debouncer.poll()
            if event is not None:
                self._queue.put(event)
