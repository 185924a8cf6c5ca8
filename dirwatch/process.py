"""
Process supervisor for the watched command.

Owns at most one child process at a time and moves it through start, stop
and restart. Stopping always reaps the child before returning, then waits a
little longer so the next instance can rebind the same ports and locks.
"""

import logging
import shlex
import subprocess
import time
from dataclasses import dataclass
from datetime import datetime

import psutil

from .config import config
from .errors import SignalError, SpawnError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandSpec:
    """The command to supervise: program followed by its arguments."""

    argv: tuple[str, ...]

    def __post_init__(self):
        if not self.argv:
            raise ValueError("a command is required")
        object.__setattr__(self, "argv", tuple(self.argv))

    @property
    def program(self) -> str:
        return self.argv[0]

    @property
    def args(self) -> tuple[str, ...]:
        return self.argv[1:]

    def __str__(self) -> str:
        return shlex.join(self.argv)


@dataclass
class ProcessInfo:
    """Information about the running child."""

    process: subprocess.Popen
    started_at: datetime

    @property
    def pid(self) -> int:
        return self.process.pid


class ProcessSupervisor:
    """Runs one command, restarting it on demand."""

    def __init__(
        self,
        spec: CommandSpec,
        console=None,
        startup_delay: float | None = None,
        settle_delay: float | None = None,
        stop_timeout: float | None = None,
    ):
        self.spec = spec
        self._console = console
        self.startup_delay = config.startup_delay if startup_delay is None else startup_delay
        self.settle_delay = config.settle_delay if settle_delay is None else settle_delay
        self.stop_timeout = config.stop_timeout if stop_timeout is None else stop_timeout
        self._info: ProcessInfo | None = None
        self.restart_count = 0
        self.returncode: int | None = None

    @property
    def running(self) -> bool:
        """Whether a child is held and still alive."""
        return self._info is not None and self._info.process.poll() is None

    @property
    def pid(self) -> int | None:
        return self._info.pid if self._info else None

    def start(self):
        """Launch the command. Raises SpawnError if it cannot be started."""
        if self._info is not None:
            logger.warning(f"Process {self._info.pid} still held at start, stopping it first")
            self.stop()

        if self._console:
            self._console.command(self.spec)

        try:
            process = subprocess.Popen(list(self.spec.argv), stdin=subprocess.PIPE)
        except OSError as e:
            raise SpawnError(f"failed to run '{self.spec.program}': {e}") from e

        self._info = ProcessInfo(process=process, started_at=datetime.now())
        logger.info(f"Started {self.spec.program} with PID {process.pid}")

        # Give the child time to become signal-handleable before any stop.
        time.sleep(self.startup_delay)

    def stop(self):
        """Terminate and reap the child. No-op if nothing is running."""
        if self._info is None:
            return

        self._terminate(self._info)
        self._info = None

        # Let the OS release sockets and file locks before the next start.
        time.sleep(self.settle_delay)

    def restart(self):
        """Stop the current instance and start a fresh one."""
        self.stop()
        self.start()
        self.restart_count += 1
        logger.info(f"Restarted {self.spec.program} ({self.restart_count} restarts)")

    def shutdown(self):
        """Best-effort teardown on exit. Never raises."""
        if self._info is None:
            return
        try:
            self._terminate(self._info)
        except (SignalError, psutil.Error) as e:
            logger.error(f"Failed to stop {self.spec.program} on shutdown: {e}")
        finally:
            self._info = None

    def _terminate(self, info: ProcessInfo):
        """Signal the child, wait for it, then clean up its descendants."""
        process = info.process
        descendants = _descendants(info.pid)

        if process.poll() is not None:
            logger.info(f"Process {info.pid} already exited with status {process.returncode}")
        else:
            try:
                process.terminate()
            except ProcessLookupError:
                pass
            except OSError as e:
                raise SignalError(f"failed to signal process {info.pid}: {e}") from e

        try:
            try:
                process.wait(timeout=self.stop_timeout)
            except subprocess.TimeoutExpired:
                logger.warning(f"Process {info.pid} did not stop gracefully, forcing kill")
                try:
                    process.kill()
                except ProcessLookupError:
                    pass
                process.wait()
        except OSError as e:
            raise SignalError(f"failed to wait for process {info.pid}: {e}") from e

        self.returncode = process.returncode
        uptime = (datetime.now() - info.started_at).total_seconds()
        logger.info(f"Process {info.pid} exited with status {process.returncode} after {uptime:.1f}s")

        _reap_descendants(descendants, self.stop_timeout)

        if process.stdin:
            try:
                process.stdin.close()
            except OSError:
                pass


def _descendants(pid: int) -> list[psutil.Process]:
    """Snapshot the child's process tree before it is signalled."""
    try:
        return psutil.Process(pid).children(recursive=True)
    except (psutil.NoSuchProcess, psutil.ZombieProcess):
        return []
    except psutil.AccessDenied:
        logger.warning(f"Access denied listing children of {pid}")
        return []


def _reap_descendants(procs: list[psutil.Process], timeout: float):
    """Terminate grandchildren the command left behind."""
    alive = []
    for proc in procs:
        try:
            if proc.is_running():
                logger.debug(f"Sending SIGTERM to leftover descendant {proc.pid}")
                proc.terminate()
                alive.append(proc)
        except psutil.NoSuchProcess:
            continue
        except psutil.AccessDenied:
            logger.warning(f"Access denied terminating descendant {proc.pid}, leaving it")

    if not alive:
        return

    _, still_alive = psutil.wait_procs(alive, timeout=timeout)
    for proc in still_alive:
        try:
            logger.warning(f"Descendant {proc.pid} ignored SIGTERM, forcing kill")
            proc.kill()
        except psutil.NoSuchProcess:
            continue
        except psutil.AccessDenied:
            logger.warning(f"Access denied killing descendant {proc.pid}, leaving it")
