"""Shared fixtures: small child programs and process inspection helpers."""

from __future__ import annotations

import signal
import sys
import time
from pathlib import Path
from typing import Callable

import psutil
import pytest


class RecordingConsole:
    """Console stand-in that records what would have been printed."""

    def __init__(self):
        self.lines: list[tuple[str, str]] = []

    def command(self, spec):
        self.lines.append(("command", str(spec)))

    def notice(self, text):
        self.lines.append(("notice", text))

    def blank(self):
        self.lines.append(("blank", ""))

    def error(self, text):
        self.lines.append(("error", text))


@pytest.fixture
def console() -> RecordingConsole:
    return RecordingConsole()


@pytest.fixture(autouse=True)
def _restore_sigint():
    """Put pytest's own SIGINT handler back after each test."""
    original = signal.getsignal(signal.SIGINT)
    yield
    signal.signal(signal.SIGINT, original)


@pytest.fixture
def write_script(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a Python child program into a scripts/ directory."""
    scripts = tmp_path / "scripts"
    scripts.mkdir(exist_ok=True)

    def _write(name: str, body: str) -> Path:
        path = scripts / name
        path.write_text(body)
        return path

    return _write


@pytest.fixture
def pid_script(write_script, tmp_path: Path):
    """A child that writes its PID to pid.txt, overwriting it, then sleeps."""
    pid_file = tmp_path / "pid.txt"
    script = write_script(
        "record_pid.py",
        "import os, sys, time\n"
        "with open(sys.argv[1], 'w') as f:\n"
        "    f.write(str(os.getpid()))\n"
        "time.sleep(60)\n",
    )
    return [sys.executable, str(script), str(pid_file)], pid_file


def wait_for(predicate: Callable[[], object], timeout: float = 10.0, interval: float = 0.05):
    """Poll until predicate() is truthy; return its value or fail the test."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        value = predicate()
        if value:
            return value
        time.sleep(interval)
    pytest.fail(f"condition not met within {timeout}s")


def read_int(path: Path) -> int | None:
    try:
        text = path.read_text().strip()
    except FileNotFoundError:
        return None
    return int(text) if text else None


def is_alive(pid: int) -> bool:
    """True if pid is a running, non-zombie process."""
    try:
        return psutil.Process(pid).status() != psutil.STATUS_ZOMBIE
    except psutil.NoSuchProcess:
        return False


def live_instances(parent_pid: int, marker: str) -> list[psutil.Process]:
    """Descendants of parent_pid whose command line mentions marker."""
    found = []
    try:
        children = psutil.Process(parent_pid).children(recursive=True)
    except psutil.NoSuchProcess:
        return found
    for proc in children:
        try:
            if proc.status() == psutil.STATUS_ZOMBIE:
                continue
            if any(marker in part for part in proc.cmdline()):
                found.append(proc)
        except psutil.NoSuchProcess:
            continue
    return found
