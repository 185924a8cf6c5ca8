import sys

import pytest

from dirwatch import __version__, cli
from dirwatch.errors import SpawnError, UsageError, WatchError
from dirwatch.loop import WatchLoop
from dirwatch.process import CommandSpec
from dirwatch.watcher import DebouncedWatcher


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda: None)


def test_parse_args_flags_only_in_first_position():
    assert cli.parse_args(["-h"]) == "help"
    assert cli.parse_args(["--help"]) == "help"
    assert cli.parse_args(["-v"]) == "version"
    assert cli.parse_args(["--version"]) == "version"
    assert cli.parse_args(["ls", "-v", "--help"]) == CommandSpec(("ls", "-v", "--help"))


def test_parse_args_requires_command():
    with pytest.raises(UsageError):
        cli.parse_args([])


def test_help_exits_zero(capsys):
    assert cli.main(["--help"]) == 0
    out = capsys.readouterr().out
    assert "watches a directory" in out
    assert "Usage:" in out
    assert "-v, --version" in out


def test_version_exits_zero(capsys):
    assert cli.main(["-v"]) == 0
    assert capsys.readouterr().out.strip() == f"dirwatch {__version__}"


def test_no_arguments_is_a_usage_error(capsys):
    assert cli.main([]) == 1
    out = capsys.readouterr().out
    assert "Error:" in out
    assert "no command given" in out
    assert "Usage:" in out


def test_missing_executable_exits_before_watching(tmp_path, monkeypatch, capsys):
    watched = []
    monkeypatch.setattr(DebouncedWatcher, "start", lambda self: watched.append(self))

    assert cli.main([str(tmp_path / "does-not-exist"), "--flag"]) == 1

    out = capsys.readouterr().out
    assert "Running command:" in out
    assert "Error:" in out
    assert "does-not-exist" in out
    assert watched == []


def test_module_entry_point_exists():
    import dirwatch.__main__  # noqa: F401

    assert "dirwatch.__main__" in sys.modules


def test_watch_error_prints_usage(monkeypatch, capsys):
    def _broken_watch(self):
        raise WatchError("watched directory /tmp/x was removed")

    monkeypatch.setattr(WatchLoop, "run", _broken_watch)

    assert cli.main(["true"]) == 1

    out = capsys.readouterr().out
    assert "Error: watched directory /tmp/x was removed" in out
    assert "Usage:" in out


def test_spawn_error_does_not_print_usage(monkeypatch, capsys):
    def _broken_spawn(self):
        raise SpawnError("failed to run 'nope'")

    monkeypatch.setattr(WatchLoop, "run", _broken_spawn)

    assert cli.main(["nope"]) == 1

    out = capsys.readouterr().out
    assert "failed to run 'nope'" in out
    assert "Usage:" not in out
