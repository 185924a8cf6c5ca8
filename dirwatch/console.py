"""
Human-readable status output.

Everything the user is meant to read goes through here; diagnostics go to
the log instead.
"""

from rich.console import Console as RichConsole
from rich.markup import escape

from . import __version__

DESCRIPTION = (
    "dirwatch is a simple CLI tool that watches a directory\n"
    "and restarts the command passed every time a change is detected."
)


class Console:
    """Coloured status lines for the terminal."""

    def __init__(self, file=None):
        self._console = RichConsole(file=file, highlight=False, soft_wrap=True)

    def _print(self, *args, **kwargs):
        try:
            self._console.print(*args, **kwargs)
        except OSError:
            # Write failures are not fatal.
            pass

    def command(self, spec):
        """Announce the command line being launched."""
        self._print(f"[bold green]Running command:[/bold green] {escape(str(spec))}")

    def notice(self, text: str):
        self._print(f"[bold yellow]{escape(text)}[/bold yellow]")

    def blank(self):
        self._print()

    def error(self, text: str):
        self._print(f"[bold red]Error:[/bold red] [red]{escape(text)}[/red]")

    def description(self):
        self._print(f"[bold green]->[/bold green] [bold blue]{DESCRIPTION}[/bold blue]")

    def usage(self):
        self._print("[bold green]Usage:[/bold green]")
        self._print(f"[bold cyan]\t{escape('dirwatch [OPTION] | COMMAND [ARGS...]')}[/bold cyan]")
        self._print("[bold green]Options:[/bold green]")
        self._print(f"[bold cyan]\t{'-h, --help':18}Prints help information[/bold cyan]")
        self._print(f"[bold cyan]\t{'-v, --version':18}Prints version information[/bold cyan]")
        self._print("[bold green]Conditions:[/bold green]")
        self._print("[bold cyan]\t- you need to pass it a valid command.[/bold cyan]")
        self._print(
            "[bold cyan]\t- don't launch it in a directory with too many files in it, "
            "it might overload your PC.[/bold cyan]"
        )

    def version(self):
        self._print(f"dirwatch {__version__}")
