"""Decorator to display a StageResult on the command line."""

import functools
import json
from collections.abc import Callable
from typing import TypeVar

import typer
from rich.console import Console

F = TypeVar("F", bound=Callable)

_console = Console(stderr=True)


def handle_stage_result(func: F) -> F:
    """Wrap a command function to handle StageResult for CLI display.

    1. Announce (stderr)
    2. Result (stderr, green on success, red on failure)
    3. Output (stdout as JSON)

    Exits with code 1 when the command did not succeed.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        result = func(*args, **kwargs)
        _console.print(result.announce, style="dim")
        _console.print(result.result, style="green" if result.success else "red")
        typer.echo(json.dumps(result.output, indent=2, default=str))
        if not result.success:
            raise typer.Exit(1)

    return wrapper  # type: ignore[return-value]
