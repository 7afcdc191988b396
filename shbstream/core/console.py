"""Console I/O used by the selection policy and the session."""

from __future__ import annotations

import sys
import threading
from typing import Protocol

import typer


class Console(Protocol):
    def echo(self, message: str, *, err: bool = False) -> None: ...

    def prompt(self, text: str) -> str: ...

    def wait_for_enter(self) -> None:
        """Block until the operator submits one line of input."""


class TyperConsole:
    """Console backed by typer; writes are serialized across threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def echo(self, message: str, *, err: bool = False) -> None:
        with self._lock:
            typer.echo(message, err=err)

    def prompt(self, text: str) -> str:
        # typer.prompt consumes the whole answer line, newline included, so
        # no blank line is left behind for wait_for_enter to skip.
        with self._lock:
            return typer.prompt(text, default="", show_default=False)

    def wait_for_enter(self) -> None:
        sys.stdin.readline()
