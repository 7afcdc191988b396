"""Resolve a single peripheral from the filtered scan candidates."""

from __future__ import annotations

from collections.abc import Sequence

from shbstream.core.console import Console
from shbstream.core.errors import EmptyCatalogError, InvalidSelectionError
from shbstream.core.model import ScanRecord


def parse_selection(raw: str, count: int) -> int:
    text = raw.strip()
    if not text.isdecimal():
        raise InvalidSelectionError(f"Invalid selection '{raw.strip()}': expected an index in [0, {count - 1}]")
    index = int(text)
    if index >= count:
        raise InvalidSelectionError(f"Invalid selection {index}: expected an index in [0, {count - 1}]")
    return index


def select_peripheral(candidates: Sequence[ScanRecord], console: Console) -> ScanRecord:
    if not candidates:
        raise EmptyCatalogError("No candidate devices to select from.")

    if len(candidates) == 1:
        chosen = candidates[0]
        console.echo(f"One {chosen.identifier} device found. Auto-selecting it.")
        return chosen

    console.echo(f"{candidates[0].identifier} devices:")
    for index, record in enumerate(candidates):
        console.echo(f"[{index}] {record.identifier} [{record.address}]")
    raw = console.prompt(f"Select device index [0-{len(candidates) - 1}]")
    return candidates[parse_selection(raw, len(candidates))]
