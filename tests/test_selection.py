from __future__ import annotations

import pytest

from shbstream.core.errors import EmptyCatalogError, InvalidSelectionError
from shbstream.core.model import ScanRecord
from shbstream.core.selection import parse_selection, select_peripheral
from tests.fake_radio import RecordingConsole


def _records(count: int) -> list[ScanRecord]:
    return [ScanRecord("SHB1000", f"AA:{i:02X}", True) for i in range(count)]


def test_single_candidate_is_auto_selected() -> None:
    console = RecordingConsole()
    chosen = select_peripheral(_records(1), console)
    assert chosen.address == "AA:00"
    assert console.prompts == []
    assert console.lines == ["One SHB1000 device found. Auto-selecting it."]


def test_empty_candidates_fail() -> None:
    with pytest.raises(EmptyCatalogError):
        select_peripheral([], RecordingConsole())


def test_menu_lists_indexed_rows() -> None:
    console = RecordingConsole(inputs=["1"])
    chosen = select_peripheral(_records(2), console)
    assert chosen.address == "AA:01"
    assert "[0] SHB1000 [AA:00]" in console.lines
    assert "[1] SHB1000 [AA:01]" in console.lines
    assert console.prompts == ["Select device index [0-1]"]


@pytest.mark.parametrize("count", [1, 2, 3, 7])
def test_bounds_enforced_for_every_size(count: int) -> None:
    for index in range(count):
        assert parse_selection(str(index), count) == index
    for bad in (count, count + 1, 99):
        with pytest.raises(InvalidSelectionError):
            parse_selection(str(bad), count)
    with pytest.raises(InvalidSelectionError):
        parse_selection("-1", count)


@pytest.mark.parametrize("raw", ["", "abc", "1.0", "0x1", "+1"])
def test_non_numeric_input_rejected(raw: str) -> None:
    with pytest.raises(InvalidSelectionError):
        parse_selection(raw, 3)


def test_surrounding_whitespace_is_tolerated() -> None:
    assert parse_selection(" 2 \n", 3) == 2


def test_out_of_range_menu_choice_fails() -> None:
    console = RecordingConsole(inputs=["9"])
    with pytest.raises(InvalidSelectionError):
        select_peripheral(_records(2), console)
