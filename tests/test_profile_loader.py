from __future__ import annotations

from pathlib import Path

import pytest

from shbstream.core.errors import ProfileLoadError, ProfileValidationError
from shbstream.core.profile_loader import load_profiles, normalize_uuid


def _write_profile(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture(autouse=True)
def _isolated_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))


def test_load_packaged_profile() -> None:
    loaded = load_profiles()
    profile = loaded.get()
    assert profile.id == "simionic_g1000"
    assert profile.identifier == "SHB1000"
    assert profile.characteristic_uuid == "f62a9f56-f29e-48a8-a317-47ee37a58999"
    assert profile.scan_timeout_s == 10.0
    assert loaded.warnings == ()


def test_user_profile_overrides_packaged(tmp_path: Path) -> None:
    _write_profile(
        tmp_path / "cfg" / "shbstream" / "profiles" / "g1000.yaml",
        """
id: simionic_g1000
name: Bench unit
identifier: SHB1000
characteristic_uuid: F62A9F56-F29E-48A8-A317-47EE37A58999
scan_timeout_s: 4
adapter: hci1
""",
    )

    loaded = load_profiles()
    profile = loaded.get("simionic_g1000")
    assert profile.name == "Bench unit"
    assert profile.characteristic_uuid == "f62a9f56-f29e-48a8-a317-47ee37a58999"
    assert profile.scan_timeout_s == 4.0
    assert profile.adapter == "hci1"
    assert loaded.warnings == ("User profile 'simionic_g1000' overrides packaged profile",)


def test_missing_required_keys_rejected(tmp_path: Path) -> None:
    _write_profile(
        tmp_path / "data" / "shbstream" / "profiles" / "missing.yaml",
        """
id: missing
name: Missing
""",
    )
    with pytest.raises(ProfileValidationError, match="Schema validation failed"):
        load_profiles()


def test_duplicate_keys_rejected(tmp_path: Path) -> None:
    _write_profile(
        tmp_path / "cfg" / "shbstream" / "profiles" / "dup.yml",
        """
id: dup
name: Dup
identifier: A
identifier: B
characteristic_uuid: 2a37
""",
    )
    with pytest.raises(ProfileValidationError, match="Duplicate key"):
        load_profiles()


def test_bad_uuid_rejected(tmp_path: Path) -> None:
    _write_profile(
        tmp_path / "cfg" / "shbstream" / "profiles" / "bad.yaml",
        """
id: bad_uuid
name: Bad
identifier: SHB1000
characteristic_uuid: not-a-uuid
""",
    )
    with pytest.raises(ProfileValidationError, match="bad_uuid.characteristic_uuid"):
        load_profiles()


def test_unknown_profile_lists_available() -> None:
    with pytest.raises(ProfileLoadError, match="simionic_g1000"):
        load_profiles().get("nope")


def test_normalize_uuid_forms() -> None:
    assert normalize_uuid(" 2A37 ", context="x") == "2a37"
    assert normalize_uuid("0000180D", context="x") == "0000180d"
    with pytest.raises(ProfileValidationError):
        normalize_uuid("xyz", context="x")
