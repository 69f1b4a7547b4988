from __future__ import annotations

import json
from pathlib import Path

import pytest

from proteus.core.config import (
    load_config_json,
    load_wallet_config,
    resolve_config_path,
)
from proteus.core.errors import ConfigError


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PROTEUS_CONFIG_PATH", raising=False)
    monkeypatch.delenv("PROTEUS_CONFIG", raising=False)


def _write(path: Path, payload) -> Path:
    path.write_text(json.dumps(payload))
    return path


def test_resolve_config_path_defaults_to_home_wallet(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    assert resolve_config_path() == tmp_path / ".wallet"


def test_resolve_config_path_env_override(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("PROTEUS_CONFIG_PATH", str(tmp_path / "alt.json"))
    assert resolve_config_path() == tmp_path / "alt.json"


def test_explicit_path_wins_over_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("PROTEUS_CONFIG_PATH", str(tmp_path / "alt.json"))
    assert resolve_config_path(tmp_path / "mine.json") == tmp_path / "mine.json"


def test_load_config_json_missing_is_empty_unless_required(tmp_path: Path) -> None:
    missing = tmp_path / "nope.json"
    assert load_config_json(missing) == {}
    with pytest.raises(ConfigError, match="please place it at"):
        load_config_json(missing, require_exists=True)


def test_load_config_json_rejects_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text("{not json")
    with pytest.raises(ConfigError, match="not valid JSON"):
        load_config_json(path)


def test_load_config_json_rejects_non_object(tmp_path: Path) -> None:
    path = _write(tmp_path / "list.json", ["a"])
    with pytest.raises(ConfigError, match="JSON object"):
        load_config_json(path)


def test_load_wallet_config(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "wallet.json",
        {"arbitrum": " https://arb.example/rpc ", "key": "0x" + "11" * 32},
    )
    wallet = load_wallet_config(path)
    assert wallet["rpc_url"] == "https://arb.example/rpc"
    assert wallet["private_key"] == "0x" + "11" * 32


def test_load_wallet_config_missing_file(tmp_path: Path) -> None:
    missing = tmp_path / ".wallet"
    with pytest.raises(ConfigError) as exc_info:
        load_wallet_config(missing)
    assert exc_info.value.path == str(missing)
    assert str(missing) in str(exc_info.value)


def test_load_wallet_config_missing_keys(tmp_path: Path) -> None:
    path = _write(tmp_path / "wallet.json", {"arbitrum": "https://arb.example/rpc"})
    with pytest.raises(ConfigError, match="missing required keys: key"):
        load_wallet_config(path)
