import json
import os
from pathlib import Path
from typing import Any, TypedDict

from proteus.core.errors import ConfigError

_CONFIG_ENV_KEYS = ("PROTEUS_CONFIG_PATH", "PROTEUS_CONFIG")
_DEFAULT_CONFIG_FILENAME = ".wallet"
_RPC_URL_KEY = "arbitrum"
_PRIVATE_KEY_KEY = "key"


class WalletConfig(TypedDict):
    rpc_url: str
    private_key: str


def resolve_config_path(path: str | Path | None = None) -> Path:
    if path is not None:
        return Path(path).expanduser()

    env_path = next(
        (os.getenv(k, "").strip() for k in _CONFIG_ENV_KEYS if os.getenv(k)), ""
    )
    if env_path:
        return Path(env_path).expanduser()

    return Path.home() / _DEFAULT_CONFIG_FILENAME


def load_config_json(
    path: str | Path | None = None, *, require_exists: bool = False
) -> dict[str, Any]:
    cfg_path = resolve_config_path(path)
    if not cfg_path.exists():
        if require_exists:
            raise ConfigError(
                f"config file missing, please place it at: {cfg_path}",
                path=str(cfg_path),
            )
        return {}
    try:
        parsed = json.loads(cfg_path.read_text())
    except json.JSONDecodeError as exc:
        raise ConfigError(
            f"{cfg_path} is not valid JSON: {exc}", path=str(cfg_path)
        ) from exc
    if not isinstance(parsed, dict):
        raise ConfigError(
            f"{cfg_path} must be a JSON object at the top level.", path=str(cfg_path)
        )
    return parsed


def load_wallet_config(path: str | Path | None = None) -> WalletConfig:
    """Read the RPC endpoint and signing key. A missing file is fatal; nothing is defaulted."""
    cfg_path = resolve_config_path(path)
    config = load_config_json(cfg_path, require_exists=True)

    rpc_url = str(config.get(_RPC_URL_KEY) or "").strip()
    private_key = str(config.get(_PRIVATE_KEY_KEY) or "").strip()
    missing = [
        key
        for key, value in ((_RPC_URL_KEY, rpc_url), (_PRIVATE_KEY_KEY, private_key))
        if not value
    ]
    if missing:
        raise ConfigError(
            f"{cfg_path} is missing required keys: {', '.join(missing)}",
            path=str(cfg_path),
        )
    return WalletConfig(rpc_url=rpc_url, private_key=private_key)
