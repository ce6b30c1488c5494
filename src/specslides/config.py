from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

ENV_SERVER_URL = "SPECSLIDES_SERVER_URL"

DEFAULT_SERVER_URL = "http://localhost:3000"
DEFAULT_UPLOAD_TIMEOUT_S = 30.0

LOCAL_CONFIG_NAME = Path(".specslides") / "specslides.toml"
HOME_CONFIG_PATH = Path.home() / ".specslides" / "specslides.toml"


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class SpecslidesConfig:
    server_url: str = DEFAULT_SERVER_URL
    upload_timeout_s: float = DEFAULT_UPLOAD_TIMEOUT_S


def _config_candidates() -> list[Path]:
    candidates = [Path.cwd() / LOCAL_CONFIG_NAME, HOME_CONFIG_PATH]
    if candidates[0] == candidates[1]:
        return [candidates[0]]
    return candidates


def _read_config(cfg_path: Path) -> dict:
    try:
        raw = cfg_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"Missing config file {cfg_path}.") from None
    except OSError as e:
        raise ConfigError(f"Failed to read config file {cfg_path}: {e}") from e
    try:
        return tomllib.loads(raw)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Malformed TOML in {cfg_path}: {e}") from None


def load_config_file(path: str | Path | None = None) -> tuple[dict, Path | None]:
    if path:
        cfg_path = Path(path).expanduser()
        return _read_config(cfg_path), cfg_path

    for candidate in _config_candidates():
        if candidate.is_file():
            return _read_config(candidate), candidate

    return {}, None


def get_server_url(config: dict, config_path: Path | None) -> str:
    """Get the server URL from the environment, config file, or default.

    Environment variable SPECSLIDES_SERVER_URL takes precedence over config file.
    """
    env_url = os.environ.get(ENV_SERVER_URL)
    if env_url and env_url.strip():
        return env_url.strip()

    if "server_url" not in config:
        return DEFAULT_SERVER_URL

    value = config["server_url"]
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(
            f"Invalid `server_url` in {config_path}; expected a non-empty string."
        )
    return value.strip()


def get_upload_timeout(config: dict, config_path: Path | None) -> float:
    if "upload_timeout_s" not in config:
        return DEFAULT_UPLOAD_TIMEOUT_S

    value = config["upload_timeout_s"]
    if isinstance(value, bool) or not isinstance(value, int | float) or value <= 0:
        raise ConfigError(
            f"Invalid `upload_timeout_s` in {config_path}; expected a positive number."
        )
    return float(value)


def load_config(
    path: str | Path | None = None, *, server_url: str | None = None
) -> SpecslidesConfig:
    config, config_path = load_config_file(path)
    if server_url is not None:
        value = server_url.strip()
        if not value:
            raise ConfigError("Invalid `--server`; expected a non-empty string.")
        resolved_url = value
    else:
        resolved_url = get_server_url(config, config_path)
    return SpecslidesConfig(
        server_url=resolved_url,
        upload_timeout_s=get_upload_timeout(config, config_path),
    )
