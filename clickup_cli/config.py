"""
clickup-cli configuration: credentials, workspace/team IDs and runtime settings.

Values resolve in order: command-line flag > environment > config file.
Files live in the per-user config directory:

- config.json: {"team_id": ..., "workspace_id": ...}
- credentials.json: {"api_key": ...}

Both are written atomically and restricted to the owner.
"""

import json
import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv

from clickup_cli.core.client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, CLIError, ValidationError

logger = logging.getLogger(__name__)

APP_NAME = "clickup-cli"
ENV_PREFIX = "CLICKUP_CLI"

API_KEY_ENV = "CLICKUP_API_KEY"
WORKSPACE_ENV = "CLICKUP_WORKSPACE_ID"
TEAM_ENV = "CLICKUP_TEAM_ID"
BASE_URL_ENV = "CLICKUP_BASE_URL"
TIMEOUT_ENV = "CLICKUP_TIMEOUT"

CONFIG_FILE = "config.json"
CREDENTIALS_FILE = "credentials.json"


class ConfigError(CLIError):
    """Config directory or file could not be read or written."""


# =============================================================================
# Setup
# =============================================================================


def load_env() -> None:
    """Load a .env file from the working directory. Real env vars win."""
    path = find_dotenv(usecwd=True)
    if path:
        load_dotenv(path, override=False)
        logger.debug("loaded environment from %s", path)


def setup_logging(verbose: bool = False) -> None:
    """Send log records to stderr; DEBUG with --verbose, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


# =============================================================================
# Paths
# =============================================================================


def config_dir() -> Path:
    """
    Platform-specific config directory.

    macOS: ~/Library/Application Support/clickup-cli
    Windows: %APPDATA%\\clickup-cli
    Others: $XDG_CONFIG_HOME/clickup-cli (default ~/.config/clickup-cli)
    """
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME
    if sys.platform == "win32":
        app_data = os.environ.get("APPDATA")
        if not app_data:
            raise ConfigError("config directory error: APPDATA not set")
        return Path(app_data) / APP_NAME
    config_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(config_home) / APP_NAME


def ensure_config_dir() -> Path:
    path = config_dir()
    try:
        path.mkdir(mode=0o700, parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigError(f"config directory error: create config directory: {e}") from e
    return path


def config_path() -> Path:
    return config_dir() / CONFIG_FILE


def credentials_path() -> Path:
    return config_dir() / CREDENTIALS_FILE


# =============================================================================
# File helpers
# =============================================================================


def _read_json(path: Path) -> dict[str, Any]:
    """Read a JSON object; a missing file reads as empty."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as e:
        raise ConfigError(f"read {path.name}: {e}") from e
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise ConfigError(f"parse {path.name}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"parse {path.name}: expected a JSON object")
    return data


def _write_json(path: Path, data: dict[str, Any]) -> None:
    """Write JSON atomically (temp file then rename), owner read/write only."""
    ensure_config_dir()
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}_tmp_")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        os.chmod(tmp_path, 0o600)
        os.replace(tmp_path, path)
    except OSError as e:
        try:
            os.remove(tmp_path)
        except OSError:
            pass
        raise ConfigError(f"write {path.name}: {e}") from e
    logger.debug("wrote %s", path)


def _update(path: Path, key: str, value: str | None) -> None:
    data = _read_json(path)
    if value:
        data[key] = value
    else:
        data.pop(key, None)
    _write_json(path, data)


# =============================================================================
# Stored values
# =============================================================================


def get_team_id() -> str:
    return _read_json(config_path()).get("team_id") or ""


def set_team_id(team_id: str) -> None:
    _update(config_path(), "team_id", team_id)


def get_workspace_id() -> str:
    return _read_json(config_path()).get("workspace_id") or ""


def set_workspace_id(workspace_id: str) -> None:
    _update(config_path(), "workspace_id", workspace_id)


def get_api_key() -> str:
    return _read_json(credentials_path()).get("api_key") or ""


def set_api_key(api_key: str) -> None:
    """Store the API key. Surrounding whitespace is stripped."""
    api_key = api_key.strip()
    if not api_key:
        raise ValidationError("missing API key")
    _update(credentials_path(), "api_key", api_key)


def delete_api_key() -> bool:
    """Remove the stored API key. Returns False if none was stored."""
    path = credentials_path()
    data = _read_json(path)
    if not data.get("api_key"):
        return False
    data.pop("api_key")
    if data:
        _write_json(path, data)
    else:
        try:
            path.unlink()
        except OSError as e:
            raise ConfigError(f"remove {path.name}: {e}") from e
    return True


# =============================================================================
# Resolution (flag > env > file)
# =============================================================================


def api_key_source(flag: str | None = None) -> str | None:
    """Where the API key would come from: "flag", "env", "file" or None."""
    if flag:
        return "flag"
    if os.environ.get(API_KEY_ENV):
        return "env"
    if get_api_key():
        return "file"
    return None


def resolve_api_key(flag: str | None = None) -> str:
    if flag:
        return flag
    if env_key := os.environ.get(API_KEY_ENV):
        logger.debug("using API key from %s", API_KEY_ENV)
        return env_key
    return get_api_key()


def resolve_team_id(flag: str | None = None) -> str:
    return flag or os.environ.get(TEAM_ENV) or get_team_id()


def resolve_workspace_id(flag: str | None = None) -> str:
    return flag or os.environ.get(WORKSPACE_ENV) or get_workspace_id()


def resolve_base_url() -> str:
    return os.environ.get(BASE_URL_ENV) or DEFAULT_BASE_URL


def resolve_timeout() -> float:
    raw = os.environ.get(TIMEOUT_ENV, "").strip()
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError:
        raise ValidationError(f"{TIMEOUT_ENV} must be a number of seconds, got {raw!r}") from None
    if timeout <= 0:
        raise ValidationError(f"{TIMEOUT_ENV} must be positive")
    return timeout
