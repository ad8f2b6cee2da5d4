"""Configuration management for agent-browser.

Loads user settings from ~/.config/agent-browser/config.cfg, a project
local .env file, and AGENT_BROWSER_* environment variables.
Provides SessionConfig (which daemon to talk to) and ClientSettings
(timeouts, readiness polling, daemon launch options).
"""

import configparser
from dataclasses import dataclass, field
import os
from pathlib import Path
import tempfile
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values

# Default location for user configuration.
CONFIG_PATH = Path.home() / ".config" / "agent-browser" / "config.cfg"

SESSION_ENV = "AGENT_BROWSER_SESSION"
DAEMON_ENV = "AGENT_BROWSER_DAEMON"
DEFAULT_SESSION = "default"

# config.cfg key -> environment override
ENV_OVERRIDES = {
    "read_timeout": "AGENT_BROWSER_READ_TIMEOUT_S",
    "write_timeout": "AGENT_BROWSER_WRITE_TIMEOUT_S",
    "start_timeout": "AGENT_BROWSER_START_TIMEOUT_S",
    "poll_interval": "AGENT_BROWSER_POLL_INTERVAL_S",
    "node_path": "AGENT_BROWSER_NODE",
    "daemon_path": "AGENT_BROWSER_DAEMON_PATH",
    "log_level": "AGENT_BROWSER_LOG_LEVEL",
}


def _default_tmp_dir() -> Path:
    return Path(tempfile.gettempdir())


@dataclass(frozen=True)
class SessionConfig:
    """Identifies one daemon instance and where its files live."""
    name: str = DEFAULT_SESSION
    tmp_dir: Path = field(default_factory=_default_tmp_dir)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SessionConfig":
        environ = os.environ if environ is None else environ
        return cls(name=environ.get(SESSION_ENV, DEFAULT_SESSION))


@dataclass(frozen=True)
class ReadinessPolicy:
    """How long, and how often, to look for the socket after a spawn."""
    interval: float = 0.1
    timeout: float = 5.0


@dataclass
class ClientSettings:
    read_timeout: float = 30.0
    write_timeout: float = 5.0
    readiness: ReadinessPolicy = field(default_factory=ReadinessPolicy)
    node_path: str = "node"
    daemon_path: Optional[Path] = None
    log_level: str = "WARNING"


def load_raw_config(path: Path = CONFIG_PATH) -> Dict[str, str]:
    """
    Load configuration values from the standard config path.
    Values are returned with lowercase keys for convenience.
    """
    cfg = configparser.ConfigParser()
    data: Dict[str, str] = {}

    if path.exists():
        cfg.read(path)
        if "DEFAULT" in cfg:
            data.update({k.lower(): v for k, v in cfg["DEFAULT"].items()})

    return data


def load_env_file(path: Optional[Path] = None) -> Dict[str, str]:
    """
    Read AGENT_BROWSER_* values from a .env file without touching os.environ.

    Args:
        path: .env location, defaults to the current working directory

    Returns:
        Mapping of variable name to value (unset values are dropped)
    """
    path = path or Path.cwd() / ".env"
    if not path.exists():
        return {}
    values = dotenv_values(path)
    return {
        key: value
        for key, value in values.items()
        if key.startswith("AGENT_BROWSER_") and value is not None
    }


def _get_float(raw: Dict[str, str], key: str, default: float, positive: bool = False) -> float:
    value = raw.get(key)
    if value is None or str(value).strip() == "":
        return default
    try:
        parsed = float(value)
    except ValueError:
        raise ValueError(f"Invalid value for '{key}': {value!r} is not a number.")
    if parsed < 0:
        raise ValueError(f"Invalid value for '{key}': must not be negative.")
    # a zero socket timeout would make the socket non-blocking
    if positive and parsed == 0:
        raise ValueError(f"Invalid value for '{key}': must be greater than zero.")
    return parsed


def get_client_settings(
    raw: Optional[Dict[str, str]] = None,
    environ: Optional[Mapping[str, str]] = None,
    env_file: Optional[Path] = None,
) -> ClientSettings:
    """
    Build ClientSettings from raw configuration values.

    Environment variables win over .env entries, which win over config.cfg.
    Raises ValueError if a numeric setting cannot be parsed.
    """
    raw = dict(load_raw_config() if raw is None else raw)
    environ = os.environ if environ is None else environ

    overrides = load_env_file(env_file)
    overrides.update({k: v for k, v in environ.items() if k.startswith("AGENT_BROWSER_")})
    for key, env_name in ENV_OVERRIDES.items():
        value = overrides.get(env_name)
        if value is not None and str(value).strip() != "":
            raw[key] = value

    daemon_path = raw.get("daemon_path", "").strip()

    return ClientSettings(
        read_timeout=_get_float(raw, "read_timeout", 30.0, positive=True),
        write_timeout=_get_float(raw, "write_timeout", 5.0, positive=True),
        readiness=ReadinessPolicy(
            interval=_get_float(raw, "poll_interval", 0.1),
            timeout=_get_float(raw, "start_timeout", 5.0),
        ),
        node_path=raw.get("node_path", "").strip() or "node",
        daemon_path=Path(daemon_path).expanduser() if daemon_path else None,
        log_level=raw.get("log_level", "").strip().upper() or "WARNING",
    )
