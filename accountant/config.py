"""Configuration file management for accountant."""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomli_w

from accountant.domain.models import DEFAULT_CURRENCY, Currency
from accountant.exchange import API_BASE_URL, DEFAULT_TIMEOUT
from accountant.store.schema import get_ledger_path


@dataclass(frozen=True)
class AppConfig:
    """Resolved application configuration."""

    ledger_path: Path
    rates_base_url: str = API_BASE_URL
    rates_base_currency: Currency = DEFAULT_CURRENCY
    rates_timeout: float = DEFAULT_TIMEOUT


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "accountant" / "config.toml"


def default_config() -> dict[str, Any]:
    """Default configuration document."""
    return {
        "ledger": {
            "path": str(get_ledger_path()),
        },
        "rates": {
            "base_url": API_BASE_URL,
            "base_currency": DEFAULT_CURRENCY,
            "timeout": DEFAULT_TIMEOUT,
        },
    }


def create_default_config(config_path: Path | None = None) -> None:
    """Create default config file with secure permissions.

    Args:
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "wb") as f:
        tomli_w.dump(default_config(), f)

    os.chmod(config_path, 0o600)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "rb") as f:
        return tomllib.load(f)


def resolve_config(config: dict[str, Any]) -> AppConfig:
    """Resolve a configuration document into an AppConfig.

    Missing keys fall back to defaults.

    Args:
        config: Configuration dictionary as loaded from TOML.

    Returns:
        AppConfig with all values filled in.

    Raises:
        ValueError: If a value has the wrong type.
    """
    ledger = config.get("ledger", {})
    rates = config.get("rates", {})

    ledger_path = ledger.get("path")
    timeout = rates.get("timeout", DEFAULT_TIMEOUT)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ValueError(f"rates.timeout must be a positive number, got {timeout!r}")

    return AppConfig(
        ledger_path=Path(ledger_path).expanduser() if ledger_path else get_ledger_path(),
        rates_base_url=str(rates.get("base_url", API_BASE_URL)),
        rates_base_currency=Currency(str(rates.get("base_currency", DEFAULT_CURRENCY)).upper()),
        rates_timeout=float(timeout),
    )


def get_app_config(config_path: Path | None = None) -> AppConfig:
    """Load and resolve configuration, using defaults if no file exists.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Resolved AppConfig.
    """
    try:
        config = load_config(config_path)
    except FileNotFoundError:
        config = {}
    return resolve_config(config)
