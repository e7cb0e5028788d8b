"""Tests for accountant.config."""

import stat
import tomllib
from pathlib import Path

import pytest

from accountant.config import (
    AppConfig,
    create_default_config,
    get_app_config,
    get_config_path,
    load_config,
    resolve_config,
)
from accountant.exchange import API_BASE_URL


@pytest.fixture(autouse=True)
def xdg_dirs(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    return tmp_path


class TestConfigPath:
    """Tests for get_config_path."""

    def test_uses_xdg_config_home(self, xdg_dirs: Path) -> None:
        """Should place config.toml under XDG_CONFIG_HOME."""
        assert get_config_path() == xdg_dirs / "config" / "accountant" / "config.toml"

    def test_falls_back_to_dot_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should use ~/.config without XDG_CONFIG_HOME."""
        monkeypatch.delenv("XDG_CONFIG_HOME")

        assert get_config_path() == Path.home() / ".config" / "accountant" / "config.toml"


class TestDefaultConfig:
    """Tests for create_default_config and get_app_config."""

    def test_missing_file_gives_defaults(self, xdg_dirs: Path) -> None:
        """Should resolve to defaults when no file exists."""
        config = get_app_config()

        assert config == AppConfig(ledger_path=xdg_dirs / "data" / "accountant" / "ledger.json")
        assert config.rates_base_url == API_BASE_URL
        assert config.rates_base_currency == "USD"
        assert config.rates_timeout == 10.0

    def test_created_file_round_trips(self, xdg_dirs: Path) -> None:
        """Should write a file that resolves to the defaults."""
        create_default_config()

        assert get_app_config() == get_app_config(xdg_dirs / "missing.toml")

    def test_created_file_is_private(self) -> None:
        """Should restrict the config file to its owner."""
        create_default_config()

        mode = stat.S_IMODE(get_config_path().stat().st_mode)
        assert mode == 0o600

    def test_invalid_toml(self) -> None:
        """Should surface TOML syntax errors."""
        path = get_config_path()
        path.parent.mkdir(parents=True)
        path.write_text("[rates\n")

        with pytest.raises(tomllib.TOMLDecodeError):
            load_config()


class TestResolveConfig:
    """Tests for resolve_config."""

    def test_overrides(self, tmp_path: Path) -> None:
        """Should read every supported key."""
        config = resolve_config(
            {
                "ledger": {"path": str(tmp_path / "mine.json")},
                "rates": {"base_url": "https://rates.example/", "base_currency": "eur", "timeout": 2},
            }
        )

        assert config == AppConfig(
            ledger_path=tmp_path / "mine.json",
            rates_base_url="https://rates.example/",
            rates_base_currency="EUR",
            rates_timeout=2.0,
        )

    def test_home_is_expanded(self) -> None:
        """Should expand ~ in the ledger path."""
        config = resolve_config({"ledger": {"path": "~/ledger.json"}})

        assert config.ledger_path == Path.home() / "ledger.json"

    @pytest.mark.parametrize("timeout", [0, -1, "fast", True])
    def test_invalid_timeout(self, timeout: object) -> None:
        """Should refuse timeouts that are not positive numbers."""
        with pytest.raises(ValueError):
            resolve_config({"rates": {"timeout": timeout}})
