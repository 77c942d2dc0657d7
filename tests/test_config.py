"""Tests for configuration loading and startup failure."""
import pytest
from pydantic import ValidationError

from linkedin_navigator_pkg import config
from linkedin_navigator_pkg.__main__ import main
from linkedin_navigator_pkg.config import ClientConfig
from linkedin_navigator_pkg.exceptions import ConfigurationError


class TestFromEnv:
    def test_missing_cookie_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config, "LI_AT_COOKIE", None)

        with pytest.raises(ConfigurationError) as excinfo:
            ClientConfig.from_env()

        assert "LI_AT_COOKIE" in str(excinfo.value)

    def test_blank_cookie_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config, "LI_AT_COOKIE", "   ")

        with pytest.raises(ConfigurationError):
            ClientConfig.from_env()

    def test_reads_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config, "LI_AT_COOKIE", " AQEDcookie ")
        monkeypatch.setattr(config, "JSESSIONID", "")
        monkeypatch.setattr(config, "HEADLESS", False)
        monkeypatch.setattr(config, "SETTLE_MS", "500")
        monkeypatch.setattr(config, "NAV_TIMEOUT_MS", "60000")
        monkeypatch.setattr(config, "HTTP_TIMEOUT", "12.5")

        cfg = ClientConfig.from_env()

        assert cfg.li_at == "AQEDcookie"
        assert cfg.jsessionid is None
        assert cfg.headless is False
        assert cfg.settle_ms == 500
        assert cfg.navigation_timeout_ms == 60000
        assert cfg.http_timeout == 12.5

    def test_malformed_number_is_a_configuration_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config, "LI_AT_COOKIE", "AQEDcookie")
        monkeypatch.setattr(config, "NAV_TIMEOUT_MS", "45s")

        with pytest.raises(ConfigurationError) as excinfo:
            ClientConfig.from_env()

        assert "SCRAPER_NAV_TIMEOUT_MS" in str(excinfo.value)


class TestClientConfig:
    def test_empty_cookie_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ClientConfig(li_at="")

    def test_defaults(self) -> None:
        cfg = ClientConfig(li_at="x")

        assert cfg.headless is True
        assert cfg.navigation_timeout_ms == 45000
        assert cfg.settle_ms == 3000


class TestStartup:
    def test_exits_nonzero_without_cookie(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
        monkeypatch.setattr(config, "LI_AT_COOKIE", None)

        assert main([]) == 1
        captured = capsys.readouterr()
        assert "LI_AT_COOKIE" in captured.err
        assert captured.out == ""

    def test_exits_nonzero_on_malformed_setting(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
    ) -> None:
        monkeypatch.setattr(config, "LI_AT_COOKIE", "AQEDcookie")
        monkeypatch.setattr(config, "SETTLE_MS", "soon")

        assert main([]) == 1
        assert "SCRAPER_SETTLE_MS" in capsys.readouterr().err
