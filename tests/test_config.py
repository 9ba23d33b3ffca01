"""Tests for configuration helpers."""

import pytest

from build_chatter.config import Settings, parse_login_server_url


def test_settings_defaults_to_production_login_server() -> None:
    settings = Settings(chatter_username="u", chatter_password="p")

    assert settings.chatter_login_server_url == "https://login.salesforce.com"
    assert settings.http_timeout_seconds == 30.0


def test_settings_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHATTER_USERNAME", "ci@example.com")
    monkeypatch.setenv("CHATTER_PASSWORD", "pw")
    monkeypatch.setenv("CHATTER_LOGIN_SERVER_URL", "https://test.salesforce.com")

    settings = Settings()

    assert settings.chatter_username == "ci@example.com"
    assert settings.chatter_login_server_url == "https://test.salesforce.com"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("https://login.salesforce.com", "https://login.salesforce.com"),
        (" https://test.salesforce.com/ ", "https://test.salesforce.com"),
        ("http://localhost:8080", "http://localhost:8080"),
    ],
)
def test_parse_login_server_url(raw: str, expected: str) -> None:
    assert parse_login_server_url(raw) == expected


@pytest.mark.parametrize("raw", ["", "login.salesforce.com", "ftp://login", "https://"])
def test_parse_login_server_url_rejects_invalid(raw: str) -> None:
    with pytest.raises(ValueError, match="absolute"):
        parse_login_server_url(raw)
