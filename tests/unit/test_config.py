"""
Unit tests for Settings and MailboxConfig
"""

from dataclasses import FrozenInstanceError

import pytest

from latest_code.config import MailboxConfig, Settings
from latest_code.core.exceptions import ConfigMissingError


@pytest.fixture
def env():
    return {
        "IMAP_HOST": "imap.example.com",
        "IMAP_USER": "me@example.com",
        "IMAP_PASS": "secret",
    }


class TestMailboxConfig:
    """Test mailbox_config()"""

    def test_defaults(self, env):
        config = Settings(environ=env).mailbox_config()

        assert config == MailboxConfig(
            host="imap.example.com",
            user="me@example.com",
            secret="secret",
            port=993,
            use_tls=True,
            auth_timeout_ms=3000,
        )
        assert config.timeout_seconds == 3.0

    def test_custom_port_and_timeout(self, env):
        env.update({"IMAP_PORT": "1993", "IMAP_AUTH_TIMEOUT_MS": "5000", "IMAP_TLS": "false"})

        config = Settings(environ=env).mailbox_config()

        assert config.port == 1993
        assert config.auth_timeout_ms == 5000
        assert config.use_tls is False

    @pytest.mark.parametrize("key", ["IMAP_HOST", "IMAP_USER", "IMAP_PASS"])
    def test_missing_required(self, env, key):
        del env[key]

        with pytest.raises(ConfigMissingError) as exc_info:
            Settings(environ=env).mailbox_config()

        assert exc_info.value.missing == [key]

    def test_empty_value_counts_as_missing(self, env):
        env["IMAP_PASS"] = ""

        with pytest.raises(ConfigMissingError):
            Settings(environ=env).mailbox_config()

    def test_malformed_port(self, env):
        env["IMAP_PORT"] = "imaps"

        with pytest.raises(ConfigMissingError, match="IMAP_PORT"):
            Settings(environ=env).mailbox_config()

    @pytest.mark.parametrize(
        "key,value",
        [
            ("IMAP_PORT", "0"),
            ("IMAP_PORT", "-993"),
            ("IMAP_AUTH_TIMEOUT_MS", "0"),
            ("IMAP_AUTH_TIMEOUT_MS", "-1"),
            ("IMAP_AUTH_TIMEOUT_MS", "soon"),
        ],
    )
    def test_non_positive_numbers_are_misconfigured(self, env, key, value):
        env[key] = value

        with pytest.raises(ConfigMissingError) as exc_info:
            Settings(environ=env).mailbox_config()

        assert exc_info.value.missing == [key]

    def test_secret_not_in_repr(self, env):
        config = Settings(environ=env).mailbox_config()

        assert "secret" not in repr(config)
        assert "secret" not in repr(Settings(environ=env))

    def test_is_frozen(self, env):
        config = Settings(environ=env).mailbox_config()

        with pytest.raises(FrozenInstanceError):
            config.host = "other"


class TestApiKey:
    """Test is_authorized()"""

    def test_no_key_configured_allows_everything(self):
        settings = Settings(environ={})

        assert settings.auth_enabled is False
        assert settings.is_authorized(None)
        assert settings.is_authorized("anything")

    def test_empty_key_disables_auth(self):
        assert Settings(environ={"MY_API_KEY": ""}).auth_enabled is False

    def test_matching_key(self):
        assert Settings(environ={"MY_API_KEY": "k3y"}).is_authorized("k3y")

    @pytest.mark.parametrize("provided", [None, "", "wrong", "K3Y", "k3y "])
    def test_rejected_keys(self, provided):
        assert not Settings(environ={"MY_API_KEY": "k3y"}).is_authorized(provided)


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv("IMAP_HOST", "mail.example.org")
    monkeypatch.setenv("IMAP_USER", "user")
    monkeypatch.setenv("IMAP_PASS", "pass")
    monkeypatch.setenv("MY_API_KEY", "key")

    settings = Settings()

    assert settings.imap_host == "mail.example.org"
    assert settings.mailbox_configured
    assert settings.auth_enabled


def test_explicit_values_override_environment(env):
    settings = Settings(imap_host="override.example.com", environ=env)

    assert settings.mailbox_config().host == "override.example.com"
