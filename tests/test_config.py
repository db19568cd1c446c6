"""Tests for Settings defaults, environment overrides and validation."""

import pytest
from pydantic import ValidationError

from glacier.config import Settings


def test_defaults(settings):
    assert settings.verifier_container == "glacier-verifier"
    assert settings.verifier_image == "docker.io/glaciernetwork/glacier-verifier:v0.0.3"
    assert settings.watchtower_container == "glacier-watchtower"
    assert settings.watchtower_interval == 3600
    assert settings.docker_socket == "/var/run/docker.sock"
    assert settings.private_key is None
    assert settings.command_timeout is None


def test_environment_override(monkeypatch):
    monkeypatch.setenv("GLACIER_WATCHTOWER_INTERVAL", "600")
    monkeypatch.setenv("GLACIER_VERIFIER_IMAGE", "glaciernetwork/glacier-verifier:v0.0.4")
    s = Settings(_env_file=None)
    assert s.watchtower_interval == 600
    assert s.verifier_image == "glaciernetwork/glacier-verifier:v0.0.4"


def test_private_key_is_secret(settings_factory):
    s = settings_factory(private_key="ab" * 32)
    assert "ab" * 32 not in repr(s)
    assert s.private_key.get_secret_value() == "ab" * 32


@pytest.mark.parametrize("interval", [0, -5])
def test_interval_must_be_positive(settings_factory, interval):
    with pytest.raises(ValidationError, match="WATCHTOWER_INTERVAL"):
        settings_factory(watchtower_interval=interval)


def test_log_level_is_checked(settings_factory):
    with pytest.raises(ValidationError, match="LOG_LEVEL"):
        settings_factory(log_level="loud")


def test_timeout_must_be_positive(settings_factory):
    with pytest.raises(ValidationError, match="COMMAND_TIMEOUT"):
        settings_factory(command_timeout=0)
