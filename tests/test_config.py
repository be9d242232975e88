import pytest
from unittest.mock import Mock

from ci_trigger.config import Config


def test_config_from_environment(monkeypatch):
    monkeypatch.setenv("API_URL", "http://build-api.local")
    monkeypatch.setenv("API_TOKEN", "secret-token")
    monkeypatch.setenv("DEFAULT_CONFIG_REF", "main")

    config = Config()

    assert config.API_URL == "http://build-api.local"
    assert config.DEFAULT_CONFIG_REF == "main"
    assert config.DEFAULT_NAMESPACE == "default"
    assert config.MAX_PAYLOAD_SIZE == 10 * 1024 * 1024


def test_print_config_masks_token(monkeypatch, config):
    info = Mock()
    monkeypatch.setattr("ci_trigger.config.logger.info", info)

    config.print_config()

    lines = [call.args[0] for call in info.call_args_list]
    assert "API_TOKEN: ***" in lines
    assert f"API_URL: {config.API_URL}" in lines
    assert not any("abc" in line for line in lines if line.startswith("API_TOKEN"))


def test_registry_uses_config(config, registry):
    assert set(registry) == {"github", "gitlab", "bitbucket", "generic"}
    assert registry["generic"].max_payload_size == config.MAX_PAYLOAD_SIZE
    assert all(p.default_config_ref == "master" for p in registry.values())


def test_registry_is_read_only(registry):
    with pytest.raises(TypeError):
        registry["gogs"] = registry["github"]
