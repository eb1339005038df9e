#!/usr/bin/env python3

import pytest

from ocibridge.config import ToolExecutorConfig
from ocibridge.envs import Envs
from ocibridge.utils import logger
from ocibridge.utils.exceptions import ConfigValidationError

log = logger.setup("test_config")

ENV_NAMES = [
    "SKOPEO_IMAGE",
    "DOCKER_SOCKET",
    "DOCKER_HOST",
    "CONTAINER_REMOVE_TIMEOUT",
    "STRICT_CLEANUP",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_envs(monkeypatch, caplog):
    caplog.set_level("DEBUG", logger="envs")
    log.info("Test defaults are returned when unset")
    envs = Envs()
    assert envs.skopeo_image == "quay.io/skopeo/stable:latest"
    assert envs.docker_socket == "/var/run/docker.sock"
    assert envs.docker_host == ""
    assert "DOCKER_HOST is not set" in caplog.text

    log.info("Test set values win over defaults")
    monkeypatch.setenv("SKOPEO_IMAGE", "mirror.local/skopeo:1.14")
    assert envs.skopeo_image == "mirror.local/skopeo:1.14"


def test_config_from_env(monkeypatch):
    log.info("Test config defaults")
    config = ToolExecutorConfig.from_env()
    assert config.tool_image == "quay.io/skopeo/stable:latest"
    assert config.docker_socket == "/var/run/docker.sock"
    assert config.remove_timeout == 60
    assert config.strict_cleanup is False
    assert config.oci_mount_point == "/oci"

    log.info("Test environment overrides")
    monkeypatch.setenv("SKOPEO_IMAGE", "mirror.local/skopeo:1.14")
    monkeypatch.setenv("CONTAINER_REMOVE_TIMEOUT", "5.5")
    monkeypatch.setenv("STRICT_CLEANUP", "true")
    monkeypatch.setenv("DOCKER_HOST", "unix:///run/user/1000/docker.sock")
    config = ToolExecutorConfig.from_env()
    assert config.tool_image == "mirror.local/skopeo:1.14"
    assert config.remove_timeout == 5.5
    assert config.strict_cleanup is True
    assert config.docker_socket == "/run/user/1000/docker.sock"

    log.info("Test an explicit socket wins over DOCKER_HOST")
    monkeypatch.setenv("DOCKER_SOCKET", "/custom/docker.sock")
    assert ToolExecutorConfig().docker_socket == "/custom/docker.sock"


def test_config_from_yaml(tmp_path, monkeypatch):
    monkeypatch.setenv("CONTAINER_REMOVE_TIMEOUT", "12")
    config_path = tmp_path / "transfer.yaml"
    config_path.write_text(
        "tool_image: mirror.local/skopeo:1.14\nstrict_cleanup: true\n", encoding="utf-8"
    )
    config = ToolExecutorConfig.from_yaml(config_path)
    assert config.tool_image == "mirror.local/skopeo:1.14"
    assert config.strict_cleanup is True
    assert config.remove_timeout == 12

    log.info("Test an empty file keeps all defaults")
    config_path.write_text("", encoding="utf-8")
    assert ToolExecutorConfig.from_yaml(config_path).tool_image == (
        "quay.io/skopeo/stable:latest"
    )


@pytest.mark.parametrize(
    "content",
    [
        "tool_image: ''\n",
        "docker_socket: relative/docker.sock\n",
        "remove_timeout: 0\n",
        "strict_cleanup: maybe\n",
        "unknown_key: 1\n",
    ],
)
def test_config_from_yaml_invalid(tmp_path, content, caplog):
    config_path = tmp_path / "transfer.yaml"
    config_path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigValidationError):
        ToolExecutorConfig.from_yaml(config_path)
    assert "failed jsonschema validation" in caplog.text


def test_config_from_yaml_unreadable(tmp_path, caplog):
    log.info("Test a missing config file is a ConfigValidationError")
    with pytest.raises(ConfigValidationError) as e:
        ToolExecutorConfig.from_yaml(tmp_path / "missing.yaml")
    assert "missing.yaml" in e.value.args[0]
    assert "could not be read" in caplog.text

    log.info("Test malformed YAML is a ConfigValidationError")
    config_path = tmp_path / "transfer.yaml"
    config_path.write_text("tool_image: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigValidationError):
        ToolExecutorConfig.from_yaml(config_path)
    assert "is not valid YAML" in caplog.text


@pytest.mark.parametrize("remove_timeout", ["sixty", "0", "-5"])
def test_config_bad_remove_timeout_env(monkeypatch, remove_timeout):
    monkeypatch.setenv("CONTAINER_REMOVE_TIMEOUT", remove_timeout)
    with pytest.raises(ConfigValidationError) as e:
        ToolExecutorConfig.from_env()
    assert "remove_timeout must be" in e.value.args[0]
