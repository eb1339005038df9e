import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path

import jsonschema
import yaml

from ocibridge.envs import Envs
from ocibridge.utils import logger
from ocibridge.utils.exceptions import ConfigValidationError

log = logger.setup(name="config")

OCI_MOUNT_POINT = "/oci"
SCHEMA_PATH = Path(__file__).parent / "schemas" / "config.schema.json"


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _default_docker_socket() -> str:
    envs = Envs()
    docker_host = envs.docker_host
    # an explicit unix DOCKER_HOST wins over the default socket path
    if docker_host.startswith("unix://") and not os.getenv("DOCKER_SOCKET"):
        return docker_host.removeprefix("unix://")
    return envs.docker_socket


@dataclass
class ToolExecutorConfig:
    """Settings for running the skopeo tool container.

    Defaults come from the environment (see ``Envs``), so a config built with
    no arguments follows ``SKOPEO_IMAGE``, ``DOCKER_SOCKET``,
    ``CONTAINER_REMOVE_TIMEOUT`` and ``STRICT_CLEANUP``.
    """

    tool_image: str = field(default_factory=lambda: Envs().skopeo_image)
    docker_socket: str = field(default_factory=_default_docker_socket)
    remove_timeout: float = field(
        default_factory=lambda: Envs().container_remove_timeout
    )
    strict_cleanup: bool = field(
        default_factory=lambda: _env_bool(Envs().strict_cleanup)
    )
    # fixed in-container root of the OCI layout, not configurable
    oci_mount_point: str = field(default=OCI_MOUNT_POINT, init=False)

    def __post_init__(self) -> None:
        # CONTAINER_REMOVE_TIMEOUT arrives as a string
        try:
            self.remove_timeout = float(self.remove_timeout)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(
                f"remove_timeout must be a number of seconds, got {self.remove_timeout!r}"
            ) from e
        if self.remove_timeout <= 0:
            raise ConfigValidationError(
                f"remove_timeout must be positive, got {self.remove_timeout}"
            )

    @classmethod
    def from_env(cls) -> "ToolExecutorConfig":
        return cls()

    @classmethod
    def from_yaml(
        cls, config_path: Path | str, schema_path: Path | str = SCHEMA_PATH
    ) -> "ToolExecutorConfig":
        """Load settings from a YAML file, validated against the config
        schema. Keys missing from the file keep their environment defaults.
        """
        config_path = Path(config_path)
        log.debug("Loading config from %s", config_path)
        try:
            with config_path.open("r", encoding="utf-8") as f:
                content = yaml.safe_load(f) or {}
        except OSError as e:
            log.error("Config %s could not be read", config_path)
            raise ConfigValidationError(f"{config_path}: {e.strerror or e}") from e
        except yaml.YAMLError as e:
            log.error("Config %s is not valid YAML", config_path)
            raise ConfigValidationError(f"{config_path}: {e}") from e
        with Path(schema_path).open("r", encoding="utf-8") as f:
            schema_content = json.load(f)
        try:
            jsonschema.Draft201909Validator(schema_content).validate(content)
        except jsonschema.ValidationError as ex:
            log.error("Config %s failed jsonschema validation", config_path)
            raise ConfigValidationError(f"{config_path}: {ex.message}") from ex
        init_names = {f.name for f in fields(cls) if f.init}
        return cls(**{k: v for k, v in content.items() if k in init_names})
