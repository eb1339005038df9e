import os
from abc import ABC
from dataclasses import dataclass
from typing import Optional


@dataclass
class ContainerTool(ABC):
    """
    An abstract base class that represents a container CLI tool.

    Attributes:
        docker_config_dir (Optional[str]): Path to a docker config directory, used for
            registry credentials. Default is None.
        docker_host (Optional[str]): Engine endpoint passed as DOCKER_HOST. Default is None.

    Methods:
        _generate_arg_list_from_list(flag: str, arg_list: list[str]) -> list[str]:
            A class method that pairs each element of a list with a flag. Useful for
            subprocess commands where the same flag is passed multiple times.

        _subprocess_env() -> dict:
            The environment the tool's subprocesses run with.
    """

    docker_config_dir: Optional[str] = None
    docker_host: Optional[str] = None

    @classmethod
    # get sub lists of [flag, val] and flatten list
    # e.g. ['--volume', '/data:/oci', '--volume', '/var/run/docker.sock:/var/run/docker.sock']
    def _generate_arg_list_from_list(cls, flag: str, arg_list: list[str]) -> list[str]:
        return [item for val in arg_list for item in (flag, str(val))]

    def _subprocess_env(self) -> dict:
        env = {"PATH": os.environ["PATH"]}
        if self.docker_config_dir:
            env["DOCKER_CONFIG"] = self.docker_config_dir
        if self.docker_host:
            env["DOCKER_HOST"] = self.docker_host
        return env
