import subprocess
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from ocibridge.container_tools.container_tool import ContainerTool
from ocibridge.container_tools.engine import (
    WAIT_CONDITION_NOT_RUNNING,
    BindSpec,
    ContainerEngine,
)
from ocibridge.utils import logger
from ocibridge.utils.decorators import subprocess_error_handler

log = logger.setup(name="docker")


@dataclass
class DockerEngine(ContainerTool, ContainerEngine):
    """Drives containers through the docker CLI."""

    executable: str = "docker"

    def _run_cmd(self, cmd: list[str], timeout: Optional[float] = None) -> str:
        log.debug(cmd)
        result = subprocess.run(
            args=cmd,
            capture_output=True,
            check=True,
            encoding="utf-8",
            timeout=timeout,
            env=self._subprocess_env(),
        )
        return result.stdout.strip()

    @subprocess_error_handler(logging_message="DockerEngine.create_container failed")
    def create_container(
        self, image: str, command: list[str], binds: list[BindSpec], tty: bool = False
    ) -> str:
        cmd = [self.executable, "container", "create"]
        cmd += ["--tty"] if tty else []
        cmd += self._generate_arg_list_from_list("--volume", binds)
        cmd += [image, *command]
        # docker may print pull progress before the id
        return self._run_cmd(cmd).splitlines()[-1]

    @subprocess_error_handler(logging_message="DockerEngine.start_container failed")
    def start_container(self, container_id: str) -> None:
        self._run_cmd([self.executable, "container", "start", container_id])

    @subprocess_error_handler(logging_message="DockerEngine.wait_container failed")
    def _wait(self, container_id: str, timeout: Optional[float] = None) -> int:
        # subprocess.run kills the docker CLI once the timeout expires
        return int(
            self._run_cmd(
                [self.executable, "container", "wait", container_id], timeout=timeout
            )
        )

    def wait_container(
        self,
        container_id: str,
        condition: str = WAIT_CONDITION_NOT_RUNNING,
        timeout: Optional[float] = None,
    ) -> Future:
        # the CLI only waits for the container to stop running
        if condition != WAIT_CONDITION_NOT_RUNNING:
            raise ValueError(f"Unsupported wait condition: {condition}")
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="docker-wait")
        future = pool.submit(self._wait, container_id, timeout)
        pool.shutdown(wait=False)
        return future

    @subprocess_error_handler(logging_message="DockerEngine.remove_container failed")
    def remove_container(
        self, container_id: str, force: bool = False, timeout: Optional[float] = None
    ) -> None:
        cmd = [self.executable, "container", "rm"]
        cmd += ["--force"] if force else []
        cmd += [container_id]
        self._run_cmd(cmd, timeout=timeout)
