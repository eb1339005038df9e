from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

from ocibridge.config import ToolExecutorConfig
from ocibridge.container_tools.engine import (
    WAIT_CONDITION_NOT_RUNNING,
    BindSpec,
    ContainerEngine,
    FetchOptions,
    ImageFetcher,
)
from ocibridge.image import Image, ImageFile
from ocibridge.utils import logger
from ocibridge.utils.exceptions import (
    ContainerCreateError,
    ContainerRemoveError,
    ContainerRunError,
    ContainerStartError,
    DestinationCreateError,
    ToolExecutorError,
    ToolFetchError,
)

log = logger.setup(name="skopeo")

DOCKER_DAEMON_TRANSPORT = "docker-daemon:"
OCI_TRANSPORT = "oci:"


@dataclass
class TransferResult:
    command: list[str]
    binds: list[BindSpec]
    container_id: str
    exit_code: int
    elapsed: timedelta
    # set when the transfer worked but its container could not be removed
    cleanup_error: Optional[ContainerRemoveError] = None

    @property
    def succeeded(self) -> bool:
        return self.cleanup_error is None


@dataclass
class SkopeoToolExecutor:
    """Copies images between the docker daemon and OCI layout directories by
    running skopeo in a throwaway container.

    The container gets the host directory mounted at ``/oci`` and the docker
    socket mounted at its host path, so skopeo talks to the same daemon that
    runs it.

    Parameters
    ----------
    image_fetcher : ImageFetcher
        Used by ``init`` to make the skopeo image available.
    engine : ContainerEngine
        Creates, starts, waits on and removes the tool container.
    config : ToolExecutorConfig
        Tool image, socket path and cleanup settings. Read from the
        environment when not given.
    """

    image_fetcher: ImageFetcher
    engine: ContainerEngine
    config: ToolExecutorConfig = field(default_factory=ToolExecutorConfig)

    def init(self, options: Optional[FetchOptions] = None) -> None:
        """Make sure the skopeo image is present. Safe to call repeatedly."""
        log.info(
            "Fetching skopeo tool %s, required for exporting using OCI layout format",
            self.config.tool_image,
        )
        try:
            skopeo_image = self.image_fetcher.fetch(
                self.config.tool_image, options or FetchOptions()
            )
        except Exception as e:
            raise ToolFetchError(
                f"fetching skopeo image {self.config.tool_image}: {e}"
            ) from e
        log.debug("skopeo tool %s successfully downloaded", skopeo_image.name)

    def copy_to_oci(
        self, image_ref: str, path: Path | str, timeout: Optional[float] = None
    ) -> TransferResult:
        """Export ``image_ref`` from the docker daemon into the OCI layout
        rooted at ``path``."""
        self._mkdir_all(image_ref, path)
        command = self.copy_command(
            Image(url=image_ref, transport=DOCKER_DAEMON_TRANSPORT),
            self._oci_file(image_ref),
        )
        return self._run(command, path, timeout=timeout)

    def copy_to_daemon(
        self,
        path: Path | str,
        reference: Image | str,
        timeout: Optional[float] = None,
    ) -> TransferResult:
        """Load ``reference`` from the OCI layout rooted at ``path`` into the
        docker daemon.

        The layout side is addressed by the full reference while the daemon
        side only gets the repository name, matching skopeo's addressing.
        """
        if isinstance(reference, str):
            reference = Image.from_string(reference)
        elif not reference.name:
            reference = Image.from_string(reference.url, transport=reference.transport)
        command = self.copy_command(
            self._oci_file(str(reference.from_image(transport=""))),
            Image(url=reference.registry_path, transport=DOCKER_DAEMON_TRANSPORT),
        )
        return self._run(command, path, timeout=timeout)

    @classmethod
    def copy_command(cls, src: Image | ImageFile, dest: Image | ImageFile) -> list[str]:
        return ["copy", f"{src}", f"{dest}"]

    def _oci_file(self, image_ref: str) -> ImageFile:
        return ImageFile(
            file_path=f"{self.config.oci_mount_point}/{image_ref}",
            transport=OCI_TRANSPORT,
        )

    def _mkdir_all(self, image_ref: str, path: Path | str) -> Path:
        # drops a ":tag" suffix; registries with a port lose everything after the host
        image_ref_without_tag = image_ref.split(":", 1)[0]
        dest_path = Path(path, image_ref_without_tag)
        try:
            dest_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DestinationCreateError(
                f"creating destination path {dest_path}: {e}"
            ) from e
        return dest_path

    def _binds(self, host_path: Path | str) -> list[BindSpec]:
        return [
            BindSpec(str(host_path), self.config.oci_mount_point),
            BindSpec(self.config.docker_socket, self.config.docker_socket),
        ]

    def _run(
        self, command: list[str], host_path: Path | str, timeout: Optional[float] = None
    ) -> TransferResult:
        binds = self._binds(host_path)
        try:
            container_id = self.engine.create_container(
                self.config.tool_image, command, binds, tty=False
            )
        except Exception as e:
            raise ContainerCreateError(
                f"creating container for running command {command}: {e}"
            ) from e

        try:
            exit_code, elapsed = self._start_and_wait(
                container_id, command, binds, timeout
            )
        except ToolExecutorError as transfer_error:
            transfer_error.cleanup_error = self._remove(container_id)
            raise
        except BaseException:
            # e.g. KeyboardInterrupt while blocked on the wait
            self._remove(container_id)
            raise

        result = TransferResult(
            command=command,
            binds=binds,
            container_id=container_id,
            exit_code=exit_code,
            elapsed=elapsed,
            cleanup_error=self._remove(container_id),
        )
        if result.cleanup_error and self.config.strict_cleanup:
            raise result.cleanup_error
        return result

    def _start_and_wait(
        self,
        container_id: str,
        command: list[str],
        binds: list[BindSpec],
        timeout: Optional[float],
    ) -> tuple[int, timedelta]:
        try:
            self.engine.start_container(container_id)
        except Exception as e:
            raise ContainerStartError(
                f"starting container for running command {command}: {e}"
            ) from e

        start = datetime.now()
        log.info(
            "Executing skopeo %s with host bindings: %s",
            command,
            [str(bind) for bind in binds],
        )
        try:
            exit_code = self.engine.wait_container(
                container_id, WAIT_CONDITION_NOT_RUNNING, timeout=timeout
            ).result(timeout=timeout)
        except FutureTimeoutError as e:
            raise ContainerRunError(
                f"running container executing command {command}: "
                f"no exit within {timeout}s"
            ) from e
        except Exception as e:
            raise ContainerRunError(
                f"running container executing command {command}: {e}"
            ) from e
        elapsed = datetime.now() - start
        log.info("skopeo %s operation took %s", command, elapsed)

        if exit_code != 0:
            raise ContainerRunError(
                f"skopeo {command} exited with status {exit_code}",
                exit_code=exit_code,
            )
        return exit_code, elapsed

    def _remove(self, container_id: str) -> Optional[ContainerRemoveError]:
        """Force remove the container, bounded by the configured timeout
        rather than the caller's. Returns the failure instead of raising it."""
        try:
            self.engine.remove_container(
                container_id, force=True, timeout=self.config.remove_timeout
            )
        except Exception as e:
            log.warning("Failed to remove container %s: %s", container_id, e)
            remove_error = ContainerRemoveError(
                f"removing container {container_id}: {e}", container_id=container_id
            )
            remove_error.__cause__ = e
            return remove_error
        log.debug("Removed container %s", container_id)
        return None
