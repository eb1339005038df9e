import json
import subprocess
from dataclasses import dataclass
from typing import Optional

from ocibridge.container_tools.container_tool import ContainerTool
from ocibridge.container_tools.engine import (
    FetchedImage,
    FetchOptions,
    ImageFetcher,
    PullPolicy,
)
from ocibridge.utils import logger
from ocibridge.utils.decorators import subprocess_error_handler
from ocibridge.utils.exceptions import GenericSubprocessError, ImageNotFoundError

log = logger.setup(name="image_fetcher")


@dataclass
class DockerImageFetcher(ContainerTool, ImageFetcher):
    """Pulls images into the docker daemon according to a pull policy."""

    executable: str = "docker"

    def _inspect(self, image_ref: str) -> Optional[dict]:
        """Return the daemon's inspect data for ``image_ref``, or None if the
        image is not in the local store."""
        try:
            result = subprocess.run(
                args=[self.executable, "image", "inspect", image_ref],
                capture_output=True,
                check=True,
                encoding="utf-8",
                env=self._subprocess_env(),
            )
        except subprocess.CalledProcessError:
            return None
        inspect_result = json.loads(result.stdout)
        return inspect_result[0] if inspect_result else None

    @subprocess_error_handler(logging_message="DockerImageFetcher.pull failed")
    def pull(self, image_ref: str, platform: Optional[str] = None) -> None:
        cmd = [self.executable, "image", "pull"]
        cmd += ["--platform", platform] if platform else []
        cmd += [image_ref]
        log.info(cmd)
        subprocess.run(
            args=cmd,
            capture_output=True,
            check=True,
            encoding="utf-8",
            env=self._subprocess_env(),
        )

    def fetch(
        self, image_ref: str, options: Optional[FetchOptions] = None
    ) -> FetchedImage:
        options = options or FetchOptions()
        inspect_result = None
        if options.pull_policy != PullPolicy.ALWAYS:
            inspect_result = self._inspect(image_ref)
            if inspect_result is None and options.pull_policy == PullPolicy.NEVER:
                raise ImageNotFoundError(
                    f"{image_ref} is not in the local store and pull policy is never"
                )
        if inspect_result is None:
            self.pull(image_ref, platform=options.platform)
            inspect_result = self._inspect(image_ref)
            if inspect_result is None:
                raise GenericSubprocessError(f"{image_ref} missing after pull")
        else:
            log.debug("%s already present, not pulling", image_ref)
        return FetchedImage(name=image_ref, image_id=inspect_result.get("Id", ""))
