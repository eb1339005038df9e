from abc import ABC, abstractmethod
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from typing import Optional


WAIT_CONDITION_NOT_RUNNING = "not-running"


@dataclass(frozen=True)
class BindSpec:
    """A host path exposed inside a container."""

    host_path: str
    container_path: str
    read_only: bool = False

    def __str__(self):
        bind = f"{self.host_path}:{self.container_path}"
        return f"{bind}:ro" if self.read_only else bind


class PullPolicy(Enum):
    ALWAYS = "always"
    IF_NOT_PRESENT = "if-not-present"
    NEVER = "never"


@dataclass(frozen=True)
class FetchOptions:
    pull_policy: PullPolicy = PullPolicy.IF_NOT_PRESENT
    platform: Optional[str] = None


@dataclass(frozen=True)
class FetchedImage:
    name: str
    image_id: str = ""


class ContainerEngine(ABC):
    """The container lifecycle operations needed to run a one-off tool
    container."""

    @abstractmethod
    def create_container(
        self, image: str, command: list[str], binds: list[BindSpec], tty: bool = False
    ) -> str:
        """Create a container and return its id."""

    @abstractmethod
    def start_container(self, container_id: str) -> None:
        pass

    @abstractmethod
    def wait_container(
        self,
        container_id: str,
        condition: str = WAIT_CONDITION_NOT_RUNNING,
        timeout: Optional[float] = None,
    ) -> Future:
        """Return a future resolving to the container's exit status once it
        meets ``condition``, or raising the engine error hit while waiting.

        With a ``timeout`` the wait itself is abandoned after that many
        seconds, so nothing is left blocked on the container."""

    @abstractmethod
    def remove_container(
        self, container_id: str, force: bool = False, timeout: Optional[float] = None
    ) -> None:
        pass


class ImageFetcher(ABC):
    @abstractmethod
    def fetch(self, image_ref: str, options: FetchOptions) -> FetchedImage:
        """Make ``image_ref`` available in the local engine store."""
