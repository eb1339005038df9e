#!/usr/bin/env python3

from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Optional

from ocibridge.container_tools.engine import (
    BindSpec,
    ContainerEngine,
    FetchedImage,
    FetchOptions,
    ImageFetcher,
)


# Mock for subprocess.CompletedProcess, the return value for subprocess.run
@dataclass
class MockCompletedProcess:
    returncode: int = 0
    stderr: str = ""
    stdout: str = ""


@dataclass
class MockEngine(ContainerEngine):
    """Records every lifecycle call. Set the *_error attributes to make the
    matching call fail, and wait_error/exit_code to control the wait
    future."""

    container_id: str = "abc123"
    exit_code: int = 0
    create_error: Optional[Exception] = None
    start_error: Optional[Exception] = None
    wait_error: Optional[Exception] = None
    remove_error: Optional[Exception] = None
    # leave the wait future pending to simulate a container that never exits
    wait_forever: bool = False
    calls: list = field(default_factory=list)
    created: list = field(default_factory=list)
    wait_timeouts: list = field(default_factory=list)

    def create_container(
        self, image: str, command: list[str], binds: list[BindSpec], tty: bool = False
    ) -> str:
        self.calls.append("create")
        self.created.append(
            {"image": image, "command": command, "binds": binds, "tty": tty}
        )
        if self.create_error:
            raise self.create_error
        return self.container_id

    def start_container(self, container_id: str) -> None:
        self.calls.append("start")
        if self.start_error:
            raise self.start_error

    def wait_container(
        self,
        container_id: str,
        condition: str = "not-running",
        timeout: Optional[float] = None,
    ) -> Future:
        self.calls.append("wait")
        self.wait_timeouts.append(timeout)
        future = Future()
        if self.wait_forever:
            return future
        if self.wait_error:
            future.set_exception(self.wait_error)
        else:
            future.set_result(self.exit_code)
        return future

    def remove_container(
        self, container_id: str, force: bool = False, timeout: Optional[float] = None
    ) -> None:
        self.calls.append(("remove", container_id, force, timeout))
        if self.remove_error:
            raise self.remove_error

    def removals(self) -> list:
        return [call for call in self.calls if isinstance(call, tuple)]


@dataclass
class MockImageFetcher(ImageFetcher):
    error: Optional[Exception] = None
    fetched: list = field(default_factory=list)

    def fetch(self, image_ref: str, options: FetchOptions) -> FetchedImage:
        self.fetched.append((image_ref, options))
        if self.error:
            raise self.error
        return FetchedImage(name=image_ref, image_id="sha256:tool")
