from typing import Optional


class GenericSubprocessError(Exception):
    """GenericSubprocessError Exception."""


class ImageNotFoundError(Exception):
    """ImageNotFoundError Exception."""


class ConfigValidationError(Exception):
    """ConfigValidationError Exception."""


class ToolExecutorError(Exception):
    """Base class for failures while transferring an image with the
    containerized tool.

    ``cleanup_error`` holds the removal failure of the tool container when
    one happened after this error was raised.
    """

    def __init__(self, message: str = "", cleanup_error: Optional[Exception] = None):
        super().__init__(message)
        self.cleanup_error = cleanup_error


class ToolFetchError(ToolExecutorError):
    """ToolFetchError Exception."""


class DestinationCreateError(ToolExecutorError):
    """DestinationCreateError Exception."""


class ContainerCreateError(ToolExecutorError):
    """ContainerCreateError Exception."""


class ContainerStartError(ToolExecutorError):
    """ContainerStartError Exception."""


class ContainerRunError(ToolExecutorError):
    """Raised when waiting on the tool container fails or the tool exits
    with a non-zero status."""

    def __init__(
        self,
        message: str = "",
        exit_code: Optional[int] = None,
        cleanup_error: Optional[Exception] = None,
    ):
        super().__init__(message, cleanup_error=cleanup_error)
        self.exit_code = exit_code


class ContainerRemoveError(ToolExecutorError):
    """ContainerRemoveError Exception."""

    def __init__(self, message: str = "", container_id: str = ""):
        super().__init__(message)
        self.container_id = container_id
