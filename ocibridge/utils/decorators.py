import functools
import subprocess
from logging import Logger

from ocibridge.utils import logger
from ocibridge.utils.exceptions import GenericSubprocessError

log: Logger = logger.setup(name="Exception")


def subprocess_error_handler(logging_message: str):
    """A decorator to wrap a function that may raise CalledProcessError or
    SubprocessError. When these exceptions occur, it logs the specified error
    message and raises a GenericSubprocessError exception carrying the
    command's stderr, if any.

    Args:
        logging_message (str): The error message to be logged.

    Returns:
        function: The decorator.
    """

    def decorate(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except subprocess.CalledProcessError as e:
                stderr = (e.stderr or "").strip()
                log.error("%s: exit code %s", logging_message, e.returncode)
                if stderr:
                    log.error(stderr)
                # prevent exception chaining by using from None
                raise GenericSubprocessError(
                    f"{logging_message}: {stderr or f'exit code {e.returncode}'}"
                ) from None
            except subprocess.TimeoutExpired as e:
                log.error("%s: timed out after %ss", logging_message, e.timeout)
                raise GenericSubprocessError(
                    f"{logging_message}: timed out after {e.timeout}s"
                ) from None
            except subprocess.SubprocessError:
                log.error(logging_message)
                raise GenericSubprocessError(logging_message) from None

        return wrapper

    return decorate
