import os

from ocibridge.utils import logger

log = logger.setup(name="envs")


def fetch_env_var(func_name: str, docstring: str, default: str = "") -> str:
    """Gets the env or returns the default"""
    uppercase_name = func_name.upper()
    env = os.getenv(uppercase_name, default)

    if not env:
        log_msg = f"Environment variable {uppercase_name} is not set."
        if docstring:
            log_msg += f"\n{uppercase_name}: {docstring.strip()}"
        log.debug(log_msg)

    return env


def env_var(func=None, *, default: str = ""):
    """
    Decorator to fetch the environment variable matching a function's name.

    Examples
    --------
    class Envs:
        @env_var
        def docker_host(self) -> str:
            "This would fetch DOCKER_HOST from environment variables."

        @env_var(default="/var/run/docker.sock")
        def docker_socket(self) -> str:
            "This would fetch DOCKER_SOCKET or default to '/var/run/docker.sock'."
    """
    if func:
        return property(
            lambda instance: fetch_env_var(func.__name__, func.__doc__, default)
        )

    return lambda func: property(
        lambda instance: fetch_env_var(func.__name__, func.__doc__, default)
    )


# pylint: disable=missing-function-docstring
class Envs:
    """
    Environment variables read by the transfer tool executor.

    Each property fetches the environment variable named after it when
    accessed. Unset variables are logged at debug level along with their
    description and fall back to the listed default.
    """

    @env_var(default="quay.io/skopeo/stable:latest")
    def skopeo_image(self) -> str:
        """
        Image reference of the skopeo tool run for each transfer
        """

    @env_var(default="/var/run/docker.sock")
    def docker_socket(self) -> str:
        """
        Path of the docker engine socket, bind-mounted into the tool container
        at the same path
        """

    @env_var(default="docker")
    def docker_executable(self) -> str:
        """
        docker CLI used to drive the engine
        """

    @env_var
    def docker_config(self) -> str:
        """
        Directory holding docker's config.json, used for registry credentials
        when pulling the tool image
        """

    @env_var
    def docker_host(self) -> str:
        """
        Engine endpoint for the docker CLI, e.g. unix:///var/run/docker.sock
        """

    @env_var(default="60")
    def container_remove_timeout(self) -> str:
        """
        Seconds allowed for removing the tool container after a transfer
        """

    @env_var(default="false")
    def strict_cleanup(self) -> str:
        """
        Fail a successful transfer when its tool container cannot be removed
        """
