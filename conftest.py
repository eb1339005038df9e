import pytest

from ocibridge.config import ToolExecutorConfig
from ocibridge.test.mocks.mock_classes import MockEngine, MockImageFetcher


@pytest.fixture
def raise_():
    def raise_exception(e):
        raise e

    return raise_exception


@pytest.fixture
def mock_engine():
    return MockEngine()


@pytest.fixture
def mock_fetcher():
    return MockImageFetcher()


@pytest.fixture
def tool_config():
    return ToolExecutorConfig(
        tool_image="quay.io/skopeo/stable:latest",
        docker_socket="/var/run/docker.sock",
        remove_timeout=30,
        strict_cleanup=False,
    )
