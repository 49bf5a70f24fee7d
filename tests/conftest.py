import pytest

from studio.config import TransportConfig
from studio.observability import ObservabilityEngine
from studio.transport import Transport

from tests.fixtures import BASE_URL, mock_client


@pytest.fixture
def observability():
    return ObservabilityEngine()


@pytest.fixture
def make_transport(observability):
    """Factory: MockTransport handler -> Transport sharing the test's observability."""

    def factory(handler, config=None):
        return Transport(
            config or TransportConfig(base_url=BASE_URL),
            client=mock_client(handler),
            observability=observability
        )
    return factory
