import json
from collections.abc import Callable

import httpx
import pytest
from datalake.config import ClientConfig
from datalake.state import set_config
from dotenv import load_dotenv

BACKEND_URL = "http://datalake.test"


def pytest_configure(config):
    """Configure pytest with global settings."""
    load_dotenv()


class Recorder:
    """Collects the requests that reach a MockTransport and answers them with a handler."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        return self.handler(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> dict:
        return json.loads(self.last.content)


@pytest.fixture
def make_config():
    """Build a ClientConfig whose requests are answered by `handler`."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> tuple[ClientConfig, Recorder]:
        recorder = Recorder(handler)
        config = ClientConfig(backend_url=BACKEND_URL, transport=httpx.MockTransport(recorder))
        return config, recorder

    return _make


@pytest.fixture(autouse=True)
def reset_config():
    """Never let a test leak its configuration into the next one."""
    set_config(None)
    yield
    set_config(None)
