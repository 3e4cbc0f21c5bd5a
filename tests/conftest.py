"""
Pytest configuration and shared fixtures for the test suite.
"""

import json
from typing import Any, List, Optional

import pytest

from rpcbatcher.config import ClientConfig
from rpcbatcher.core.ids import IdGenerator, get_id_generator, set_id_generator
from rpcbatcher.core.request import RpcRequest
from rpcbatcher.transport.interface import ResponseOutcome, Transport


# ============================================================================
# Id Generator Fixture
# ============================================================================

@pytest.fixture(autouse=True)
def fresh_ids():
    """Give every test its own id sequence starting at 1."""
    previous = get_id_generator()
    generator = IdGenerator()
    set_id_generator(generator)
    yield generator
    set_id_generator(previous)


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def test_config() -> ClientConfig:
    """Create a test configuration."""
    return ClientConfig(
        url="http://rpc.test/api",
        user="alice",
        password="secret",
        timeout_seconds=5.0,
        log_level="DEBUG",
    )


# ============================================================================
# Mock Transport
# ============================================================================

class MockTransport(Transport):
    """Transport replaying canned outcomes and recording payloads."""
    
    def __init__(self, *outcomes: ResponseOutcome):
        self.outcomes: List[ResponseOutcome] = list(outcomes)
        self.sent: List[str] = []
        self._connected = False
    
    async def connect(self) -> None:
        self._connected = True
    
    async def disconnect(self) -> None:
        self._connected = False
    
    async def send(self, payload: str) -> ResponseOutcome:
        self.sent.append(payload)
        return self.outcomes.pop(0)
    
    def reply(self, status_code: int, body: Any) -> "MockTransport":
        """Queue an outcome."""
        self.outcomes.append(ResponseOutcome(status_code, body))
        return self
    
    @property
    def last_payload(self) -> Any:
        """Decoded payload of the last send."""
        return json.loads(self.sent[-1])


@pytest.fixture
def mock_transport() -> MockTransport:
    """Create an empty mock transport."""
    return MockTransport()


# ============================================================================
# Callback Recorder
# ============================================================================

class CallbackRecorder:
    """Records callback invocations across requests, in firing order."""
    
    def __init__(self):
        self.events: List[tuple] = []
    
    def watch(self, request: RpcRequest, label: Optional[str] = None) -> RpcRequest:
        """Attach recording callbacks to a request."""
        label = label or request.method
        request.on_success(lambda result: self.events.append((label, "success", result)))
        request.on_exception(lambda error: self.events.append((label, "exception", error)))
        request.on_complete(lambda: self.events.append((label, "complete", None)))
        return request
    
    def for_label(self, label: str) -> List[tuple]:
        """Events for one request, without the label."""
        return [(kind, value) for name, kind, value in self.events if name == label]


@pytest.fixture
def recorder() -> CallbackRecorder:
    """Create a callback recorder."""
    return CallbackRecorder()
