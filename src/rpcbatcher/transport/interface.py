"""
Abstract interface for JSON-RPC transports.

Defines the contract the request and batch engine relies on: send one
serialized payload, get back one status code and one body.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

HTTP_OK = 200


def is_empty_body(body: Any) -> bool:
    """Check if a response body carries nothing at all."""
    return body is None or body == ""


@dataclass(frozen=True)
class ResponseOutcome:
    """Raw result of one transport call."""
    status_code: int
    body: Any          # Parsed JSON, "" for an empty body, raw text on parse failure
    
    @property
    def is_empty(self) -> bool:
        """Check if the server returned no body."""
        return is_empty_body(self.body)


class Transport(ABC):
    """
    Abstract interface for delivering JSON-RPC payloads.
    
    Retries, timeouts, authentication and headers are transport concerns;
    the engine only sees the resulting ``ResponseOutcome``.
    """
    
    @abstractmethod
    async def connect(self) -> None:
        """Prepare the transport for sending."""
        pass
    
    @abstractmethod
    async def disconnect(self) -> None:
        """Release transport resources."""
        pass
    
    @abstractmethod
    async def send(self, payload: str) -> ResponseOutcome:
        """
        Send a serialized JSON-RPC request or batch.
        
        Args:
            payload: JSON text of a single request object or an array of them
            
        Returns:
            Status code and body of the response
        """
        pass
    
    async def __aenter__(self) -> "Transport":
        await self.connect()
        return self
    
    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()
