"""
JSON-RPC request model.

Represents a single request or notification envelope together with the
callbacks that receive its outcome.
"""

import json
from collections.abc import Mapping
from enum import Enum
from typing import Any, Callable, Optional, Union

import structlog

from rpcbatcher.core.errors import ValidationError
from rpcbatcher.core.ids import IdGenerator, get_id_generator
from rpcbatcher.engine.lifecycle import handle_response
from rpcbatcher.transport.interface import Transport

logger = structlog.get_logger(__name__)

JSONRPC_VERSION = "2.0"

Params = Union[list, tuple, Mapping]


def _noop(*args: Any) -> None:
    return None


class RequestStatus(str, Enum):
    """Status of a request."""
    CREATED = "created"           # Built, callbacks may still be attached
    SUBMITTED = "submitted"       # Handed to a transport (alone or in a batch)
    COMPLETED = "completed"       # Response resolved


class RpcRequest:
    """
    A single JSON-RPC 2.0 call description.
    
    Non-notification requests get an id from the process-wide generator at
    construction time. Notifications have no id, expect no response and never
    invoke any callback.
    
    Usage:
        ```python
        request = RpcRequest("math.add", [1, 2], transport=transport)
        request.on_success(print).on_exception(log_error)
        await request.execute()
        ```
    """
    
    def __init__(
        self,
        method: str,
        params: Optional[Params] = None,
        is_notification: bool = False,
        *,
        transport: Optional[Transport] = None,
        protocol_version: str = JSONRPC_VERSION,
        id_generator: Optional[IdGenerator] = None,
    ):
        """
        Build the request envelope.
        
        Args:
            method: Name of the remote method
            params: Positional (list/tuple) or named (mapping) parameters
            is_notification: Send without id; no response is expected
            transport: Transport used by execute() unless one is passed there
            protocol_version: Value of the "jsonrpc" member
            id_generator: Id source (defaults to the process-wide generator)
            
        Raises:
            ValidationError: If method is not a string or params is not a
                sequence or mapping
        """
        if not isinstance(method, str):
            raise ValidationError(
                f"The method name must be a string; the value you supplied "
                f"({method!r}) is of type {type(method).__name__!r}."
            )
        if params is not None and not isinstance(params, (list, tuple, Mapping)):
            raise ValidationError(
                f"The parameters for {method}() must be passed as a list or a mapping; "
                f"the value you supplied ({params!r}) is of type {type(params).__name__!r}."
            )
        
        if isinstance(params, Mapping):
            params = dict(params)
        elif params is not None:
            params = list(params)
        
        self.method = method
        self.params = params
        self.is_notification = bool(is_notification)
        self.protocol_version = protocol_version
        self.transport = transport
        self.status = RequestStatus.CREATED
        
        self.id: Optional[int] = None
        if not self.is_notification:
            self.id = (id_generator or get_id_generator()).next_id()
        
        self.success_handler: Callable[[Any], Any] = _noop
        self.exception_handler: Callable[[Any], Any] = _noop
        self.complete_handler: Callable[[], Any] = _noop
    
    @property
    def body(self) -> dict:
        """Wire representation of the request."""
        body = {
            "jsonrpc": self.protocol_version,
            "method": self.method,
        }
        if self.params is not None:
            body["params"] = self.params
        if not self.is_notification:
            body["id"] = self.id
        return body
    
    def _attach(self, kind: str, callback: Optional[Callable]) -> "RpcRequest":
        if callback is None:
            return self
        if not callable(callback):
            raise ValidationError(
                f"The {kind} handler callback you provided is invalid; the value you "
                f"provided ({callback!r}) is of type {type(callback).__name__!r}."
            )
        if not self.is_notification:
            setattr(self, f"{kind}_handler", callback)
        return self
    
    def on_success(self, callback: Optional[Callable[[Any], Any]]) -> "RpcRequest":
        """Set the callback receiving the ``result`` member of the response."""
        return self._attach("success", callback)
    
    def on_exception(self, callback: Optional[Callable[[Any], Any]]) -> "RpcRequest":
        """Set the callback receiving the classified error."""
        return self._attach("exception", callback)
    
    def on_complete(self, callback: Optional[Callable[[], Any]]) -> "RpcRequest":
        """Set the callback run after success or exception handling."""
        return self._attach("complete", callback)
    
    def mark_submitted(self) -> None:
        """Mark request as handed to a transport."""
        self.status = RequestStatus.SUBMITTED
    
    def mark_completed(self) -> None:
        """Mark request as resolved."""
        self.status = RequestStatus.COMPLETED
    
    def to_json(self) -> str:
        """Serialize the request body."""
        return json.dumps(self.body, separators=(",", ":"))
    
    async def execute(self, transport: Optional[Transport] = None) -> None:
        """
        Send the request and dispatch its response to the callbacks.
        
        Args:
            transport: Transport to use instead of the one given at construction
            
        Raises:
            ValidationError: If no transport is available
            ProtocolError: If the response has neither result nor error
        """
        transport = transport or self.transport
        if transport is None:
            raise ValidationError(f"No transport available to execute {self.method}()")
        
        self.mark_submitted()
        logger.debug("request_sending", method=self.method, request_id=self.id)
        
        outcome = await transport.send(self.to_json())
        handle_response(self, outcome.status_code, outcome.body)
    
    def __repr__(self) -> str:
        kind = "notification" if self.is_notification else f"id={self.id}"
        return f"RpcRequest(method={self.method!r}, {kind}, status={self.status.value})"
