"""
JSON-RPC client.

Binds an endpoint configuration and a transport to request factories, so
callers can build requests and batches without repeating connection details.
"""

from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Union

import structlog

from rpcbatcher.config import ClientConfig, get_config
from rpcbatcher.core.batch import RpcBatch
from rpcbatcher.core.errors import RpcCallError, ValidationError
from rpcbatcher.core.ids import IdGenerator
from rpcbatcher.core.request import Params, RpcRequest
from rpcbatcher.transport.http import HttpTransport
from rpcbatcher.transport.interface import Transport

logger = structlog.get_logger(__name__)

RequestFactory = Callable[..., RpcRequest]
MethodTable = Union[Mapping, Iterable[Tuple[str, Optional[bool]]]]


class JsonRpcClient:
    """
    Entry point for talking to one JSON-RPC endpoint.
    
    Usage:
        ```python
        async with JsonRpcClient("https://example.org/rpc") as client:
            methods = client.build_methods({"user.get": False, "log.write": True})
            
            batch = client.batch()
            batch.add_requests([
                methods["user.get"]([1]).on_success(print),
                methods["log.write"]({"line": "hello"}),
            ])
            batch.on_exception(lambda error: True)
            await batch.execute()
        ```
    """
    
    def __init__(
        self,
        url: Optional[str] = None,
        *,
        config: Optional[ClientConfig] = None,
        transport: Optional[Transport] = None,
        id_generator: Optional[IdGenerator] = None,
    ):
        """
        Initialize the client.
        
        Args:
            url: Endpoint URL, overrides the configured one
            config: Client configuration. Uses global config if not provided.
            transport: Custom transport (an HttpTransport is created if not provided)
            id_generator: Id source for requests (process-wide one by default)
        """
        config = config or get_config()
        if url is not None:
            config = config.model_copy(update={"url": url})
        self.config = config
        self.transport = transport or HttpTransport(self.config)
        self.id_generator = id_generator
    
    async def connect(self) -> None:
        """Connect the underlying transport."""
        await self.transport.connect()
    
    async def disconnect(self) -> None:
        """Disconnect the underlying transport."""
        await self.transport.disconnect()
    
    async def __aenter__(self) -> "JsonRpcClient":
        await self.connect()
        return self
    
    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()
    
    def request(self, method: str, params: Optional[Params] = None) -> RpcRequest:
        """Build a request bound to this client's transport."""
        return RpcRequest(
            method,
            params,
            is_notification=False,
            transport=self.transport,
            protocol_version=self.config.protocol_version,
            id_generator=self.id_generator,
        )
    
    def notification(self, method: str, params: Optional[Params] = None) -> RpcRequest:
        """Build a notification bound to this client's transport."""
        return RpcRequest(
            method,
            params,
            is_notification=True,
            transport=self.transport,
            protocol_version=self.config.protocol_version,
            id_generator=self.id_generator,
        )
    
    def method(self, name: str, is_notification: Optional[bool] = False) -> RequestFactory:
        """
        Create a request factory for one remote method.
        
        Args:
            name: Remote method name
            is_notification: Whether calls to this method are notifications
            
        Returns:
            A function taking optional params and returning an RpcRequest
            
        Raises:
            ValidationError: If name is not a string or the flag is not a bool
        """
        if not isinstance(name, str):
            raise ValidationError(
                f"The method name must be a string; the value you supplied "
                f"({name!r}) is of type {type(name).__name__!r}."
            )
        if is_notification is not None and not isinstance(is_notification, bool):
            raise ValidationError(
                f"The 'is notification' flag must be a boolean; the value you supplied "
                f"({is_notification!r}) is of type {type(is_notification).__name__!r}."
            )
        build = self.notification if is_notification else self.request
        
        def factory(params: Optional[Params] = None) -> RpcRequest:
            return build(name, params)
        
        factory.__name__ = name.replace(".", "_")
        factory.__qualname__ = factory.__name__
        return factory
    
    def build_methods(self, methods: MethodTable) -> Dict[str, RequestFactory]:
        """
        Create request factories for a table of methods.
        
        Args:
            methods: Mapping of method name to notification flag, or a
                sequence of (name, flag) pairs
                
        Returns:
            Factories keyed by method name
        """
        if isinstance(methods, Mapping):
            entries = list(methods.items())
        elif isinstance(methods, (list, tuple)):
            entries = []
            for entry in methods:
                if isinstance(entry, str):
                    entries.append((entry, False))
                elif isinstance(entry, (list, tuple)) and 1 <= len(entry) <= 2:
                    entries.append((entry[0], entry[1] if len(entry) == 2 else False))
                else:
                    raise ValidationError(
                        f"Method entries must be a name or a (name, is_notification) "
                        f"pair; the value you supplied is {entry!r}."
                    )
        else:
            raise ValidationError(
                f"The methods must be passed as a mapping or a list; the value you "
                f"supplied ({methods!r}) is of type {type(methods).__name__!r}."
            )
        
        return {name: self.method(name, flag) for name, flag in entries}
    
    def batch(self) -> RpcBatch:
        """Create an empty batch bound to this client's transport."""
        return RpcBatch(transport=self.transport)
    
    async def call(self, method: str, params: Optional[Params] = None) -> Any:
        """
        Execute a single request and return its result.
        
        Raises:
            RpcCallError: If the request ends in an exception
            ProtocolError: If the response is malformed
        """
        outcome: Dict[str, Any] = {}
        request = self.request(method, params)
        request.on_success(lambda result: outcome.setdefault("result", result))
        request.on_exception(lambda error: outcome.setdefault("error", error))
        
        await request.execute()
        
        if "error" in outcome:
            logger.debug("call_failed", method=method, error=outcome["error"])
            raise RpcCallError(outcome["error"])
        return outcome.get("result")
    
    async def notify(self, method: str, params: Optional[Params] = None) -> None:
        """Send a single notification."""
        await self.notification(method, params).execute()
