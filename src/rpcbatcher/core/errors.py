"""
Error taxonomy for the JSON-RPC client.

Defines the protocol error codes produced by batch reconciliation, the shape of
a classified error delivered to exception callbacks, and the exceptions raised
by the library itself.
"""

from typing import Any, Optional, TypedDict


# Standard JSON-RPC 2.0 codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Batch reconciliation codes
MISSING_RESPONSE = -32001   # A request in the batch got no response
ITEM_ERROR = -32002         # Some batch members answered with an error
MIXED_ERROR = -32003        # Both of the above

BATCH_RECONCILIATION_CODES = frozenset({MISSING_RESPONSE, ITEM_ERROR, MIXED_ERROR})

# Status used when the server answers a batch with an empty body
EMPTY_BATCH_RESPONSE = 500

PARSE_ERROR_MESSAGE = "Parse error occurred."
MISSING_RESPONSE_MESSAGE = "This request didn't get a response."
HTTP_ERROR_MESSAGE = "Http error occured."


class ClassifiedError(TypedDict, total=False):
    """Error object handed to ``on_exception`` callbacks."""
    code: int
    message: Any
    data: Any


def classified_error(code: int, message: Any, data: Any = None) -> ClassifiedError:
    """Build a classified error, omitting ``data`` when not given."""
    error: ClassifiedError = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return error


class RpcBatcherError(Exception):
    """Base class for all library errors."""
    pass


class ValidationError(RpcBatcherError, ValueError):
    """Raised synchronously for malformed construction input."""
    pass


class ProtocolError(RpcBatcherError):
    """
    Raised when a success response carries neither ``result`` nor ``error``.

    There is no recovery for this condition, so it is surfaced to the caller
    of ``execute()`` instead of being routed to a callback.
    """
    
    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class TransportError(RpcBatcherError):
    """Raised when a transport cannot be used at all (e.g. no URL configured)."""
    pass


class RpcCallError(RpcBatcherError):
    """Raised by ``JsonRpcClient.call()`` when the request ends in an exception."""
    
    def __init__(self, error: Any):
        self.error = error
        if isinstance(error, dict):
            self.code = error.get("code")
            message = error.get("message")
        else:
            self.code = None
            message = error
        super().__init__(f"JSON-RPC call failed: {message!r} (code={self.code})")
