"""
Batch model.

Collects requests into one JSON-RPC batch, sends them in a single transport
call and reconciles the reply back onto the individual requests.
"""

import json
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

import structlog

from rpcbatcher.core.errors import ValidationError, classified_error
from rpcbatcher.core.ids import normalize_id
from rpcbatcher.core.request import RpcRequest
from rpcbatcher.engine.lifecycle import handle_response
from rpcbatcher.engine.reconciler import (
    classify_batch_response,
    is_silent_acknowledgement,
    reconcile_responses,
)
from rpcbatcher.transport.interface import ResponseOutcome, Transport

logger = structlog.get_logger(__name__)


def _default_gate(error: Any) -> None:
    return None


class BatchStatus(str, Enum):
    """Status of a batch."""
    COLLECTING = "collecting"     # Still accepting requests
    SUBMITTED = "submitted"       # Payload handed to the transport
    COMPLETED = "completed"       # Responses dispatched
    SUPPRESSED = "suppressed"     # Gate vetoed per-request dispatch
    FAILED = "failed"             # Dispatch stopped on a malformed response


class RpcBatch:
    """
    A set of requests sent as one JSON-RPC batch.
    
    The wire payload keeps the order requests were added in. Responses are
    correlated by id, so per-request callbacks may fire in any order.
    Notifications are sent but never registered, since nothing can answer
    them.
    
    When the reply is anything but a clean batch, the batch exception handler
    (the gate) receives ``{"code": ..., "message": body}`` first. A falsy
    return value stops all per-request dispatch; the default gate returns
    None.
    """
    
    def __init__(self, transport: Optional[Transport] = None):
        """
        Initialize an empty batch.
        
        Args:
            transport: Transport used by execute() unless one is passed there
        """
        self.transport = transport
        self.status = BatchStatus.COLLECTING
        self._requests: List[dict] = []
        self._objects: Dict[str, RpcRequest] = {}
        self.exception_handler: Callable[[Any], Any] = _default_gate
    
    @property
    def size(self) -> int:
        """Number of entries in the wire payload."""
        return len(self._requests)
    
    @property
    def pending(self) -> Dict[str, RpcRequest]:
        """Requests awaiting a response, keyed by canonical id."""
        return dict(self._objects)
    
    @property
    def payload(self) -> List[dict]:
        """Wire representation of the batch."""
        return list(self._requests)
    
    def add_request(self, request: RpcRequest) -> "RpcBatch":
        """
        Add a request to this batch.
        
        Args:
            request: The request to add
            
        Raises:
            ValidationError: If request is not an RpcRequest or the batch was
                already executed
        """
        if not isinstance(request, RpcRequest):
            raise ValidationError(
                f"The parameter for add_request() must be an RpcRequest; the value you "
                f"provided ({request!r}) is of type {type(request).__name__!r}."
            )
        if self.status != BatchStatus.COLLECTING:
            raise ValidationError("Cannot add requests to a batch that was already executed")
        
        self._requests.append(request.body)
        if not request.is_notification:
            self._objects[normalize_id(request.id)] = request
        return self
    
    def add_requests(self, requests: Sequence[RpcRequest]) -> "RpcBatch":
        """
        Add several requests, preserving their order.
        
        Raises:
            ValidationError: If requests is not a list/tuple or holds a
                non-request
        """
        if not isinstance(requests, (list, tuple)):
            raise ValidationError(
                f"The parameter for add_requests() must be a list; the value you "
                f"supplied ({requests!r}) is of type {type(requests).__name__!r}."
            )
        for request in requests:
            self.add_request(request)
        return self
    
    def on_exception(self, callback: Optional[Callable[[Any], Any]]) -> "RpcBatch":
        """Set the batch-level gate handler."""
        if callback is None:
            return self
        if not callable(callback):
            raise ValidationError(
                f"The exception handler callback you provided is invalid; the value you "
                f"provided ({callback!r}) is of type {type(callback).__name__!r}."
            )
        self.exception_handler = callback
        return self
    
    def to_json(self) -> str:
        """Serialize the batch payload."""
        return json.dumps(self._requests, separators=(",", ":"))
    
    async def execute(self, transport: Optional[Transport] = None) -> None:
        """
        Send the batch and dispatch the reconciled responses.
        
        Args:
            transport: Transport to use instead of the one given at construction
            
        Raises:
            ValidationError: If no transport is available or the batch was
                already executed
            ProtocolError: If a reconciled response has neither result nor error
        """
        transport = transport or self.transport
        if transport is None:
            raise ValidationError("No transport available to execute the batch")
        if self.status != BatchStatus.COLLECTING:
            raise ValidationError("A batch can only be executed once")
        
        self.status = BatchStatus.SUBMITTED
        for request in self._objects.values():
            request.mark_submitted()
        
        logger.info(
            "batch_sending",
            size=self.size,
            pending=len(self._objects),
        )
        
        outcome = await transport.send(self.to_json())
        self.handle_outcome(outcome)
    
    def handle_outcome(self, outcome: ResponseOutcome) -> None:
        """
        Reconcile a batch outcome and dispatch per-request responses.
        
        Args:
            outcome: Status code and body returned by the transport
        """
        status_code, body = outcome.status_code, outcome.body
        
        if is_silent_acknowledgement(self._objects, status_code, body):
            self.status = BatchStatus.COMPLETED
            logger.debug("batch_acknowledged", size=self.size)
            return
        
        error_code = classify_batch_response(self._objects, status_code, body)
        
        if error_code is not None:
            logger.warning("batch_error", code=error_code, status=status_code)
            if not self.exception_handler(classified_error(error_code, body)):
                self.status = BatchStatus.SUPPRESSED
                logger.info("batch_gate_vetoed", code=error_code)
                return
        
        responses = reconcile_responses(self._objects, error_code, body)
        
        try:
            for response in responses:
                key = normalize_id(response.get("id")) if isinstance(response, dict) else None
                request = self._objects.get(key)
                if request is None:
                    logger.warning("response_uncorrelated", response=response)
                    continue
                handle_response(request, status_code, response)
        except Exception:
            self.status = BatchStatus.FAILED
            logger.error("batch_dispatch_failed", code=error_code)
            raise
        
        self.status = BatchStatus.COMPLETED
        logger.info("batch_completed", code=error_code, dispatched=len(responses))
    
    def __repr__(self) -> str:
        return f"RpcBatch(size={self.size}, pending={len(self._objects)}, status={self.status.value})"
