"""
Batch reconciliation.

Maps one batch-level transport outcome back onto per-request responses.
Reconciliation runs in two steps: the outcome is classified into an error
code (or none for a clean batch), then a response list with exactly one
entry per request is synthesized from the server reply and that code.

Both steps are pure functions of their inputs: the same outcome always
yields the same code and the same list, and the server body is never
modified.
"""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from rpcbatcher.core.errors import (
    BATCH_RECONCILIATION_CODES,
    EMPTY_BATCH_RESPONSE,
    HTTP_ERROR_MESSAGE,
    ITEM_ERROR,
    MISSING_RESPONSE,
    MISSING_RESPONSE_MESSAGE,
    MIXED_ERROR,
    PARSE_ERROR,
    PARSE_ERROR_MESSAGE,
)
from rpcbatcher.core.ids import normalize_id
from rpcbatcher.transport.interface import HTTP_OK, is_empty_body

if TYPE_CHECKING:
    from rpcbatcher.core.request import RpcRequest

# Pending requests keyed by canonical id
Registry = Dict[str, "RpcRequest"]


def _has_member(item: Any, name: str) -> bool:
    return isinstance(item, Mapping) and name in item


def _index_by_id(items: List[Any]) -> Dict[str, Any]:
    """Index response objects by canonical id, first occurrence wins."""
    index: Dict[str, Any] = {}
    for item in items:
        if not _has_member(item, "id"):
            continue
        key = normalize_id(item["id"])
        if key is not None and key not in index:
            index[key] = item
    return index


def is_silent_acknowledgement(registry: Registry, status_code: int, body: Any) -> bool:
    """Check if an all-notification batch got the expected empty reply."""
    return status_code == HTTP_OK and is_empty_body(body) and len(registry) == 0


def classify_batch_response(registry: Registry, status_code: int, body: Any) -> Optional[int]:
    """
    Classify a batch outcome into an error code.
    
    Args:
        registry: Pending requests keyed by canonical id
        status_code: Transport status of the batch call
        body: Parsed response body
        
    Returns:
        The transport status for transport failures, 500 for an empty reply
        to a batch with pending requests, PARSE_ERROR, MISSING_RESPONSE,
        ITEM_ERROR or MIXED_ERROR for protocol level problems, or None when
        the batch came back clean (or needs no handling at all).
    """
    if status_code != HTTP_OK:
        return status_code
    
    if is_empty_body(body):
        return EMPTY_BATCH_RESPONSE if len(registry) > 0 else None
    
    if isinstance(body, list):
        answered = _index_by_id(body)
        missing = any(key not in answered for key in registry)
        item_errors = any(_has_member(item, "error") for item in body)
        
        if missing and item_errors:
            return MIXED_ERROR
        if missing:
            return MISSING_RESPONSE
        if item_errors:
            return ITEM_ERROR
        return None
    
    # Anything but an object answers nothing
    if not isinstance(body, Mapping):
        return MISSING_RESPONSE if len(registry) > 0 else None
    
    # Single response object for the whole batch
    error = body.get("error")
    if isinstance(error, Mapping) and error.get("code") == PARSE_ERROR:
        return PARSE_ERROR
    if len(registry) > 1:
        return MISSING_RESPONSE
    if _has_member(body, "error"):
        return ITEM_ERROR
    if any(key not in _index_by_id([body]) for key in registry):
        return MISSING_RESPONSE
    return None


def _synthesized_error(request: "RpcRequest", code: int, message: str) -> dict:
    return {
        "jsonrpc": request.protocol_version,
        "id": request.id,
        "error": {
            "code": code,
            "message": message,
            "data": None,
        },
    }


def reconcile_responses(
    registry: Registry,
    error_code: Optional[int],
    body: Any,
) -> List[Any]:
    """
    Build the per-request response list for a classified batch outcome.
    
    Args:
        registry: Pending requests keyed by canonical id
        error_code: Result of classify_batch_response()
        body: Parsed response body
        
    Returns:
        Response objects to dispatch, correlated to requests by id
    """
    if error_code is None:
        if isinstance(body, list):
            return list(body)
        if isinstance(body, Mapping):
            return [body]
        return []
    
    if error_code == PARSE_ERROR:
        return [
            _synthesized_error(request, PARSE_ERROR, PARSE_ERROR_MESSAGE)
            for request in registry.values()
        ]
    
    if error_code in BATCH_RECONCILIATION_CODES:
        items = body if isinstance(body, list) else [body]
        answered = _index_by_id(items)
        responses = []
        for key, request in registry.items():
            if key in answered:
                responses.append(answered[key])
            else:
                responses.append(
                    _synthesized_error(request, MISSING_RESPONSE, MISSING_RESPONSE_MESSAGE)
                )
        return responses
    
    # Transport failure: placeholder without result or error
    return [
        {"id": request.id, "message": HTTP_ERROR_MESSAGE}
        for request in registry.values()
    ]
