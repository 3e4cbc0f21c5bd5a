"""
Request lifecycle - single response resolution.

Turns one (status code, body) pair into success/exception/complete callback
invocations for one request.
"""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog

from rpcbatcher.core.errors import ProtocolError, classified_error
from rpcbatcher.transport.interface import HTTP_OK, is_empty_body

if TYPE_CHECKING:
    from rpcbatcher.core.request import RpcRequest

logger = structlog.get_logger(__name__)


def _has_member(body: Any, name: str) -> bool:
    return isinstance(body, Mapping) and name in body


def handle_response(request: "RpcRequest", status_code: int, body: Any) -> None:
    """
    Resolve a response for a single request.
    
    Rules, in order:
    1. Notification, status 200 and an empty body: acknowledged, nothing fires.
    2. Status 200 with a ``result`` member: success handler gets the result.
    3. Non-200 status or an ``error`` member: exception handler gets
       ``{"code": status, "message": body}`` or the ``error`` member.
    4. Anything else is a malformed response and raises ProtocolError.
    The complete handler runs after 2 and 3.
    
    Args:
        request: Request the response belongs to
        status_code: Transport status of the call
        body: Response object for this request
        
    Raises:
        ProtocolError: On a 200 response without result and error
    """
    if status_code == HTTP_OK and is_empty_body(body) and request.is_notification:
        request.mark_completed()
        logger.debug("notification_acknowledged", method=request.method)
        return
    
    if status_code == HTTP_OK and _has_member(body, "result"):
        logger.debug("request_succeeded", method=request.method, request_id=request.id)
        request.success_handler(body["result"])
    elif status_code != HTTP_OK or _has_member(body, "error"):
        if status_code != HTTP_OK:
            error = classified_error(status_code, body)
        else:
            error = body["error"]
        logger.debug(
            "request_failed",
            method=request.method,
            request_id=request.id,
            status=status_code,
        )
        request.exception_handler(error)
    else:
        logger.error(
            "malformed_response",
            method=request.method,
            request_id=request.id,
            status=status_code,
        )
        raise ProtocolError(
            f"The JSON-RPC response {body!r} (status {status_code}) has neither "
            f"'result' nor 'error'.",
            status_code=status_code,
            body=body,
        )
    
    request.mark_completed()
    request.complete_handler()
