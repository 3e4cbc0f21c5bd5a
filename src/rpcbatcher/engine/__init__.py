"""
Response handling engine.

Resolves single responses into callbacks and reconciles batch responses.
"""

from rpcbatcher.engine.lifecycle import handle_response
from rpcbatcher.engine.reconciler import (
    classify_batch_response,
    is_silent_acknowledgement,
    reconcile_responses,
)

__all__ = [
    "handle_response",
    "classify_batch_response",
    "is_silent_acknowledgement",
    "reconcile_responses",
]
