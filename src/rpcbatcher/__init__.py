"""
rpcbatcher

A JSON-RPC 2.0 client engine.
Builds request and notification envelopes, sends single calls or batches
over HTTP, and reconciles batch replies onto per-request callbacks.
"""

__version__ = "0.1.0"

from rpcbatcher.core.client import JsonRpcClient
from rpcbatcher.core.request import RpcRequest, RequestStatus
from rpcbatcher.core.batch import RpcBatch, BatchStatus
from rpcbatcher.core.errors import ProtocolError, RpcCallError, ValidationError

__all__ = [
    "JsonRpcClient",
    "RpcRequest",
    "RequestStatus",
    "RpcBatch",
    "BatchStatus",
    "ProtocolError",
    "RpcCallError",
    "ValidationError",
]
