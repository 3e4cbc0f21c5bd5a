"""
Core client components.

This module contains the request and batch models, the error taxonomy, the
correlation id source and the client facade.
"""

from rpcbatcher.core.errors import (
    ClassifiedError,
    ProtocolError,
    RpcBatcherError,
    RpcCallError,
    TransportError,
    ValidationError,
)
from rpcbatcher.core.ids import IdGenerator, get_id_generator, set_id_generator
from rpcbatcher.core.request import RpcRequest, RequestStatus
from rpcbatcher.core.batch import RpcBatch, BatchStatus
from rpcbatcher.core.client import JsonRpcClient

__all__ = [
    "ClassifiedError",
    "ProtocolError",
    "RpcBatcherError",
    "RpcCallError",
    "TransportError",
    "ValidationError",
    "IdGenerator",
    "get_id_generator",
    "set_id_generator",
    "RpcRequest",
    "RequestStatus",
    "RpcBatch",
    "BatchStatus",
    "JsonRpcClient",
]
