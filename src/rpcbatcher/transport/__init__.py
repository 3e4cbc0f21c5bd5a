"""
Transport Layer.

Delivers serialized JSON-RPC payloads and returns raw response outcomes.
"""

from rpcbatcher.transport.interface import ResponseOutcome, Transport
from rpcbatcher.transport.http import HttpTransport

__all__ = [
    "ResponseOutcome",
    "Transport",
    "HttpTransport",
]
