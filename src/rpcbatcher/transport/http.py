"""
HTTP transport built on httpx.

POSTs JSON-RPC payloads to a single endpoint and maps the HTTP result onto a
``ResponseOutcome``.
"""

import json
from typing import Optional

import httpx
import structlog

from rpcbatcher.config import ClientConfig, get_config
from rpcbatcher.core.errors import TransportError
from rpcbatcher.transport.interface import HTTP_OK, ResponseOutcome, Transport

logger = structlog.get_logger(__name__)

# Status reported when the endpoint answered 200 with a body that isn't JSON
UNPARSABLE_BODY_STATUS = 500

# Status reported when no HTTP response was received at all
NO_RESPONSE_STATUS = 0


class HttpTransport(Transport):
    """
    JSON-RPC over HTTP POST.
    
    Result mapping:
    - non-200 status: (status, reason phrase)
    - 200 with an empty body: (200, "")
    - 200 with JSON: (200, parsed JSON)
    - 200 with anything else: (500, raw text)
    - no response (connection refused, timeout): (0, error text)
    """
    
    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the HTTP transport.
        
        Args:
            config: Client configuration. Uses global config if not provided.
            client: Pre-built httpx client (e.g. with a mock transport)
        """
        self.config = config or get_config()
        self.url = self.config.url
        self._client = client
        self._owns_client = client is None
    
    @property
    def headers(self) -> dict:
        """Get request headers."""
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
    
    @property
    def auth(self) -> Optional[httpx.BasicAuth]:
        """Get basic auth credentials, if configured."""
        if not self.config.has_auth:
            return None
        return httpx.BasicAuth(self.config.user, self.config.password or "")
    
    async def connect(self) -> None:
        """Create the HTTP client."""
        if not self.url:
            raise TransportError("JSON-RPC endpoint URL not configured")
        
        if self._client is not None:
            return
        
        self._client = httpx.AsyncClient(
            headers=self.headers,
            auth=self.auth,
            timeout=self.config.timeout_seconds,
            verify=self.config.verify_ssl,
        )
        self._owns_client = True
        logger.info("http_transport_connected", url=self.url)
    
    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None
            logger.info("http_transport_disconnected", url=self.url)
    
    async def send(self, payload: str) -> ResponseOutcome:
        """POST the payload and map the HTTP response."""
        if self._client is None:
            await self.connect()
        
        kwargs = {}
        if self.config.has_auth:
            kwargs["auth"] = self.auth
        
        try:
            response = await self._client.post(
                self.url,
                content=payload.encode("utf-8"),
                headers=self.headers,
                **kwargs,
            )
        except httpx.RequestError as e:
            logger.warning("http_request_failed", url=self.url, error=str(e))
            return ResponseOutcome(NO_RESPONSE_STATUS, str(e))
        
        return self._to_outcome(response)
    
    def _to_outcome(self, response: httpx.Response) -> ResponseOutcome:
        if response.status_code != HTTP_OK:
            logger.debug(
                "http_error_status",
                status=response.status_code,
                reason=response.reason_phrase,
            )
            return ResponseOutcome(response.status_code, response.reason_phrase)
        
        text = response.text
        if text == "":
            return ResponseOutcome(HTTP_OK, "")
        
        try:
            return ResponseOutcome(HTTP_OK, json.loads(text))
        except ValueError:
            logger.warning("http_response_not_json", body=text[:200])
            return ResponseOutcome(UNPARSABLE_BODY_STATUS, text)
