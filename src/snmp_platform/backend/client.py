"""
HTTP client for the platform backend.

All backend resources live under ``{BACKEND_URL}/api/{version}/``. The client
retries failed calls a fixed number of times with a fixed delay and returns
the last response it received, so callers can map upstream statuses
themselves.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Union

import httpx

from snmp_platform.core.config import BackendConfig, get_api_url, get_config
from snmp_platform.core.errors import BackendError


logger = logging.getLogger(__name__)


class BackendClient:
    """
    Async client for the platform backend.

    Usage:
        async with create_backend_client() as backend:
            response = await backend.get("devices", params="page=2")
            devices = await backend.get_json("devices")
    """

    def __init__(
        self,
        config: Optional[BackendConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize backend client.

        Args:
            config: Backend settings (default: global config)
            transport: Optional httpx transport, used to stub the backend in tests
        """
        self.config = config or get_config().backend
        self.max_retries = self.config.retry_attempts
        self.retry_delay = self.config.retry_delay

        self.client = httpx.AsyncClient(
            timeout=self.config.timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    def url_for(self, endpoint: str) -> str:
        return get_api_url(endpoint, self.config)

    async def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Union[str, Dict[str, Any]]] = None,
        json: Any = None,
        content: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
        retries: Optional[int] = None,
    ) -> httpx.Response:
        """
        Send a request to the backend, retrying on failure.

        A non-2xx response or a transport error is retried up to ``retries``
        more times. Timeouts are not retried.

        Args:
            method: HTTP method
            endpoint: Resource path below /api/{version}/
            params: Query parameters; a string is passed through verbatim
            json: JSON body
            content: Raw body, forwarded as is (takes the place of json)
            headers: Extra headers (e.g. a forwarded Authorization header)
            retries: Override the configured retry count

        Returns:
            The last response received (possibly non-2xx)

        Raises:
            BackendError: If the backend could not be reached
        """
        url = self.url_for(endpoint)
        if isinstance(params, str):
            if params:
                url = f"{url}?{params}"
            params = None

        remaining = self.max_retries if retries is None else retries

        while True:
            try:
                response = await self.client.request(
                    method, url, params=params, json=json, content=content, headers=headers
                )
            except httpx.TimeoutException as e:
                logger.error(f"Backend {method} {url} timed out: {e}")
                raise BackendError("Backend request timed out", 504) from e
            except httpx.TransportError as e:
                if remaining <= 0:
                    logger.error(f"Backend {method} {url} unreachable: {e}")
                    raise BackendError(f"Backend unreachable: {e}", 502) from e
                logger.warning(
                    f"Backend {method} {url} failed, retrying... ({remaining} attempts left): {e}"
                )
            else:
                if response.is_success or remaining <= 0:
                    return response
                logger.warning(
                    f"Backend {method} {url} returned {response.status_code}, "
                    f"retrying... ({remaining} attempts left)"
                )

            remaining -= 1
            await asyncio.sleep(self.retry_delay)

    async def get(self, endpoint: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", endpoint, **kwargs)

    async def post(self, endpoint: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", endpoint, **kwargs)

    async def put(self, endpoint: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", endpoint, **kwargs)

    async def delete(self, endpoint: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", endpoint, **kwargs)

    async def request_json(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        """
        Send a request and decode the JSON body.

        Raises:
            BackendError: On a non-2xx response (carrying the upstream status)
                or when the backend is unreachable
        """
        response = await self.request(method, endpoint, **kwargs)
        if not response.is_success:
            raise BackendError(
                f"Backend {method} {endpoint} failed: HTTP {response.status_code}",
                response.status_code,
                detail=response.text,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise BackendError(f"Backend {method} {endpoint} returned invalid JSON", 502) from e

    async def get_json(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.request_json("GET", endpoint, **kwargs)

    async def post_json(self, endpoint: str, payload: Any = None, **kwargs: Any) -> Any:
        return await self.request_json("POST", endpoint, json=payload, **kwargs)

    async def health_check(self) -> bool:
        """Check whether the backend answers its health endpoint."""
        try:
            response = await self.get("health", retries=1)
            return response.is_success
        except BackendError as e:
            logger.warning(f"Backend health check failed: {e.message}")
            return False

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        await self.close()


def create_backend_client(
    config: Optional[BackendConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> BackendClient:
    """
    Factory function to create a BackendClient.

    Args:
        config: Backend settings (default: global config)
        transport: Optional httpx transport

    Returns:
        Configured BackendClient instance
    """
    return BackendClient(config=config, transport=transport)
