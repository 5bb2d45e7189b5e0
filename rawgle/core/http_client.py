"""
Async HTTP client for the Rawgle backend API.
"""
from typing import Any, Dict, Optional
import logging
import httpx
from rawgle.config import settings
from rawgle.core.security import TokenStore, token_store as default_token_store
from rawgle.core.exceptions import (
    NetworkError,
    UnauthorizedError,
    NotFoundError,
    ValidationFailedError,
    ServerError,
    InvalidResponseError,
    extract_error_message,
)

logger = logging.getLogger(__name__)


class ApiClient:
    """Wrapper around httpx.AsyncClient: base URL, bearer auth and error translation"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        token_store: Optional[TokenStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.api_url
        self.timeout = timeout or settings.API_TIMEOUT
        self.token_store = token_store or default_token_store
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def connect(self):
        """Create the underlying connection pool"""
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=self._transport,
        )
        logger.info(f"API client ready: {self.base_url}")

    async def disconnect(self):
        """Close the connection pool"""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("API client closed")

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def __aenter__(self) -> "ApiClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.disconnect()

    def _auth_headers(self) -> Dict[str, str]:
        token = self.token_store.get()
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        expect_json: bool = True,
    ) -> Any:
        """
        Send a request and return the decoded JSON body (None for empty bodies).
        With expect_json=False the body of a successful response is ignored.

        Raises:
            NetworkError: no usable response (connection failure, timeout, undecodable stream)
            UnauthorizedError: 401
            NotFoundError: 404
            ValidationFailedError: any other 4xx
            ServerError: 5xx
            InvalidResponseError: 2xx with a body that is not JSON
        """
        if self._client is None:
            await self.connect()

        try:
            response = await self._client.request(
                method,
                path,
                params=params,
                json=json,
                headers=self._auth_headers(),
            )
        except httpx.TimeoutException as e:
            logger.error(f"{method} {path} timed out: {e}")
            raise NetworkError() from e
        except httpx.RequestError as e:
            logger.error(f"{method} {path} failed: {type(e).__name__}: {e}")
            raise NetworkError() from e

        if response.status_code >= 400:
            self._raise_for_status(method, path, response)

        if not expect_json or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"{method} {path} returned non-JSON body: {response.text[:200]}")
            raise InvalidResponseError(status_code=response.status_code) from e

    def _raise_for_status(self, method: str, path: str, response: httpx.Response):
        status_code = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = response.text
        message = extract_error_message(body)

        logger.warning(f"{method} {path} -> {status_code}: {message or 'no error message'}")

        if status_code == 401:
            # Re-authentication belongs to the auth flow, not to this client
            raise UnauthorizedError(status_code=status_code)
        if status_code == 404:
            raise NotFoundError(message, status_code=status_code)
        if status_code >= 500:
            raise ServerError(status_code=status_code)
        raise ValidationFailedError(message, status_code=status_code)

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Optional[Any] = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Optional[Any] = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str, expect_json: bool = True) -> Any:
        return await self.request("DELETE", path, expect_json=expect_json)


# Singleton instance
api_client = ApiClient()


# Convenience functions
async def init_client():
    """Open the shared API client"""
    await api_client.connect()


async def close_client():
    """Close the shared API client"""
    await api_client.disconnect()
