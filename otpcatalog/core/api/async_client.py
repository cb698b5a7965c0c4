"""
Async catalog API client.

Fully asynchronous aiohttp client for the auth-user and catalogue
services. Converts every failure into the RemoteError taxonomy.
"""
import json
import logging
import asyncio
from typing import Dict, Optional, Any, List, Tuple
import aiohttp

from .config import APIConfig
from ..exceptions import NetworkFailure, ServerRejected, MalformedResponse
from ..logging import get_logger


_MISSING = object()

# Where each operation's payload keeps the value we need
PENDING_TOKEN_PATHS: Tuple[Tuple[str, ...], ...] = (
    ('data', 'user_validation_id'),
    ('user_validation_id',),
    ('data', 'access_token'),
    ('access_token',),
)
CREDENTIAL_PATHS: Tuple[Tuple[str, ...], ...] = (
    ('data', 'access_token'),
    ('access_token',),
)
PRODUCTS_PATHS: Tuple[Tuple[str, ...], ...] = (
    ('data', 'products'),
    ('data',),
    ('products',),
)


def _dig(payload: Any, paths: Tuple[Tuple[str, ...], ...]) -> Any:
    """Return the first value found along any of the key paths."""
    for path in paths:
        node = payload
        for key in path:
            if not isinstance(node, dict) or key not in node:
                node = _MISSING
                break
            node = node[key]
        if node is not _MISSING and node is not None:
            return node
    return _MISSING


class AsyncAPIClient:
    """
    Asynchronous catalog API client.

    Features:
    - Full async/await support
    - Configurable proxy, SSL, timeouts
    - Single aiohttp session reused across calls

    Example:
        >>> async with AsyncAPIClient(APIConfig.default()) as api:
        ...     pending = await api.login('user@example.com')
        ...     token = await api.validate_otp(pending, '123456')
        ...     products = await api.list_products(token)
    """

    def __init__(self, config: Optional[APIConfig] = None):
        """
        Initialize async API client.

        Args:
            config: API configuration (uses defaults if not provided)
        """
        self._config = config or APIConfig.default()
        self._session: Optional[aiohttp.ClientSession] = None
        self._connector: Optional[aiohttp.TCPConnector] = None
        self._closed = False

        self._logger = get_logger('otpcatalog.api')
        root_logger = logging.getLogger()
        if not root_logger.handlers:
            self._logger.setLevel(self._config.log_level)

    @property
    def config(self) -> APIConfig:
        """Get current configuration."""
        return self._config

    async def __aenter__(self) -> 'AsyncAPIClient':
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure session is created and open."""
        if self._session is None or self._session.closed:
            self._connector = aiohttp.TCPConnector(
                **self._config.get_connector_kwargs()
            )
            self._session = aiohttp.ClientSession(
                connector=self._connector,
                **self._config.get_session_kwargs()
            )
            self._closed = False
        return self._session

    async def close(self):
        """Close client and release resources."""
        self._closed = True

        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
        self._connector = None

    async def _call(
        self,
        method: str,
        path: str,
        default_message: str,
        json_body: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Any:
        """
        Issue one request and return the decoded JSON payload.

        Raises:
            NetworkFailure: Transport-level failure
            ServerRejected: Non-2xx status
            MalformedResponse: 2xx status with a body that is not JSON
        """
        session = await self._ensure_session()
        url = self._config.url_for(path)

        self._logger.debug(f"{method} {url}")

        try:
            async with session.request(
                method,
                url,
                json=json_body,
                headers=headers,
                proxy=self._config.proxy.to_aiohttp_proxy() if self._config.proxy else None
            ) as response:
                body = await response.read()
                payload = self._parse_response(body)
                self._logger.debug(f"{method} {url} -> {response.status}")

                if not 200 <= response.status < 300:
                    raise ServerRejected(
                        self._error_message(payload, default_message),
                        status=response.status
                    )

                if payload is _MISSING:
                    raise MalformedResponse(f"{default_message}: response is not valid JSON")

                return payload

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._logger.error(f"Network error on {method} {url}: {e!r}")
            raise NetworkFailure(f"Network error: {str(e) or type(e).__name__}") from e

    def _parse_response(self, body: bytes) -> Any:
        """Parse a JSON body; _MISSING when empty, not UTF-8 or not JSON."""
        if not body:
            return _MISSING
        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return _MISSING

    def _error_message(self, payload: Any, default_message: str) -> str:
        """Pick the server-provided reason, or the default."""
        if isinstance(payload, dict):
            for key in ('message', 'detail', 'error'):
                value = payload.get(key)
                if isinstance(value, str) and value:
                    return value
        return default_message

    async def login(self, email: str) -> str:
        """
        Start a login.

        Args:
            email: User email

        Returns:
            Pending-session token for the OTP step
        """
        payload = await self._call(
            'POST',
            self._config.login_path,
            'Login failed',
            json_body={'email': email},
            headers={'language-id': self._config.language_id}
        )

        token = _dig(payload, PENDING_TOKEN_PATHS)
        if token is _MISSING or not isinstance(token, str) or not token:
            raise MalformedResponse("Login response did not include a validation id")

        return token

    async def validate_otp(self, pending_id: str, otp: str) -> str:
        """
        Validate an OTP code.

        Args:
            pending_id: Token returned by login()
            otp: One-time password entered by the user

        Returns:
            Access credential
        """
        payload = await self._call(
            'POST',
            self._config.otp_path,
            'OTP validation failed',
            json_body={'user_validation_id': pending_id, 'otp': otp}
        )

        credential = _dig(payload, CREDENTIAL_PATHS)
        if credential is _MISSING or not isinstance(credential, str) or not credential:
            raise MalformedResponse("OTP validation response did not include an access token")

        return credential

    async def list_products(self, credential: str) -> List[Dict[str, Any]]:
        """
        Retrieve the product list.

        Args:
            credential: Access token from validate_otp()

        Returns:
            Raw product records, in server order
        """
        payload = await self._call(
            'GET',
            self._config.products_path,
            'Failed to fetch products',
            headers={'access-token': credential}
        )

        products = payload if isinstance(payload, list) else _dig(payload, PRODUCTS_PATHS)
        if not isinstance(products, list):
            raise MalformedResponse("Product list response did not include a product list")

        return products
