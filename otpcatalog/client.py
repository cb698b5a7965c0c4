"""
CatalogClient - High-level async client for the OTP login and catalog flow.

Example:
    >>> async with CatalogClient() as client:
    ...     await client.login('user@example.com')
    ...     await client.verify_otp('123456')
    ...     client.sort_by('name')
    ...     for product in client.products:
    ...         print(product.product_name)
"""
from typing import Optional, Tuple

from .core.api import AsyncAPIClient, APIConfig, CatalogAPI
from .core.catalog import CatalogViewModel, Product
from .core.logging import get_logger
from .core.outcome import Outcome
from .core.session import SessionController


class CatalogClient:
    """
    Facade composing the transport, the session controller and the
    catalog view-model.

    With custom configuration:
        >>> config = APIConfig(base_url='https://shop.example.com')
        >>> client = CatalogClient(config=config)
    """

    def __init__(
        self,
        config: Optional[APIConfig] = None,
        *,
        api: Optional[CatalogAPI] = None,
        auto_fetch: bool = True
    ):
        """
        Initialize client.

        Args:
            config: API configuration (ignored when api is given)
            api: Backend to use instead of an AsyncAPIClient
            auto_fetch: Fetch the catalog right after OTP validation
        """
        self._config = config or APIConfig.default()
        self._owns_api = api is None
        self._api = api if api is not None else AsyncAPIClient(self._config)
        self._auto_fetch = auto_fetch
        self._logger = get_logger('otpcatalog.client')
        self._last_error: Optional[str] = None

        self.session = SessionController(self._api)
        self.catalog = CatalogViewModel(self._api)

    async def __aenter__(self) -> 'CatalogClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Release the transport if this client created it."""
        if self._owns_api:
            await self._api.close()

    @property
    def products(self) -> Tuple[Product, ...]:
        """Display-ready product list."""
        return self.catalog.view_products

    @property
    def error(self) -> Optional[str]:
        """Most recent error from either component."""
        return self._last_error

    def _track(self, outcome: Outcome) -> Outcome:
        self._last_error = outcome.message
        return outcome

    async def login(self, email: str) -> Outcome:
        """Step 1: request an OTP for email."""
        return self._track(await self.session.submit_login(email))

    async def verify_otp(self, code: str) -> Outcome:
        """Step 2: validate the OTP, then load the catalog."""
        outcome = await self.session.submit_otp(code)
        if not outcome.ok or not self._auto_fetch:
            return self._track(outcome)

        self._logger.debug("Authenticated, loading catalog")
        return await self.refresh()

    async def refresh(self) -> Outcome:
        """Fetch the catalog with the current credential."""
        return self._track(await self.catalog.fetch(self.session.credential))

    def sort_by(self, field_key: str) -> Outcome:
        return self._track(self.catalog.sort_by(field_key))

    def search(self, term: str) -> Outcome:
        return self._track(self.catalog.search(term))

    def logout(self) -> Outcome:
        """Drop the credential and the product set."""
        self.catalog.clear()
        return self._track(self.session.logout())
