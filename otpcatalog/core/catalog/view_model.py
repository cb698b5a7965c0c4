"""
Catalog view-model.

Holds the fetched product set and a display-ready projection of it.
Sort and search are not composable: each one recomputes the projection
from the full fetched set, and the last one applied wins.
"""
import asyncio
from typing import Optional, Callable, Tuple, List

from ..api.events import EventEmitter
from ..api.protocols import CatalogAPI
from ..exceptions import (
    CatalogError,
    InvalidInput,
    PreconditionFailed,
    MalformedResponse,
    NetworkFailure,
)
from ..logging import get_logger
from ..outcome import Outcome
from .models import Product, CatalogSnapshot, resolve_sort_key, SORT_FIELDS


class CatalogViewModel:
    """
    Product list state.

    Example:
        >>> catalog = CatalogViewModel(api)
        >>> await catalog.fetch(session.credential)
        >>> catalog.sort_by('name')
        >>> [p.product_name for p in catalog.view_products]
    """

    def __init__(self, api: CatalogAPI):
        """
        Initialize view-model.

        Args:
            api: Backend implementing list_products()
        """
        self._api = api
        self._source: Tuple[Product, ...] = ()
        self._view: Tuple[Product, ...] = ()
        self._error: Optional[str] = None
        self._lock = asyncio.Lock()
        # Bumped by clear(); fetches started before it are dropped
        self._generation = 0
        self._events = EventEmitter()
        self._logger = get_logger('otpcatalog.catalog')

    def on(self, event: str, callback: Callable) -> 'CatalogViewModel':
        """Register an observer ('changed' receives a CatalogSnapshot)."""
        self._events.on(event, callback)
        return self

    def off(self, event: str, callback: Optional[Callable] = None) -> 'CatalogViewModel':
        """Remove an observer."""
        self._events.off(event, callback)
        return self

    @property
    def source_products(self) -> Tuple[Product, ...]:
        return self._source

    @property
    def view_products(self) -> Tuple[Product, ...]:
        return self._view

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def busy(self) -> bool:
        """True while a fetch is in flight."""
        return self._lock.locked()

    def snapshot(self) -> CatalogSnapshot:
        return CatalogSnapshot(
            source_products=self._source,
            view_products=self._view,
            error=self._error,
        )

    def _commit(self, source: Tuple[Product, ...], view: Tuple[Product, ...], error: Optional[str]) -> None:
        self._source = source
        self._view = view
        self._error = error
        self._events.emit('changed', self.snapshot())

    def _fail(self, operation: str, error: CatalogError) -> Outcome:
        """Record a failure; both sequences stay as they are."""
        if isinstance(error, NetworkFailure):
            self._logger.warning(f"{operation}: network failure: {error.message}")
        elif isinstance(error, (MalformedResponse, PreconditionFailed)):
            self._logger.error(f"{operation}: {error.kind}: {error.message}")
        else:
            self._logger.info(f"{operation}: {error.kind}: {error.message}")

        self._commit(self._source, self._view, error.message)
        return Outcome.failure(error)

    def _superseded(self) -> Outcome:
        self._logger.info("fetch: catalog was cleared while the call was in flight, result dropped")
        return Outcome.failure(PreconditionFailed("Catalog was cleared while the request was in flight"))

    @staticmethod
    def _build_products(records: List) -> Tuple[Product, ...]:
        products = tuple(Product.from_dict(record) for record in records)

        seen = set()
        for product in products:
            if product.product_id in seen:
                raise MalformedResponse(f"Duplicate product_id in product list: {product.product_id!r}")
            seen.add(product.product_id)

        return products

    async def fetch(self, credential: Optional[str]) -> Outcome:
        """
        Retrieve the catalog and replace the product set.

        A successful fetch discards any sort or search: the projection is
        reset to the full list in server order.

        Args:
            credential: Access credential (must be present)

        Returns:
            Outcome of the fetch
        """
        if not credential:
            return self._fail(
                'fetch',
                PreconditionFailed("Cannot fetch products without an access token")
            )

        async with self._lock:
            generation = self._generation
            try:
                records = await self._api.list_products(credential)
                products = self._build_products(records)
            except CatalogError as e:
                if generation != self._generation:
                    return self._superseded()
                return self._fail('fetch', e)

            if generation != self._generation:
                return self._superseded()

            self._logger.info(f"Fetched {len(products)} products")
            self._commit(products, products, None)
            return Outcome.success()

    def sort_by(self, field_key: str) -> Outcome:
        """
        Sort the full product set by one field, ascending.

        Values compare as text, case-sensitively; ties keep fetch order.
        Any previous search narrowing is discarded.

        Args:
            field_key: Product attribute name or alias ('name', 'category', ...)
        """
        attribute = resolve_sort_key(field_key)
        if attribute is None:
            return self._fail(
                'sort',
                InvalidInput(f"Unknown sort key {field_key!r}; expected one of {', '.join(SORT_FIELDS)}")
            )

        view = tuple(sorted(self._source, key=lambda product: str(getattr(product, attribute))))
        self._commit(self._source, view, None)
        return Outcome.success()

    def search(self, term: str) -> Outcome:
        """
        Keep the products whose name contains term, ignoring case.

        An empty term restores the full set. Any previous sort is discarded.
        """
        needle = (term or '').casefold()
        if not needle:
            view = self._source
        else:
            view = tuple(p for p in self._source if needle in p.product_name.casefold())

        self._commit(self._source, view, None)
        return Outcome.success()

    def clear(self) -> None:
        """Drop the product set (used on logout)."""
        self._generation += 1
        self._commit((), (), None)
