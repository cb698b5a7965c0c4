"""Catalog module: product records and the list view-model."""
from .models import (
    Product,
    CatalogSnapshot,
    SORT_FIELDS,
    SORT_KEY_ALIASES,
    resolve_sort_key,
)
from .view_model import CatalogViewModel

__all__ = [
    'Product',
    'CatalogSnapshot',
    'SORT_FIELDS',
    'SORT_KEY_ALIASES',
    'resolve_sort_key',
    'CatalogViewModel',
]
