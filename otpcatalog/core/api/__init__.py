"""Catalog backend API module."""
from .events import EventEmitter
from .config import APIConfig, ProxyConfig, SSLConfig, TimeoutConfig
from .protocols import CatalogAPI
from .async_client import AsyncAPIClient

__all__ = [
    # Async client
    'AsyncAPIClient',
    'CatalogAPI',

    # Configuration
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',

    # Events
    'EventEmitter',
]
