"""
otpcatalog - Async client for an email + OTP login and product catalog.

Usage:
    >>> from otpcatalog import CatalogClient
    >>>
    >>> async with CatalogClient() as client:
    ...     await client.login("user@example.com")
    ...     await client.verify_otp("123456")
    ...     for product in client.products:
    ...         print(product.product_name)
"""
import logging
from .client import CatalogClient

# Configuration
from .core.api import (
    APIConfig,
    ProxyConfig,
    SSLConfig,
    TimeoutConfig,
    AsyncAPIClient,
    CatalogAPI,
)

# State machines
from .core.session import (
    SessionController,
    SessionSnapshot,
    Unauthenticated,
    OtpPending,
    Authenticated,
)
from .core.catalog import CatalogViewModel, CatalogSnapshot, Product
from .core.outcome import Outcome
from .core.exceptions import (
    CatalogError,
    InvalidInput,
    PreconditionFailed,
    RemoteError,
    NetworkFailure,
    ServerRejected,
    MalformedResponse,
)

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for otpcatalog modules.

    Args:
        level: Logging level (default: logging.INFO)
    """
    loggers = [
        'otpcatalog',
        'otpcatalog.api',
        'otpcatalog.session',
        'otpcatalog.catalog',
        'otpcatalog.client',
    ]

    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True


__all__ = [
    'CatalogClient',
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    'AsyncAPIClient',
    'CatalogAPI',
    'SessionController',
    'SessionSnapshot',
    'Unauthenticated',
    'OtpPending',
    'Authenticated',
    'CatalogViewModel',
    'CatalogSnapshot',
    'Product',
    'Outcome',
    'CatalogError',
    'InvalidInput',
    'PreconditionFailed',
    'RemoteError',
    'NetworkFailure',
    'ServerRejected',
    'MalformedResponse',
    'setup_logging',
]
