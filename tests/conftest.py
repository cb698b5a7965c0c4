"""Pytest fixtures for otpcatalog tests."""
import pytest
from unittest.mock import Mock, AsyncMock


@pytest.fixture
def product_records():
    """Returns two catalog records in server order."""
    return [
        {
            'product_id': 1,
            'product_name': 'Zeta',
            'company_name': 'Acme',
            'website': 'https://acme.example.com',
            'product_category': 'Tools',
            'company_address': '1 Main St',
        },
        {
            'product_id': 2,
            'product_name': 'Alpha',
            'company_name': 'Globex',
            'website': 'https://globex.example.com',
            'product_category': 'Garden',
            'company_address': '2 Side Rd',
        },
    ]


@pytest.fixture
def fake_api(product_records):
    """Backend double with successful defaults."""
    api = Mock()
    api.login = AsyncMock(return_value='uv-123')
    api.validate_otp = AsyncMock(return_value='tok-abc')
    api.list_products = AsyncMock(return_value=product_records)
    api.close = AsyncMock()
    return api
