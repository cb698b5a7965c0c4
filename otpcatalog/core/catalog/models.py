"""
Catalog data models.

Contains the Product record, the sort-key table and the snapshot
published to observers.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from ..exceptions import MalformedResponse


ProductId = Union[int, str]

TEXT_FIELDS: Tuple[str, ...] = (
    'product_name',
    'company_name',
    'website',
    'product_category',
    'company_address',
)


def _text_field(data: Dict[str, Any], name: str) -> str:
    value = data.get(name)
    if value is None:
        return ''
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise MalformedResponse(f"Product field {name} has an invalid value: {value!r}")


@dataclass(frozen=True)
class Product:
    """
    A catalog entry.

    Attributes:
        product_id: Unique key within a product set
        product_name: Display name (the field searched)
        company_name: Vendor name
        website: Vendor URL
        product_category: Category label
        company_address: Vendor postal address
    """
    product_id: ProductId
    product_name: str = ''
    company_name: str = ''
    website: str = ''
    product_category: str = ''
    company_address: str = ''

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        """
        Create from a catalog API record.

        Numbers in text fields are kept as their text.

        Raises:
            MalformedResponse: If the record is not a mapping, has no
                int or str id, or has a text field of another type
        """
        if not isinstance(data, dict):
            raise MalformedResponse(f"Product record is not an object: {data!r}")

        product_id = data.get('product_id')
        if product_id is None:
            raise MalformedResponse("Product record has no product_id")
        if isinstance(product_id, bool) or not isinstance(product_id, (int, str)):
            raise MalformedResponse(f"Product record has an invalid product_id: {product_id!r}")

        return cls(
            product_id=product_id,
            **{name: _text_field(data, name) for name in TEXT_FIELDS}
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'product_id': self.product_id,
            'product_name': self.product_name,
            'company_name': self.company_name,
            'website': self.website,
            'product_category': self.product_category,
            'company_address': self.company_address,
        }


# Short names accepted by sort_by() in addition to the attribute names
SORT_KEY_ALIASES: Dict[str, str] = {
    'id': 'product_id',
    'name': 'product_name',
    'company': 'company_name',
    'website': 'website',
    'category': 'product_category',
    'address': 'company_address',
}

SORT_FIELDS: Tuple[str, ...] = (
    'product_id',
    'product_name',
    'company_name',
    'website',
    'product_category',
    'company_address',
)


def resolve_sort_key(field_key: str) -> Optional[str]:
    """Map an alias or attribute name to a Product attribute, None if unknown."""
    if field_key in SORT_FIELDS:
        return field_key
    return SORT_KEY_ALIASES.get(field_key)


@dataclass(frozen=True)
class CatalogSnapshot:
    """
    Immutable view of a CatalogViewModel.

    Attributes:
        source_products: Authoritative set from the last successful fetch
        view_products: Sorted or searched projection of source_products
        error: Last failure message, None after a success
    """
    source_products: Tuple[Product, ...] = ()
    view_products: Tuple[Product, ...] = ()
    error: Optional[str] = None
