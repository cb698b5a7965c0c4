"""Result of a public session or catalog operation."""
from dataclasses import dataclass
from typing import Optional

from .exceptions import CatalogError


@dataclass(frozen=True)
class Outcome:
    """
    Outcome of one operation.

    Operations never raise for remote, input or precondition failures;
    they return a failed Outcome carrying the exception instead.
    """
    ok: bool
    error: Optional[CatalogError] = None

    @classmethod
    def success(cls) -> 'Outcome':
        return cls(ok=True)

    @classmethod
    def failure(cls, error: CatalogError) -> 'Outcome':
        return cls(ok=False, error=error)

    @property
    def message(self) -> Optional[str]:
        """User-facing error message, None on success."""
        return self.error.message if self.error else None

    def __bool__(self) -> bool:
        return self.ok
