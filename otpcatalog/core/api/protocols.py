"""
Backend protocols.

Defines the interface the session controller and the catalog view-model
consume. AsyncAPIClient is the aiohttp implementation; tests substitute
AsyncMock fakes.
"""
from typing import Protocol, List, Dict, Any, runtime_checkable


@runtime_checkable
class CatalogAPI(Protocol):
    """
    Protocol for the three remote operations.

    Implementations raise RemoteError subclasses on failure.
    """

    async def login(self, email: str) -> str:
        """
        Start a login for an email address.

        Returns:
            Pending-session token used to correlate the OTP step
        """
        ...

    async def validate_otp(self, pending_id: str, otp: str) -> str:
        """
        Validate an OTP code for a pending session.

        Returns:
            Access credential
        """
        ...

    async def list_products(self, credential: str) -> List[Dict[str, Any]]:
        """
        Retrieve the product catalog.

        Returns:
            Raw product records
        """
        ...
