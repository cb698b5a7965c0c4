"""
Session state models.

Contains the three states of the login state machine and the snapshot
published to observers.
"""
from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Unauthenticated:
    """No login in progress and no credential."""

    name = 'unauthenticated'


@dataclass(frozen=True)
class OtpPending:
    """
    Login accepted, waiting for the one-time password.

    Attributes:
        email: Email used for the accepted login call
        pending_id: Correlation token returned by that login call
    """
    email: str
    pending_id: str

    name = 'otp_pending'


@dataclass(frozen=True)
class Authenticated:
    """
    OTP validated.

    Attributes:
        credential: Access token for catalog calls (never empty)
    """
    credential: str

    name = 'authenticated'

    def __post_init__(self):
        if not self.credential:
            raise ValueError("Authenticated state requires a non-empty credential")

    def __repr__(self) -> str:
        return "Authenticated(credential=<hidden>)"


SessionState = Union[Unauthenticated, OtpPending, Authenticated]


@dataclass(frozen=True)
class SessionSnapshot:
    """
    Immutable view of a SessionController.

    Attributes:
        state: Current state
        error: Last failure message, None after a success
    """
    state: SessionState
    error: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return isinstance(self.state, Authenticated)

    @property
    def is_otp_pending(self) -> bool:
        return isinstance(self.state, OtpPending)

    @property
    def credential(self) -> Optional[str]:
        if isinstance(self.state, Authenticated):
            return self.state.credential
        return None
