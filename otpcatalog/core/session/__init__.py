"""
Session management module.

Provides the in-memory login state machine (no persistence).
"""
from .models import (
    SessionState,
    SessionSnapshot,
    Unauthenticated,
    OtpPending,
    Authenticated,
)
from .controller import SessionController

__all__ = [
    'SessionState',
    'SessionSnapshot',
    'Unauthenticated',
    'OtpPending',
    'Authenticated',
    'SessionController',
]
