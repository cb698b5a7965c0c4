"""
Session controller.

Owns the authentication state machine and drives the two-step
email + OTP login protocol.
"""
import asyncio
from typing import Optional, Callable

from ..api.events import EventEmitter
from ..api.protocols import CatalogAPI
from ..exceptions import (
    CatalogError,
    InvalidInput,
    PreconditionFailed,
    NetworkFailure,
    MalformedResponse,
)
from ..logging import get_logger
from ..outcome import Outcome
from .models import (
    SessionState,
    SessionSnapshot,
    Unauthenticated,
    OtpPending,
    Authenticated,
)


class SessionController:
    """
    Login state machine.

    States: Unauthenticated -> OtpPending(email) -> Authenticated(credential).
    Remote failures never advance or roll back the machine; they only set
    the error message. Calls are serialized per instance so a second
    submission cannot interleave its state writes with the first one.

    Example:
        >>> session = SessionController(api)
        >>> await session.submit_login('user@example.com')
        >>> await session.submit_otp('123456')
        >>> session.credential
        'tok-abc'
    """

    def __init__(self, api: CatalogAPI):
        """
        Initialize controller.

        Args:
            api: Backend implementing login() and validate_otp()
        """
        self._api = api
        self._state: SessionState = Unauthenticated()
        self._error: Optional[str] = None
        self._lock = asyncio.Lock()
        # Bumped by logout(); completions from an older generation are dropped
        self._generation = 0
        self._events = EventEmitter()
        self._logger = get_logger('otpcatalog.session')

    def on(self, event: str, callback: Callable) -> 'SessionController':
        """Register an observer ('state_changed' receives a SessionSnapshot)."""
        self._events.on(event, callback)
        return self

    def off(self, event: str, callback: Optional[Callable] = None) -> 'SessionController':
        """Remove an observer."""
        self._events.off(event, callback)
        return self

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def credential(self) -> Optional[str]:
        """Access credential, None unless authenticated."""
        if isinstance(self._state, Authenticated):
            return self._state.credential
        return None

    @property
    def busy(self) -> bool:
        """True while a login or OTP call is in flight."""
        return self._lock.locked()

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(state=self._state, error=self._error)

    def _commit(self, state: SessionState, error: Optional[str]) -> None:
        self._state = state
        self._error = error
        self._events.emit('state_changed', self.snapshot())

    def _fail(self, operation: str, error: CatalogError) -> Outcome:
        """Record a failure and keep the current state."""
        if isinstance(error, NetworkFailure):
            self._logger.warning(f"{operation}: network failure: {error.message}")
        elif isinstance(error, MalformedResponse):
            self._logger.error(f"{operation}: malformed response: {error.message}")
        elif isinstance(error, (InvalidInput, PreconditionFailed)):
            self._logger.error(f"{operation}: {error.kind}: {error.message}")
        else:
            self._logger.info(f"{operation}: rejected: {error.message}")

        self._commit(self._state, error.message)
        return Outcome.failure(error)

    def _superseded(self, operation: str) -> Outcome:
        """Drop the result of a call that finished after logout()."""
        self._logger.info(f"{operation}: session was reset while the call was in flight, result dropped")
        return Outcome.failure(PreconditionFailed("Session was reset while the request was in flight"))

    async def submit_login(self, email: str) -> Outcome:
        """
        Send the login request for an email address.

        On success the machine moves to OtpPending(email); on failure it
        stays where it was and the error message is set.

        Args:
            email: User email (must be non-empty)

        Returns:
            Outcome of the attempt
        """
        email = (email or '').strip()
        if not email:
            return self._fail('login', InvalidInput("Email is required"))

        async with self._lock:
            generation = self._generation
            try:
                pending_id = await self._api.login(email)
            except CatalogError as e:
                if generation != self._generation:
                    return self._superseded('login')
                return self._fail('login', e)

            if generation != self._generation:
                return self._superseded('login')

            if isinstance(self._state, Authenticated):
                self._logger.info("Re-authentication started, dropping current credential")

            self._logger.info(f"Login accepted for {email}, waiting for OTP")
            self._commit(OtpPending(email=email, pending_id=pending_id), None)
            return Outcome.success()

    async def submit_otp(self, code: str) -> Outcome:
        """
        Send the OTP code for the pending login.

        Requires the OtpPending state. On success the machine moves to
        Authenticated(credential).

        Args:
            code: One-time password

        Returns:
            Outcome of the attempt
        """
        code = (code or '').strip()
        if not code:
            return self._fail('otp', InvalidInput("OTP code is required"))

        async with self._lock:
            state = self._state
            if not isinstance(state, OtpPending):
                return self._fail(
                    'otp',
                    PreconditionFailed("No login is waiting for an OTP code")
                )

            generation = self._generation
            try:
                credential = await self._api.validate_otp(state.pending_id, code)
            except CatalogError as e:
                if generation != self._generation:
                    return self._superseded('otp')
                return self._fail('otp', e)

            if generation != self._generation:
                return self._superseded('otp')

            if not credential:
                return self._fail(
                    'otp',
                    MalformedResponse("OTP validation response did not include an access token")
                )

            self._logger.info(f"OTP accepted for {state.email}")
            self._commit(Authenticated(credential=credential), None)
            return Outcome.success()

    def logout(self) -> Outcome:
        """Forget the credential and any pending login."""
        self._generation += 1
        if not isinstance(self._state, Unauthenticated):
            self._logger.info("Logged out")
        self._commit(Unauthenticated(), None)
        return Outcome.success()

    reset = logout
