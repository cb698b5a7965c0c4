"""
Unit tests for the session state machine.

Tests SessionController transitions, error handling and serialization.
"""
import asyncio
import pytest

from otpcatalog.core.session import (
    SessionController,
    SessionSnapshot,
    Unauthenticated,
    OtpPending,
    Authenticated,
)
from otpcatalog.core.exceptions import (
    InvalidInput,
    PreconditionFailed,
    NetworkFailure,
    ServerRejected,
    MalformedResponse,
)


class TestSessionModels:
    """Tests for the state dataclasses."""

    def test_authenticated_rejects_empty_credential(self):
        """Test Authenticated always carries a credential."""
        with pytest.raises(ValueError):
            Authenticated(credential='')

    def test_authenticated_repr_hides_credential(self):
        """Test the token does not leak through repr."""
        assert 'tok-abc' not in repr(Authenticated(credential='tok-abc'))

    def test_snapshot_credential(self):
        """Test snapshot helpers."""
        assert SessionSnapshot(Unauthenticated()).credential is None
        snapshot = SessionSnapshot(Authenticated('tok-abc'))
        assert snapshot.credential == 'tok-abc'
        assert snapshot.is_authenticated is True
        assert snapshot.is_otp_pending is False


class TestSubmitLogin:
    """Tests for the login step."""

    @pytest.mark.asyncio
    async def test_login_success_moves_to_otp_pending(self, fake_api):
        """Test Unauthenticated -> OtpPending(email)."""
        session = SessionController(fake_api)

        outcome = await session.submit_login('user@example.com')

        assert outcome.ok is True
        assert session.state == OtpPending(email='user@example.com', pending_id='uv-123')
        assert session.error is None
        fake_api.login.assert_awaited_once_with('user@example.com')

    @pytest.mark.asyncio
    async def test_login_failure_stays_unauthenticated(self, fake_api):
        """Test a rejected login keeps the state and records the message."""
        fake_api.login.side_effect = ServerRejected('User not found', status=404)
        session = SessionController(fake_api)

        outcome = await session.submit_login('user@example.com')

        assert outcome.ok is False
        assert isinstance(outcome.error, ServerRejected)
        assert session.state == Unauthenticated()
        assert session.error == 'User not found'

    @pytest.mark.asyncio
    async def test_login_generic_message(self, fake_api):
        """Test the default message when the server gives none."""
        fake_api.login.side_effect = ServerRejected('Login failed', status=500)
        session = SessionController(fake_api)

        await session.submit_login('user@example.com')

        assert session.error == 'Login failed'

    @pytest.mark.asyncio
    @pytest.mark.parametrize('email', ['', '   ', None])
    async def test_empty_email_is_invalid_input(self, fake_api, email):
        """Test empty email fails fast without a call."""
        session = SessionController(fake_api)

        outcome = await session.submit_login(email)

        assert isinstance(outcome.error, InvalidInput)
        assert session.state == Unauthenticated()
        assert session.error == 'Email is required'
        fake_api.login.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_relogin_from_otp_pending(self, fake_api):
        """Test a repeated login replaces the pending email and token."""
        session = SessionController(fake_api)
        await session.submit_login('first@example.com')

        fake_api.login.return_value = 'uv-456'
        await session.submit_login('second@example.com')

        assert session.state == OtpPending(email='second@example.com', pending_id='uv-456')

    @pytest.mark.asyncio
    async def test_relogin_failure_keeps_otp_pending(self, fake_api):
        """Test a failed repeat login does not fall back to Unauthenticated."""
        session = SessionController(fake_api)
        await session.submit_login('user@example.com')

        fake_api.login.side_effect = NetworkFailure('Network error: refused')
        outcome = await session.submit_login('user@example.com')

        assert outcome.ok is False
        assert session.state == OtpPending(email='user@example.com', pending_id='uv-123')
        assert session.error == 'Network error: refused'

    @pytest.mark.asyncio
    async def test_success_clears_previous_error(self, fake_api):
        """Test the next success supersedes the error message."""
        fake_api.login.side_effect = [ServerRejected('Try later'), 'uv-123']
        session = SessionController(fake_api)

        await session.submit_login('user@example.com')
        assert session.error == 'Try later'

        await session.submit_login('user@example.com')
        assert session.error is None

    @pytest.mark.asyncio
    async def test_email_is_trimmed(self, fake_api):
        """Test surrounding whitespace is dropped."""
        session = SessionController(fake_api)

        await session.submit_login('  user@example.com ')

        fake_api.login.assert_awaited_once_with('user@example.com')


class TestSubmitOtp:
    """Tests for the OTP step."""

    @pytest.mark.asyncio
    async def test_scenario_login_then_otp(self, fake_api):
        """Test the full two-step login."""
        session = SessionController(fake_api)

        await session.submit_login('user@example.com')
        assert session.state == OtpPending(email='user@example.com', pending_id='uv-123')

        outcome = await session.submit_otp('123456')

        assert outcome.ok is True
        assert session.state == Authenticated(credential='tok-abc')
        assert session.credential == 'tok-abc'
        assert session.error is None

    @pytest.mark.asyncio
    async def test_otp_uses_pending_id_from_login(self, fake_api):
        """Test the correlation token is threaded from the login response."""
        fake_api.login.return_value = 'uv-from-server'
        session = SessionController(fake_api)
        await session.submit_login('user@example.com')

        await session.submit_otp('123456')

        fake_api.validate_otp.assert_awaited_once_with('uv-from-server', '123456')

    @pytest.mark.asyncio
    async def test_otp_rejected_stays_pending(self, fake_api):
        """Test a wrong code keeps OtpPending."""
        fake_api.validate_otp.side_effect = ServerRejected('Invalid OTP', status=400)
        session = SessionController(fake_api)
        await session.submit_login('user@example.com')

        outcome = await session.submit_otp('000000')

        assert outcome.ok is False
        assert session.state == OtpPending(email='user@example.com', pending_id='uv-123')
        assert session.credential is None
        assert session.error == 'Invalid OTP'

    @pytest.mark.asyncio
    async def test_otp_malformed_response(self, fake_api):
        """Test a success without credential does not authenticate."""
        fake_api.validate_otp.side_effect = MalformedResponse('no token')
        session = SessionController(fake_api)
        await session.submit_login('user@example.com')

        outcome = await session.submit_otp('123456')

        assert isinstance(outcome.error, MalformedResponse)
        assert isinstance(session.state, OtpPending)

    @pytest.mark.asyncio
    async def test_otp_empty_credential_is_malformed(self, fake_api):
        """Test an empty credential from the backend is rejected."""
        fake_api.validate_otp.return_value = ''
        session = SessionController(fake_api)
        await session.submit_login('user@example.com')

        outcome = await session.submit_otp('123456')

        assert isinstance(outcome.error, MalformedResponse)
        assert session.credential is None

    @pytest.mark.asyncio
    async def test_otp_without_login_is_precondition_failure(self, fake_api):
        """Test OTP before login fails without a call."""
        session = SessionController(fake_api)

        outcome = await session.submit_otp('123456')

        assert isinstance(outcome.error, PreconditionFailed)
        assert session.state == Unauthenticated()
        assert session.error is not None
        fake_api.validate_otp.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_otp_is_invalid_input(self, fake_api):
        """Test empty code fails fast."""
        session = SessionController(fake_api)
        await session.submit_login('user@example.com')

        outcome = await session.submit_otp('')

        assert isinstance(outcome.error, InvalidInput)
        fake_api.validate_otp.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_otp_when_authenticated_is_precondition_failure(self, fake_api):
        """Test a second OTP after authentication is refused."""
        session = SessionController(fake_api)
        await session.submit_login('user@example.com')
        await session.submit_otp('123456')

        outcome = await session.submit_otp('123456')

        assert isinstance(outcome.error, PreconditionFailed)
        assert session.credential == 'tok-abc'


class TestLifecycle:
    """Tests for logout, re-authentication and observers."""

    @pytest.mark.asyncio
    async def test_logout_clears_credential(self, fake_api):
        """Test logout returns to Unauthenticated."""
        session = SessionController(fake_api)
        await session.submit_login('user@example.com')
        await session.submit_otp('123456')

        session.logout()

        assert session.state == Unauthenticated()
        assert session.credential is None

    @pytest.mark.asyncio
    async def test_reauthentication_drops_credential(self, fake_api):
        """Test a new login from Authenticated moves back to OtpPending."""
        session = SessionController(fake_api)
        await session.submit_login('user@example.com')
        await session.submit_otp('123456')

        await session.submit_login('user@example.com')

        assert isinstance(session.state, OtpPending)
        assert session.credential is None

    @pytest.mark.asyncio
    async def test_failed_relogin_keeps_authenticated(self, fake_api):
        """Test a failed login while authenticated keeps the credential."""
        session = SessionController(fake_api)
        await session.submit_login('user@example.com')
        await session.submit_otp('123456')

        fake_api.login.side_effect = NetworkFailure('Network error: down')
        await session.submit_login('user@example.com')

        assert session.credential == 'tok-abc'
        assert session.error == 'Network error: down'

    @pytest.mark.asyncio
    async def test_observers_receive_snapshots(self, fake_api):
        """Test state_changed fires with immutable snapshots."""
        seen = []
        session = SessionController(fake_api).on('state_changed', seen.append)

        await session.submit_login('user@example.com')
        await session.submit_otp('123456')

        assert [type(s.state) for s in seen] == [OtpPending, Authenticated]
        assert all(isinstance(s, SessionSnapshot) for s in seen)

    @pytest.mark.asyncio
    async def test_concurrent_submissions_are_serialized(self, fake_api):
        """Test a second login waits for the first one's outcome."""
        release = asyncio.Event()
        calls = []

        async def slow_login(email):
            calls.append(email)
            if email == 'first@example.com':
                await release.wait()
                return 'uv-first'
            return 'uv-second'

        fake_api.login.side_effect = slow_login
        session = SessionController(fake_api)

        first = asyncio.create_task(session.submit_login('first@example.com'))
        await asyncio.sleep(0)
        second = asyncio.create_task(session.submit_login('second@example.com'))
        await asyncio.sleep(0)

        assert session.busy is True
        assert calls == ['first@example.com']

        release.set()
        await asyncio.gather(first, second)

        assert calls == ['first@example.com', 'second@example.com']
        assert session.state == OtpPending(email='second@example.com', pending_id='uv-second')
        assert session.busy is False

    @pytest.mark.asyncio
    async def test_logout_during_login_wins(self, fake_api):
        """Test a login completing after logout() does not reopen the session."""
        release = asyncio.Event()

        async def slow_login(email):
            await release.wait()
            return 'uv-late'

        fake_api.login.side_effect = slow_login
        session = SessionController(fake_api)

        task = asyncio.create_task(session.submit_login('user@example.com'))
        await asyncio.sleep(0)
        session.logout()
        release.set()
        outcome = await task

        assert isinstance(outcome.error, PreconditionFailed)
        assert session.state == Unauthenticated()
        assert session.error is None

    @pytest.mark.asyncio
    async def test_logout_during_otp_wins(self, fake_api):
        """Test a credential arriving after logout() is discarded."""
        release = asyncio.Event()

        async def slow_otp(pending_id, code):
            await release.wait()
            return 'tok-late'

        fake_api.validate_otp.side_effect = slow_otp
        session = SessionController(fake_api)
        await session.submit_login('user@example.com')

        task = asyncio.create_task(session.submit_otp('123456'))
        await asyncio.sleep(0)
        session.logout()
        release.set()
        outcome = await task

        assert outcome.ok is False
        assert session.state == Unauthenticated()
        assert session.credential is None

    @pytest.mark.asyncio
    async def test_login_after_logout_race_still_works(self, fake_api):
        """Test the next login after a dropped one commits normally."""
        release = asyncio.Event()

        async def slow_login(email):
            await release.wait()
            return 'uv-late'

        fake_api.login.side_effect = slow_login
        session = SessionController(fake_api)
        task = asyncio.create_task(session.submit_login('user@example.com'))
        await asyncio.sleep(0)
        session.logout()
        release.set()
        await task

        fake_api.login.side_effect = None
        outcome = await session.submit_login('user@example.com')

        assert outcome.ok is True
        assert session.state == OtpPending(email='user@example.com', pending_id='uv-123')
