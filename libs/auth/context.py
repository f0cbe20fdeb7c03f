"""Session/identity context for one browser request.

``AuthContext`` holds the current user, session and role, exposes the
account operations (sign up, sign in, sign out, password reset), and
publishes an ``AuthState`` to subscribers whenever the provider reports an
auth event.

Provider events are queued as they arrive and processed after each
operation. When the request is a password-recovery landing, any event that
carries a session is intercepted: the session is parked in the platform's
recovery slot, the auto-created session is ended, and the platform is sent
to the reset-password view. Opening a recovery link therefore never leaves
the opener signed in.
"""

from collections import deque
from contextlib import contextmanager
from typing import Awaitable, Callable, Iterator, Optional

from libs.auth.models import AppRole, AuthOutcome, AuthSession, AuthState, AuthUser
from libs.auth.platform import Platform
from libs.auth.provider import AuthProvider
from libs.auth.recovery import (
    RESET_PASSWORD_PATH,
    RecoverySessionStore,
    is_recovery_callback,
    reset_password_url,
)
from libs.common.errors import AuthProviderError
from libs.common.logging import get_logger
from libs.common.notifications import Notifier
from libs.common.supabase import AUTH_STORAGE_KEY

logger = get_logger(__name__)

RoleResolver = Callable[[AuthUser], Awaitable[Optional[AppRole]]]
AuthStateListener = Callable[[AuthState], None]

# Events that hand the client a live session.
SESSION_EVENTS = frozenset({"SIGNED_IN", "PASSWORD_RECOVERY", "TOKEN_REFRESHED"})

ACCOUNT_EXISTS_MESSAGE = (
    "You already have an account with this email. Please sign in instead."
)
NO_RESET_SESSION_MESSAGE = "No valid session found for password reset"


class AuthContext:
    def __init__(
        self,
        provider: AuthProvider,
        platform: Platform,
        notifier: Notifier,
        resolve_role: RoleResolver,
        recovery_store: Optional[RecoverySessionStore] = None,
    ):
        self._provider = provider
        self._platform = platform
        self._notifier = notifier
        self._resolve_role = resolve_role
        self._recovery = recovery_store or RecoverySessionStore(platform)

        self.user: Optional[AuthUser] = None
        self.session: Optional[AuthSession] = None
        self.role: Optional[AppRole] = None
        self.loading = True
        self.is_recovery_flow = is_recovery_callback(platform.query_params())

        self._listeners: list[AuthStateListener] = []
        self._pending: deque[tuple[str, Optional[AuthSession]]] = deque()
        self._muted = False
        self._intercepted = False
        self._unsubscribe: Optional[Callable[[], None]] = None

    # ------------------------------------------------------------------
    # Lifecycle and subscriptions
    # ------------------------------------------------------------------

    async def start(self) -> "AuthContext":
        """Subscribe to provider events and load the existing session once."""
        self._unsubscribe = self._provider.on_auth_state_change(self._on_provider_event)

        if self.is_recovery_flow:
            # The recovery landing decides what happens to its session.
            self.loading = False
            self._publish("INITIAL_SESSION")
            return self

        try:
            session = await self._provider.get_session()
        except AuthProviderError as exc:
            logger.warning(
                "Stored session could not be restored, continuing signed out",
                extra={"extra_fields": {"error": exc.message}},
            )
            await self._discard_stored_session()
            session = None

        await self._apply_session(session)
        self.loading = False
        self._publish("INITIAL_SESSION")
        return self

    async def _discard_stored_session(self) -> None:
        with self._events_muted():
            try:
                await self._provider.sign_out(scope="local")
            except AuthProviderError as exc:
                logger.warning(
                    "Could not end stale session",
                    extra={"extra_fields": {"error": exc.message}},
                )
        # The stale tokens must not survive in the cookie either way
        self._platform.remove_item(AUTH_STORAGE_KEY)

    def close(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None
        self._listeners.clear()

    def subscribe(self, listener: AuthStateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def state(self) -> AuthState:
        return AuthState(
            event="CURRENT", user=self.user, role=self.role, loading=self.loading
        )

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------

    def _on_provider_event(self, event: str, session: Optional[AuthSession]) -> None:
        if self._muted:
            return
        self._pending.append((event, session))

    @contextmanager
    def _events_muted(self) -> Iterator[None]:
        self._muted = True
        try:
            yield
        finally:
            self._muted = False

    async def process_events(self) -> None:
        """Apply queued provider events in arrival order."""
        while self._pending:
            event, session = self._pending.popleft()

            if self.is_recovery_flow and event in SESSION_EVENTS and session:
                await self._intercept_recovery(session)
                continue

            await self._apply_session(session)
            self._publish(event)

    async def _intercept_recovery(self, session: AuthSession) -> None:
        logger.info("Intercepting recovery sign-in, redirecting to reset password")
        self._intercepted = True
        self._recovery.save(session)

        # Local scope leaves the user's other devices signed in. The server
        # still ends this session, so the parked tokens are only good until
        # the access token expires.
        with self._events_muted():
            try:
                await self._provider.sign_out(scope="local")
            except AuthProviderError as exc:
                logger.warning(
                    "Could not end recovery session",
                    extra={"extra_fields": {"error": exc.message}},
                )

        self.session = None
        self.user = None
        self.role = None
        self._pending.clear()
        self._platform.redirect(reset_password_url(self._platform.query_string()))
        self._publish("SIGNED_OUT")

    async def _apply_session(self, session: Optional[AuthSession]) -> None:
        self.session = session
        self.user = session.user if session else None

        if self.user and not self.is_recovery_flow:
            self.role = await self._resolve_role(self.user)
        else:
            self.role = None

    def _publish(self, event: str) -> None:
        state = AuthState(
            event=event, user=self.user, role=self.role, loading=self.loading
        )
        for listener in list(self._listeners):
            listener(state)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def complete_callback(self) -> AuthOutcome:
        """
        Establish the session carried by an email-link landing.

        In a recovery flow the resulting sign-in is intercepted (see module
        docstring) and the platform ends up on the reset-password view.
        """
        try:
            response = await self._provider.establish_from_callback(
                self._platform.query_params()
            )
        except AuthProviderError as exc:
            self._notifier.error("Link invalid", exc.message)
            return AuthOutcome(error=exc.message)
        finally:
            await self.process_events()

        if response is None:
            message = "This link is invalid or has expired."
            self._notifier.error("Link invalid", message)
            return AuthOutcome(error=message)

        # Not every provider call announces the session it creates.
        if response.session:
            if self.is_recovery_flow and not self._intercepted:
                await self._intercept_recovery(response.session)
            elif not self.is_recovery_flow and self.user is None:
                await self._apply_session(response.session)
                self._publish("SIGNED_IN")
        return AuthOutcome()

    async def sign_up(self, email: str, password: str, name: str) -> AuthOutcome:
        redirect_to = f"{self._platform.origin}/"
        try:
            response = await self._provider.sign_up(email, password, name, redirect_to)
        except AuthProviderError as exc:
            self._notifier.error("Sign up failed", exc.message)
            return AuthOutcome(error=exc.message)
        finally:
            await self.process_events()

        # Supabase answers a sign-up for a known email with a user but no session.
        if response.user and not response.session:
            self._notifier.error("Account already exists", ACCOUNT_EXISTS_MESSAGE)
            return AuthOutcome(error=ACCOUNT_EXISTS_MESSAGE)

        self._notifier.success(
            "Check your email", "Please check your email for a confirmation link."
        )
        return AuthOutcome()

    async def sign_in(self, email: str, password: str) -> AuthOutcome:
        try:
            await self._provider.sign_in_with_password(email, password)
        except AuthProviderError as exc:
            self._notifier.error("Sign in failed", exc.message)
            return AuthOutcome(error=exc.message)
        finally:
            await self.process_events()
        return AuthOutcome()

    async def sign_out(self) -> AuthOutcome:
        try:
            await self._provider.sign_out()
        except AuthProviderError as exc:
            logger.warning(
                "Sign out failed", extra={"extra_fields": {"error": exc.message}}
            )
        finally:
            await self.process_events()

        self.user = None
        self.session = None
        self.role = None
        return AuthOutcome()

    async def reset_password(self, email: str) -> AuthOutcome:
        redirect_to = f"{self._platform.origin}{RESET_PASSWORD_PATH}"
        try:
            await self._provider.reset_password_for_email(email, redirect_to)
        except AuthProviderError as exc:
            self._notifier.error("Reset failed", exc.message)
            return AuthOutcome(error=exc.message)

        self._notifier.success(
            "Check your email",
            "We've sent you a password reset link that expires in 15 minutes.",
        )
        return AuthOutcome()

    async def update_password(self, password: str) -> AuthOutcome:
        """
        Set a new password using the parked recovery session if there is one,
        otherwise the ambient session. The recovery slot is always cleared.
        """
        try:
            recovery_session = self._recovery.load()
            session_to_use = recovery_session or self.session

            if not session_to_use or not session_to_use.access_token:
                self._notifier.error("Password update failed", NO_RESET_SESSION_MESSAGE)
                return AuthOutcome(error=NO_RESET_SESSION_MESSAGE)

            with self._events_muted():
                error = await self._apply_new_password(password, recovery_session)
        finally:
            self._recovery.clear()

        if error:
            self._notifier.error("Password update failed", error)
            return AuthOutcome(error=error)

        self._notifier.success(
            "Password updated", "Your password has been successfully updated."
        )
        return AuthOutcome()

    async def _apply_new_password(
        self, password: str, recovery_session: Optional[AuthSession]
    ) -> Optional[str]:
        if recovery_session:
            try:
                response = await self._provider.set_session(
                    recovery_session.access_token, recovery_session.refresh_token or ""
                )
            except AuthProviderError as exc:
                return exc.message
            self.session = response.session or recovery_session
            self.user = self.session.user

        try:
            await self._provider.update_password(password)
        except AuthProviderError as exc:
            if recovery_session:
                await self._end_transient_session()
            return exc.message
        return None

    async def _end_transient_session(self) -> None:
        try:
            await self._provider.sign_out(scope="local")
        except AuthProviderError as exc:
            logger.warning(
                "Could not end transient recovery session",
                extra={"extra_fields": {"error": exc.message}},
            )
        self.session = None
        self.user = None
