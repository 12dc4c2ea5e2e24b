# src/brokerdesk/services/session_manager.py
"""
Session Manager

Tracks who is signed in and drives what happens when that changes:

    UNAUTHENTICATED --sign_in_with_password--> AUTHENTICATING
    AUTHENTICATING  --failure-->               UNAUTHENTICATED
    any             --event with session-->    AUTHENTICATED
    any             --event without session--> UNAUTHENTICATED

Entering AUTHENTICATED fills the profile from the identity, starts one
background hydration and restores stored settings. Leaving it clears every
collection straight away. A session for a different user while signed in
counts as leaving and re-entering. Token refreshes only swap the session
object.

Usage:
    manager = SessionManager(identity, store, preferences, config)
    await manager.start()
    await manager.sign_in_with_password("jane@agency.com", "secret")
    await manager.wait_for_background()
"""

import asyncio
import logging
from typing import Any, Callable, List, Optional, Set

from ..config import BrokerDeskConfig
from ..core.errors import AuthError
from ..core.models import AuthSession, SessionEvent, SessionState
from ..core.ports import IdentityProviderProtocol
from .collection_store import CollectionStore
from .preferences_store import PreferencesStore

logger = logging.getLogger(__name__)

SessionHandler = Callable[[SessionEvent, Optional[AuthSession]], Any]


def _auth_message(error: Exception) -> str:
    """User-presentable text for a provider failure."""
    return getattr(error, "message", None) or str(error) or "An error occurred"


class SessionManager:
    """
    Authentication state machine over an identity provider.

    Args:
        identity: Remote identity service
        collections: Store hydrated on sign-in and cleared on sign-out
        preferences: Settings holder that receives profile fill and restore
        config: Source of OAuth and password-reset options
    """

    def __init__(
        self,
        identity: IdentityProviderProtocol,
        collections: CollectionStore,
        preferences: PreferencesStore,
        config: Optional[BrokerDeskConfig] = None,
    ):
        self._identity = identity
        self._collections = collections
        self._preferences = preferences
        self._config = config or BrokerDeskConfig()

        self._session: Optional[AuthSession] = None
        self._state = SessionState.UNAUTHENTICATED
        self._auth_loading = True
        self._handlers: List[SessionHandler] = []
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._background: Set[asyncio.Task] = set()

    # -------------------------
    # State
    # -------------------------

    def current(self) -> Optional[AuthSession]:
        return self._session

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def auth_loading(self) -> bool:
        """True until start() has reported the initial session."""
        return self._auth_loading

    def on_change(self, handler: SessionHandler) -> Callable[[], None]:
        """Register `handler(event, session)` for every reported transition."""
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    # -------------------------
    # Lifecycle
    # -------------------------

    async def start(self) -> None:
        """Subscribe to the provider and report the existing session, if any."""
        if self._unsubscribe is None:
            self._unsubscribe = self._identity.on_auth_state_change(self._handle)
        try:
            session = await self._identity.get_session()
        except Exception as e:
            logger.error(f"❌ Could not read current session: {e}")
            session = None
        self._handle(SessionEvent.INITIAL_SESSION, session)
        self._auth_loading = False
        logger.info(f"Session manager started ({self._state.value})")

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def wait_for_background(self) -> None:
        """Wait for hydrations started by sign-in to settle."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    # -------------------------
    # Transitions
    # -------------------------

    def _handle(self, event: SessionEvent, session: Optional[AuthSession]) -> None:
        previous = self._state
        previous_session = self._session
        self._session = session

        if session is not None:
            self._state = SessionState.AUTHENTICATED
            switched = previous_session is not None and previous_session.user_id != session.user_id
            if switched:
                logger.info(f"Switching user from {previous_session.email or previous_session.user_id}")
                self._collections.clear_all()
            if previous is not SessionState.AUTHENTICATED or switched:
                logger.info(f"✅ Signed in as {session.email or session.user_id} ({event.value})")
                self._on_authenticated(session)
        else:
            self._state = SessionState.UNAUTHENTICATED
            if previous is SessionState.AUTHENTICATED or event is SessionEvent.SIGNED_OUT:
                logger.info(f"Signed out ({event.value})")
                self._collections.clear_all()

        for handler in list(self._handlers):
            try:
                handler(event, session)
            except Exception as e:
                logger.error(f"Session handler failed on {event.value}: {e}")

    def _on_authenticated(self, session: AuthSession) -> None:
        self._preferences.merge_profile(session.full_name, session.email)
        self._spawn(self._collections.hydrate_all(self._collections.generation))
        self._preferences.restore()

    # -------------------------
    # Identity operations
    # -------------------------

    async def sign_in_with_password(self, email: str, password: str) -> None:
        """
        Raises:
            AuthError: Credentials rejected or provider unreachable
        """
        if self._state is SessionState.UNAUTHENTICATED:
            self._state = SessionState.AUTHENTICATING
        try:
            await self._identity.sign_in_with_password(email, password)
        except Exception as e:
            if self._state is SessionState.AUTHENTICATING:
                self._state = SessionState.UNAUTHENTICATED
            logger.warning(f"⚠️ Sign-in failed for {email}: {_auth_message(e)}")
            raise AuthError(_auth_message(e), e) from e

        if self._state is SessionState.AUTHENTICATING:
            # Provider did not report the sign-in itself
            self._handle(SessionEvent.SIGNED_IN, await self._identity.get_session())

    async def sign_up(self, email: str, password: str, full_name: Optional[str] = None) -> None:
        try:
            await self._identity.sign_up(email, password, full_name)
        except Exception as e:
            raise AuthError(_auth_message(e), e) from e
        logger.info(f"Registered {email}")

    async def request_password_reset(self, email: str) -> None:
        redirect = self._config.password_reset_redirect_url or None
        try:
            await self._identity.reset_password_for_email(email, redirect)
        except Exception as e:
            raise AuthError(_auth_message(e), e) from e
        logger.info(f"Password reset requested for {email}")

    async def update_password(self, password: str) -> None:
        try:
            await self._identity.update_password(password)
        except Exception as e:
            raise AuthError(_auth_message(e), e) from e

    async def sign_in_with_oauth(self, provider: Optional[str] = None) -> str:
        """Start an OAuth flow; returns the URL to send the user to."""
        try:
            return await self._identity.sign_in_with_oauth(
                provider or self._config.oauth_provider,
                self._config.oauth_redirect_url or None,
                dict(self._config.oauth_query_params),
            )
        except Exception as e:
            raise AuthError(_auth_message(e), e) from e

    async def sign_out(self) -> None:
        try:
            await self._identity.sign_out()
        except Exception as e:
            raise AuthError(_auth_message(e), e) from e
        if self._session is not None:
            # Provider did not report the sign-out itself
            self._handle(SessionEvent.SIGNED_OUT, None)
