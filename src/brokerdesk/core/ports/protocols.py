# src/brokerdesk/core/ports/protocols.py
"""
Protocol-based Interfaces for BrokerDesk

Using typing.Protocol for structural subtyping instead of ABC:
- No inheritance required - just implement the methods
- Easier mocking in tests
- The Supabase adapters and the in-memory doubles satisfy the same shape
"""

from typing import Any, Callable, Dict, Optional, Protocol, runtime_checkable

from ..models import AuthSession, SessionEvent

AuthListener = Callable[[SessionEvent, Optional[AuthSession]], None]


# =============================================================================
# IDENTITY
# =============================================================================

@runtime_checkable
class IdentityProviderProtocol(Protocol):
    """
    Protocol for the remote identity service.

    Implementations: SupabaseIdentityProvider
    """

    async def get_session(self) -> Optional[AuthSession]:
        """Return the session already held by the provider, if any."""
        ...

    async def sign_in_with_password(self, email: str, password: str) -> None:
        """Sign in; the provider reports SIGNED_IN through its listeners."""
        ...

    async def sign_up(self, email: str, password: str, full_name: Optional[str] = None) -> None:
        """Register a new account."""
        ...

    async def reset_password_for_email(self, email: str, redirect_to: Optional[str] = None) -> None:
        """Send a password reset link."""
        ...

    async def update_password(self, password: str) -> None:
        """Change the password of the signed-in user."""
        ...

    async def sign_in_with_oauth(
        self,
        provider: str,
        redirect_to: Optional[str] = None,
        query_params: Optional[Dict[str, str]] = None,
    ) -> str:
        """Start an OAuth flow and return the redirect URL."""
        ...

    async def sign_out(self) -> None:
        """End the session; the provider reports SIGNED_OUT."""
        ...

    def on_auth_state_change(self, listener: AuthListener) -> Callable[[], None]:
        """Subscribe to session transitions. Returns an unsubscribe callable."""
        ...


# =============================================================================
# LOCAL STATE
# =============================================================================

@runtime_checkable
class KeyValueStorageProtocol(Protocol):
    """
    Durable local key/value storage (the browser's localStorage equivalent).

    Implementations: JsonFileStorage, InMemoryStorage
    """

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


@runtime_checkable
class ThemeProtocol(Protocol):
    """
    Global visual-mode toggle.

    Implementations: DocumentTheme
    """

    def apply(self, dark_mode: bool) -> None:
        ...


ThemeApplier = Callable[[bool], Any]
