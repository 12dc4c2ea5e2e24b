# src/brokerdesk/adapters/identity/supabase.py
"""
Supabase Identity Adapter

Implements IdentityProviderProtocol over Supabase Auth. Provider exceptions
propagate unchanged; SessionManager turns them into AuthError.
"""

import logging
from typing import Any, Callable, Dict, Optional

from supabase import AsyncClient

from ...core.models import AuthSession, SessionEvent
from ...core.ports import AuthListener

logger = logging.getLogger(__name__)


def session_from_supabase(session: Any) -> Optional[AuthSession]:
    """Map a supabase Session (or None) onto AuthSession."""
    if session is None:
        return None
    user = getattr(session, "user", None)
    metadata = getattr(user, "user_metadata", None) or {}
    return AuthSession(
        user_id=str(getattr(user, "id", "") or ""),
        email=getattr(user, "email", None),
        full_name=metadata.get("full_name"),
        access_token=getattr(session, "access_token", "") or "",
        expires_at=getattr(session, "expires_at", None),
    )


class SupabaseIdentityProvider:
    """
    Identity provider backed by `client.auth`.

    Args:
        client: Async Supabase client
    """

    def __init__(self, client: AsyncClient):
        self._auth = client.auth

    async def get_session(self) -> Optional[AuthSession]:
        return session_from_supabase(await self._auth.get_session())

    async def sign_in_with_password(self, email: str, password: str) -> None:
        await self._auth.sign_in_with_password({"email": email, "password": password})

    async def sign_up(self, email: str, password: str, full_name: Optional[str] = None) -> None:
        credentials: Dict[str, Any] = {"email": email, "password": password}
        if full_name:
            credentials["options"] = {"data": {"full_name": full_name}}
        await self._auth.sign_up(credentials)

    async def reset_password_for_email(self, email: str, redirect_to: Optional[str] = None) -> None:
        options = {"redirect_to": redirect_to} if redirect_to else {}
        await self._auth.reset_password_for_email(email, options)

    async def update_password(self, password: str) -> None:
        await self._auth.update_user({"password": password})

    async def sign_in_with_oauth(
        self,
        provider: str,
        redirect_to: Optional[str] = None,
        query_params: Optional[Dict[str, str]] = None,
    ) -> str:
        options: Dict[str, Any] = {}
        if redirect_to:
            options["redirect_to"] = redirect_to
        if query_params:
            options["query_params"] = dict(query_params)
        response = await self._auth.sign_in_with_oauth({"provider": provider, "options": options})
        return response.url

    async def sign_out(self) -> None:
        await self._auth.sign_out()

    def on_auth_state_change(self, listener: AuthListener) -> Callable[[], None]:
        def _callback(event: str, session: Any) -> None:
            try:
                mapped = SessionEvent(event)
            except ValueError:
                logger.debug(f"Ignoring unknown auth event {event!r}")
                return
            listener(mapped, session_from_supabase(session))

        subscription = self._auth.on_auth_state_change(_callback)
        return subscription.unsubscribe
