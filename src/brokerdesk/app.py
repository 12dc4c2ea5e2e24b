# src/brokerdesk/app.py
"""
Dashboard application wiring.

Builds the session manager, collection store, mutation dispatcher and
preferences store around one set of adapters. Views (or the CLI) hold a
DashboardApp and read everything through it.

Usage:
    app = await DashboardApp.from_config(get_config())
    await app.start()
    await app.session.sign_in_with_password(email, password)
    await app.session.wait_for_background()
    print(app.badges())
"""

import logging
from datetime import datetime
from typing import Mapping, Optional

from .config import BrokerDeskConfig
from .adapters.identity import SupabaseIdentityProvider
from .adapters.storage import JsonFileStorage
from .adapters.theme import DocumentTheme
from .core.models import CollectionName
from .core.ports import IdentityProviderProtocol, KeyValueStorageProtocol
from .infrastructure.supabase_client import get_supabase_client
from .repositories import RemoteRepository, build_repositories
from .services import (
    BadgeCounts,
    CollectionStore,
    MutationDispatcher,
    PreferencesStore,
    SessionManager,
    badge_counts,
)

logger = logging.getLogger(__name__)


class DashboardApp:
    """
    Root object holding all sync-core components.

    Args:
        identity: Identity provider adapter
        repositories: One remote repository per collection
        storage: Key/value storage for settings
        theme: Theme effect target (a fresh DocumentTheme when omitted)
        config: Options for OAuth, password reset and the settings key
    """

    def __init__(
        self,
        identity: IdentityProviderProtocol,
        repositories: Mapping[CollectionName, RemoteRepository],
        storage: KeyValueStorageProtocol,
        theme: Optional[DocumentTheme] = None,
        config: Optional[BrokerDeskConfig] = None,
    ):
        self.config = config or BrokerDeskConfig()
        self.theme = theme or DocumentTheme()
        self.collections = CollectionStore(repositories)
        self.preferences = PreferencesStore(
            storage,
            self.theme.apply,
            storage_key=self.config.settings_key,
        )
        self.session = SessionManager(identity, self.collections, self.preferences, self.config)
        self.dispatcher = MutationDispatcher(self.session.current, self.collections)

    @classmethod
    async def from_config(cls, config: BrokerDeskConfig) -> "DashboardApp":
        """Build the app against Supabase and a JSON file for settings."""
        client = await get_supabase_client(config)
        return cls(
            identity=SupabaseIdentityProvider(client),
            repositories=build_repositories(client),
            storage=JsonFileStorage(config.storage_path),
            config=config,
        )

    @property
    def auth_loading(self) -> bool:
        return self.session.auth_loading

    @property
    def data_loading(self) -> bool:
        return self.collections.loading

    def badges(self, now: Optional[datetime] = None) -> BadgeCounts:
        return badge_counts(self.collections, now)

    async def start(self) -> None:
        await self.session.start()
        logger.info("✅ Dashboard started")

    async def stop(self) -> None:
        """Unsubscribe from the provider and let background hydration finish."""
        self.session.stop()
        await self.session.wait_for_background()
        logger.info("Dashboard stopped")
