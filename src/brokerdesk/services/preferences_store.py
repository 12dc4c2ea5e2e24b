# src/brokerdesk/services/preferences_store.py
"""
Preferences Store

Local-only user settings: profile, notification toggles, dark mode,
language, timezone. Every change is written through the key/value storage
port as one JSON document and then the theme effect runs. Nothing here
talks to the remote service.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..core.models import DEFAULT_PROFILE, Settings
from ..core.ports import KeyValueStorageProtocol, ThemeApplier

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_KEY = "brokerdesk_settings"


class PreferencesStore:
    """
    Settings holder with write-through persistence.

    Args:
        storage: Durable key/value port
        apply_theme: Effect called with the dark-mode flag after every change
        storage_key: Key the serialized Settings live under
        defaults: Starting Settings (factory defaults when omitted)
    """

    def __init__(
        self,
        storage: KeyValueStorageProtocol,
        apply_theme: ThemeApplier,
        storage_key: str = DEFAULT_SETTINGS_KEY,
        defaults: Optional[Settings] = None,
    ):
        self._storage = storage
        self._apply_theme = apply_theme
        self._key = storage_key
        self._settings = (defaults or Settings()).model_copy(deep=True)
        # Defaults are shown right away but only written on first change/restore
        self._apply_theme(self._settings.dark_mode)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def storage_key(self) -> str:
        return self._key

    def update(self, partial: Dict[str, Any]) -> Settings:
        """
        Shallow-merge `partial`, persist, apply theme.

        Raises:
            ValueError: `partial` names a field Settings does not have
        """
        unknown = sorted(set(partial) - set(Settings.model_fields))
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(unknown)}")

        merged = {**self._settings.model_dump(), **partial}
        self._settings = Settings.model_validate(merged)
        self._persist()
        self._apply_theme(self._settings.dark_mode)
        return self._settings

    def update_profile(self, **fields: Any) -> Settings:
        """Merge `fields` into the profile sub-record."""
        profile = {**self._settings.profile.model_dump(), **fields}
        return self.update({"profile": profile})

    def merge_profile(self, name: Optional[str], email: Optional[str]) -> None:
        """
        Fill profile name/email from the identity provider, but only where
        the field still holds its default. In-memory only.
        """
        profile = self._settings.profile
        changes: Dict[str, str] = {}
        if name and profile.name == DEFAULT_PROFILE.name:
            changes["name"] = name
        if email and profile.email == DEFAULT_PROFILE.email:
            changes["email"] = email
        if not changes:
            return

        self._settings = self._settings.model_copy(
            update={"profile": profile.model_copy(update=changes)}
        )
        logger.debug(f"Profile filled from identity: {', '.join(changes)}")

    def restore(self) -> Settings:
        """
        Overlay the stored snapshot, replacing in-memory Settings in full.

        Without a snapshot the current Settings are written out instead.
        An unreadable snapshot is logged and left alone.
        """
        stored = self.load()
        if stored is not None:
            self._settings = stored
            logger.info("Restored settings from local storage")
        elif self._storage.get_item(self._key) is None:
            self._persist()
        self._apply_theme(self._settings.dark_mode)
        return self._settings

    def load(self) -> Optional[Settings]:
        """Read the stored snapshot without applying it."""
        raw = self._storage.get_item(self._key)
        if raw is None:
            return None
        try:
            return Settings.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"⚠️ Ignoring unreadable settings under '{self._key}': {e.error_count()} error(s)")
            return None

    def snapshot(self) -> str:
        """Serialized form of the current Settings, as persisted."""
        return self._settings.model_dump_json()

    def _persist(self) -> None:
        self._storage.set_item(self._key, self.snapshot())
