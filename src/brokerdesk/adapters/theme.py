# src/brokerdesk/adapters/theme.py
"""
Document theme state.

Holds the root-level visual mode (the `dark` class on the document root in
the web dashboard). Renderers subscribe to be told when it flips.
"""

import logging
from typing import Callable, List, Set

logger = logging.getLogger(__name__)

DARK_CLASS = "dark"


class DocumentTheme:
    """Global visual-mode toggle, kept apart from rendering."""

    def __init__(self):
        self.classes: Set[str] = set()
        self._listeners: List[Callable[[bool], None]] = []

    @property
    def dark_mode(self) -> bool:
        return DARK_CLASS in self.classes

    def apply(self, dark_mode: bool) -> None:
        changed = dark_mode != self.dark_mode
        if dark_mode:
            self.classes.add(DARK_CLASS)
        else:
            self.classes.discard(DARK_CLASS)
        if changed:
            logger.debug(f"Theme switched to {'dark' if dark_mode else 'light'}")
            for listener in list(self._listeners):
                listener(dark_mode)

    def subscribe(self, listener: Callable[[bool], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
