# src/brokerdesk/core/ports/__init__.py
"""
Port Interfaces for Dependency Inversion

Protocol-based interfaces that adapters must implement.
"""

from .protocols import (
    AuthListener,
    IdentityProviderProtocol,
    KeyValueStorageProtocol,
    ThemeApplier,
    ThemeProtocol,
)

__all__ = [
    "AuthListener",
    "IdentityProviderProtocol",
    "KeyValueStorageProtocol",
    "ThemeApplier",
    "ThemeProtocol",
]
