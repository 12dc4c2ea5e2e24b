# src/brokerdesk/core/errors.py
"""
Error taxonomy for the sync core.

- AuthError: shown to the user inline, never fatal
- HydrationError: one collection failed to load, logged only
- MutationError: a write failed, logged only, local state untouched
- RemoteError: the remote answered with something unusable
- ConfigurationError: missing Supabase credentials
"""

from typing import Optional


class BrokerDeskError(Exception):
    """Base class for all BrokerDesk errors."""


class ConfigurationError(BrokerDeskError):
    """Raised when required configuration is missing."""


class RemoteError(BrokerDeskError):
    """Raised by repository adapters for malformed remote results."""


class AuthError(BrokerDeskError):
    """
    Authentication failure with a message fit for the auth screen.

    Attributes:
        message: User-presentable text
        cause: Underlying provider exception, if any
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class HydrationError(BrokerDeskError):
    """A single collection fetch failed during hydration."""

    def __init__(self, collection: str, cause: BaseException):
        super().__init__(f"Failed to hydrate {collection}: {cause}")
        self.collection = collection
        self.cause = cause


class MutationError(BrokerDeskError):
    """A remote insert/update/delete failed."""

    def __init__(self, kind: str, collection: str, cause: BaseException):
        super().__init__(f"Error performing {kind} on {collection}: {cause}")
        self.kind = kind
        self.collection = collection
        self.cause = cause
