# src/brokerdesk/core/models/__init__.py
"""
Domain models for the dashboard.

Records mirror rows of the six Supabase tables. They accept unknown extra
columns so a newer schema does not break hydration, and every column is
nullable because the tables allow NULL anywhere but `id`. Settings is the local
preferences record and has no remote counterpart.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field

RecordId = Union[int, str]


class CollectionName(str, Enum):
    """The six remote tables, in hydration request order."""
    LEADS = "leads"
    PROPERTIES = "properties"
    TASKS = "tasks"
    MESSAGES = "messages"
    EVENTS = "events"
    TRANSACTIONS = "transactions"


class TaskPriority(str, Enum):
    """Task priority levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


class SessionEvent(str, Enum):
    """Session transitions reported by the identity provider."""
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    USER_DELETED = "USER_DELETED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"
    MFA_CHALLENGE_VERIFIED = "MFA_CHALLENGE_VERIFIED"


class SessionState(str, Enum):
    """Local authentication state machine."""
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


# =============================================================================
# SESSION
# =============================================================================

class AuthSession(BaseModel):
    """Identity + credential handle. Replaced wholesale, never edited."""
    model_config = ConfigDict(frozen=True)

    user_id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    access_token: str = ""
    expires_at: Optional[int] = None


# =============================================================================
# RECORDS
# =============================================================================

class Record(BaseModel):
    """Common shape of every collection row."""
    model_config = ConfigDict(extra="allow")

    id: RecordId
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class Lead(Record):
    """Prospective client."""
    name: Optional[str] = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    status: Optional[str] = "new"
    source: Optional[str] = None
    budget: Optional[float] = None
    notes: Optional[str] = None


class Message(Record):
    """Inbox message."""
    sender: Optional[str] = ""
    email: Optional[str] = None
    subject: Optional[str] = ""
    body: Optional[str] = ""
    date: Optional[str] = None
    read: Optional[bool] = False
    starred: Optional[bool] = False


class Property(Record):
    """Listed property."""
    name: Optional[str] = ""
    address: Optional[str] = ""
    price: Optional[float] = 0
    type: Optional[str] = "apartment"
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    size: Optional[float] = None
    status: Optional[str] = "active"


class Task(Record):
    """To-do item with completion tracking."""
    title: Optional[str] = ""
    description: Optional[str] = ""
    due_date: Optional[str] = None
    priority: Optional[TaskPriority] = TaskPriority.MEDIUM
    category: Optional[str] = "general"
    completed: Optional[bool] = False
    completed_at: Optional[datetime] = None


class CalendarEvent(Record):
    """Calendar entry. `date` is an ISO date or datetime string."""
    title: Optional[str] = ""
    description: Optional[str] = ""
    date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    color: Optional[str] = "blue"
    duration: Optional[str] = None


class Transaction(Record):
    """Income or expense line."""
    date: Optional[str] = None
    description: Optional[str] = ""
    type: Optional[TransactionType] = TransactionType.INCOME
    category: Optional[str] = "General"
    amount: Optional[float] = 0
    method: Optional[str] = "bank"


COLLECTION_MODELS: Dict[CollectionName, Type[Record]] = {
    CollectionName.LEADS: Lead,
    CollectionName.PROPERTIES: Property,
    CollectionName.TASKS: Task,
    CollectionName.MESSAGES: Message,
    CollectionName.EVENTS: CalendarEvent,
    CollectionName.TRANSACTIONS: Transaction,
}


# =============================================================================
# SETTINGS
# =============================================================================

class Profile(BaseModel):
    """User profile shown in the header and settings screen."""
    model_config = ConfigDict(extra="allow")

    name: str = "New Broker"
    email: str = ""
    phone: str = ""
    role: str = "Broker"


class Settings(BaseModel):
    """Local preferences record. Stored snapshots are trusted as-is."""
    model_config = ConfigDict(extra="allow")

    profile: Profile = Field(default_factory=Profile)
    notify_email: bool = True
    notify_push: bool = True
    notify_sms: bool = False
    dark_mode: bool = False
    language: str = "en"
    timezone: str = "UTC"


DEFAULT_PROFILE = Profile()


__all__ = [
    "RecordId",
    "CollectionName",
    "TaskPriority",
    "TransactionType",
    "SessionEvent",
    "SessionState",
    "AuthSession",
    "Record",
    "Lead",
    "Message",
    "Property",
    "Task",
    "CalendarEvent",
    "Transaction",
    "COLLECTION_MODELS",
    "Profile",
    "Settings",
    "DEFAULT_PROFILE",
]
