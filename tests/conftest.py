# tests/conftest.py
"""
Pytest configuration and fixtures for the BrokerDesk test suite.

Provides:
- Async Supabase mock client (tables + auth) for testing
- Request log, failure injection and gates to hold requests in flight
- Common fixtures for stores, sessions and a fully wired DashboardApp

Note: Tests never hit a real Supabase project.
"""

import asyncio
import copy
import itertools
import os
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Tuple

import pytest

# Set test environment before imports
os.environ["BROKERDESK_ENV"] = "test"

from brokerdesk.adapters.identity import SupabaseIdentityProvider
from brokerdesk.adapters.storage import InMemoryStorage
from brokerdesk.adapters.theme import DocumentTheme
from brokerdesk.app import DashboardApp
from brokerdesk.config import BrokerDeskConfig
from brokerdesk.repositories import build_repositories
from brokerdesk.services import CollectionStore, PreferencesStore


# ============== Supabase Mock ==============

class MockSupabaseResponse:
    """Mock response from Supabase operations."""
    def __init__(self, data: List[Dict] = None, count: int = None):
        self.data = data
        self.count = count if count is not None else len(data or [])


class MockAPIError(Exception):
    """Stand-in for postgrest / gotrue API errors (they carry `.message`)."""
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MockSupabaseQuery:
    """Chainable query builder with an async execute()."""

    def __init__(self, client: "MockSupabaseClient", table_name: str):
        self._client = client
        self.table_name = table_name
        self._op = "select"
        self._payload: Optional[Dict] = None
        self._filters: Dict[str, Any] = {}
        self._order_by: Optional[Tuple[str, bool]] = None
        self._limit: Optional[int] = None

    def select(self, columns: str = "*"):
        self._op = "select"
        return self

    def insert(self, data: Dict):
        self._op = "insert"
        self._payload = data
        return self

    def update(self, data: Dict):
        self._op = "update"
        self._payload = data
        return self

    def delete(self):
        self._op = "delete"
        return self

    def eq(self, column: str, value: Any):
        self._filters[column] = value
        return self

    def order(self, column: str, desc: bool = False):
        self._order_by = (column, desc)
        return self

    def limit(self, count: int):
        self._limit = count
        return self

    def _matches(self, row: Dict) -> bool:
        return all(row.get(col) == val for col, val in self._filters.items())

    async def execute(self) -> MockSupabaseResponse:
        """Execute the query and return results."""
        client = self._client
        client.requests.append({
            "table": self.table_name,
            "op": self._op,
            "payload": copy.deepcopy(self._payload),
            "filters": dict(self._filters),
            "order": self._order_by,
        })

        gate = client.gates.get(self.table_name)
        if gate is not None:
            await gate.wait()
        else:
            await asyncio.sleep(0)

        failure = client.failures.get((self.table_name, self._op)) or client.failures.get(self.table_name)
        if failure is not None:
            raise failure

        rows = client.data_store.setdefault(self.table_name, [])

        if self._op == "select":
            if client.empty_responses.get(self.table_name):
                return MockSupabaseResponse(data=None)
            data = [copy.deepcopy(r) for r in rows if self._matches(r)]
            if self._order_by:
                column, desc = self._order_by
                data.sort(key=lambda r: r.get(column) or "", reverse=desc)
            if self._limit:
                data = data[:self._limit]
            return MockSupabaseResponse(data=data)

        if self._op == "insert":
            row = dict(self._payload)
            row.setdefault("id", client.next_id())
            row.setdefault("created_at", client.next_timestamp())
            rows.append(row)
            return MockSupabaseResponse(data=[copy.deepcopy(row)])

        if self._op == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(self._payload)
                    updated.append(copy.deepcopy(row))
            return MockSupabaseResponse(data=updated)

        kept = [r for r in rows if not self._matches(r)]
        removed = [r for r in rows if self._matches(r)]
        client.data_store[self.table_name] = kept
        return MockSupabaseResponse(data=removed)


class MockSupabaseAuth:
    """Mock of `client.auth` with password accounts and event listeners."""

    def __init__(self):
        self.users: Dict[str, Dict[str, Any]] = {}
        self.session: Optional[SimpleNamespace] = None
        self.calls: List[Tuple[str, Any]] = []
        self.failures: Dict[str, Exception] = {}
        self._listeners: List[Any] = []
        self._ids = itertools.count(1)

    def add_user(self, email: str, password: str, full_name: Optional[str] = None) -> Dict[str, Any]:
        user = {
            "id": f"user-{next(self._ids)}",
            "email": email,
            "password": password,
            "user_metadata": {"full_name": full_name} if full_name else {},
        }
        self.users[email] = user
        return user

    def make_session(self, email: str) -> SimpleNamespace:
        user = self.users[email]
        return SimpleNamespace(
            access_token=f"token-{user['id']}",
            expires_at=4102444800,
            user=SimpleNamespace(id=user["id"], email=email, user_metadata=dict(user["user_metadata"])),
        )

    def emit(self, event: str, session: Optional[SimpleNamespace]) -> None:
        for listener in list(self._listeners):
            listener(event, session)

    def _check(self, name: str, args: Any) -> None:
        self.calls.append((name, args))
        failure = self.failures.get(name)
        if failure is not None:
            raise failure

    async def get_session(self):
        self._check("get_session", None)
        return self.session

    async def sign_in_with_password(self, credentials: Dict[str, str]):
        self._check("sign_in_with_password", credentials)
        user = self.users.get(credentials["email"])
        if user is None or user["password"] != credentials["password"]:
            raise MockAPIError("Invalid login credentials")
        self.session = self.make_session(credentials["email"])
        self.emit("SIGNED_IN", self.session)
        return SimpleNamespace(session=self.session, user=self.session.user)

    async def sign_up(self, credentials: Dict[str, Any]):
        self._check("sign_up", credentials)
        if credentials["email"] in self.users:
            raise MockAPIError("User already registered")
        full_name = credentials.get("options", {}).get("data", {}).get("full_name")
        self.add_user(credentials["email"], credentials["password"], full_name)
        return SimpleNamespace(session=None)

    async def reset_password_for_email(self, email: str, options: Dict[str, Any] = None):
        self._check("reset_password_for_email", (email, options))

    async def update_user(self, attributes: Dict[str, Any]):
        self._check("update_user", attributes)
        if self.session is None:
            raise MockAPIError("Auth session missing!")
        self.users[self.session.user.email]["password"] = attributes["password"]
        self.emit("USER_UPDATED", self.session)

    async def sign_in_with_oauth(self, credentials: Dict[str, Any]):
        self._check("sign_in_with_oauth", credentials)
        return SimpleNamespace(
            provider=credentials["provider"],
            url=f"https://test.supabase.co/auth/v1/authorize?provider={credentials['provider']}",
        )

    async def sign_out(self):
        self._check("sign_out", None)
        self.session = None
        self.emit("SIGNED_OUT", None)

    def on_auth_state_change(self, callback):
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return SimpleNamespace(id="sub-1", callback=callback, unsubscribe=unsubscribe)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)


class MockSupabaseClient:
    """Mock async Supabase client for testing."""

    def __init__(self):
        self.data_store: Dict[str, List[Dict]] = {}
        self.requests: List[Dict[str, Any]] = []
        self.failures: Dict[Any, Exception] = {}
        self.gates: Dict[str, asyncio.Event] = {}
        self.empty_responses: Dict[str, bool] = {}
        self.auth = MockSupabaseAuth()
        self._ids = itertools.count(1000)
        self._clock = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)

    def table(self, name: str) -> MockSupabaseQuery:
        return MockSupabaseQuery(self, name)

    def next_id(self) -> int:
        return next(self._ids)

    def next_timestamp(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def seed_data(self, table_name: str, data: List[Dict]):
        """Seed test data into a table."""
        self.data_store[table_name] = [dict(row) for row in data]

    def fail(self, table_name: str, op: Optional[str] = None, error: Optional[Exception] = None):
        """Make requests against a table (optionally one operation) raise."""
        key = (table_name, op) if op else table_name
        self.failures[key] = error or MockAPIError(f"{table_name} unavailable")

    def hold(self, table_name: str) -> asyncio.Event:
        """Keep requests to a table in flight until the returned event is set."""
        gate = asyncio.Event()
        self.gates[table_name] = gate
        return gate

    def requests_for(self, table_name: str, op: Optional[str] = None) -> List[Dict[str, Any]]:
        return [
            r for r in self.requests
            if r["table"] == table_name and (op is None or r["op"] == op)
        ]

    def clear(self):
        """Clear all test data."""
        self.data_store.clear()
        self.requests.clear()
        self.failures.clear()
        self.gates.clear()


# ============== Fixtures ==============

SAMPLE_ROWS: Dict[str, List[Dict]] = {
    "leads": [
        {"id": 1, "name": "Ana Ruiz", "email": "ana@example.com", "status": "new",
         "created_at": "2024-01-10T09:00:00+00:00"},
        {"id": 2, "name": "Ben Ode", "email": "ben@example.com", "status": "contacted",
         "created_at": "2024-01-12T09:00:00+00:00"},
    ],
    "properties": [
        {"id": 1, "name": "Harbor Loft", "address": "1 Quay St", "price": 450000,
         "created_at": "2024-01-05T09:00:00+00:00"},
    ],
    "tasks": [
        {"id": 1, "title": "Call notary", "completed": False, "priority": "high",
         "created_at": "2024-01-11T09:00:00+00:00"},
        {"id": 2, "title": "Send brochure", "completed": True, "priority": "low",
         "created_at": "2024-01-09T09:00:00+00:00"},
    ],
    "messages": [
        {"id": 1, "sender": "Ana Ruiz", "subject": "Viewing", "read": False,
         "created_at": "2024-01-13T09:00:00+00:00"},
        {"id": 2, "sender": "Ben Ode", "subject": "Offer", "read": True,
         "created_at": "2024-01-14T09:00:00+00:00"},
    ],
    "events": [
        {"id": 1, "title": "Open house", "date": "2024-02-01",
         "created_at": "2024-01-08T09:00:00+00:00"},
        {"id": 2, "title": "Closing", "date": "2023-12-01",
         "created_at": "2024-01-07T09:00:00+00:00"},
    ],
    "transactions": [
        {"id": 1, "description": "Commission", "type": "income", "amount": 12000,
         "created_at": "2024-01-06T09:00:00+00:00"},
        {"id": 2, "description": "Ads", "type": "expense", "amount": 800,
         "created_at": "2024-01-04T09:00:00+00:00"},
    ],
}

@pytest.fixture(scope="function")
def mock_supabase() -> MockSupabaseClient:
    """
    Mock Supabase client for testing.

    Stores rows in memory and supports select, insert, update, delete and
    the auth calls used by the identity adapter.
    """
    return MockSupabaseClient()


@pytest.fixture(scope="function")
def mock_supabase_with_data(mock_supabase) -> MockSupabaseClient:
    """Supabase mock with sample rows in all six tables and one user."""
    for table_name, rows in SAMPLE_ROWS.items():
        mock_supabase.seed_data(table_name, rows)
    mock_supabase.auth.add_user("jane@agency.com", "secret", full_name="Jane Broker")
    return mock_supabase


@pytest.fixture
def repositories(mock_supabase_with_data):
    return build_repositories(mock_supabase_with_data)


@pytest.fixture
def store(repositories) -> CollectionStore:
    return CollectionStore(repositories)


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def theme() -> DocumentTheme:
    return DocumentTheme()


@pytest.fixture
def preferences(storage, theme) -> PreferencesStore:
    return PreferencesStore(storage, theme.apply)


@pytest.fixture
def test_config() -> BrokerDeskConfig:
    return BrokerDeskConfig(
        environment="test",
        supabase_url="https://test.supabase.co",
        supabase_key="test-key",
        oauth_redirect_url="https://app.example.com/auth/callback",
        password_reset_redirect_url="https://app.example.com/reset",
    )


@pytest.fixture
def app(mock_supabase_with_data, storage, theme, test_config) -> DashboardApp:
    """DashboardApp wired to the Supabase mock."""
    return DashboardApp(
        identity=SupabaseIdentityProvider(mock_supabase_with_data),
        repositories=build_repositories(mock_supabase_with_data),
        storage=storage,
        theme=theme,
        config=test_config,
    )
