# src/brokerdesk/services/aggregates.py
"""
Derived aggregates for sidebar badges and the finance view.

Pure functions over record lists, recomputed on every call.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Iterable, Optional, Union

from ..core.models import CalendarEvent, Lead, Message, Property, Task, Transaction, TransactionType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BadgeCounts:
    """Sidebar badge values."""
    inbox: int
    leads: int
    properties: int
    tasks: int
    calendar: int


@dataclass(frozen=True)
class FinanceSummary:
    income: float
    expense: float

    @property
    def net(self) -> float:
        return self.income - self.expense


def parse_timestamp(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """
    Parse an event date into an aware UTC datetime.

    Date-only values mean midnight UTC; naive datetimes are taken as UTC.
    Returns None for anything unparseable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    else:
        text = str(value).strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.debug(f"Unparseable event date: {value!r}")
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def unread_message_count(messages: Iterable[Message]) -> int:
    return sum(1 for m in messages if m.read is False)


def lead_count(leads: Iterable[Lead]) -> int:
    return sum(1 for _ in leads)


def property_count(properties: Iterable[Property]) -> int:
    return sum(1 for _ in properties)


def incomplete_task_count(tasks: Iterable[Task]) -> int:
    return sum(1 for t in tasks if t.completed is False)


def upcoming_event_count(events: Iterable[CalendarEvent], now: Optional[datetime] = None) -> int:
    """Events dated at or after `now` (wall clock when omitted)."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    count = 0
    for event in events:
        when = parse_timestamp(event.date)
        if when is not None and when >= now:
            count += 1
    return count


def badge_counts(store, now: Optional[datetime] = None) -> BadgeCounts:
    """Bundle all badge values from a CollectionStore."""
    return BadgeCounts(
        inbox=unread_message_count(store.messages),
        leads=lead_count(store.leads),
        properties=property_count(store.properties),
        tasks=incomplete_task_count(store.tasks),
        calendar=upcoming_event_count(store.events, now),
    )


def finance_summary(transactions: Iterable[Transaction]) -> FinanceSummary:
    """Income and expense totals; net is their difference."""
    income = 0.0
    expense = 0.0
    for t in transactions:
        if t.type == TransactionType.EXPENSE:
            expense += t.amount or 0
        else:
            income += t.amount or 0
    return FinanceSummary(income=income, expense=expense)
