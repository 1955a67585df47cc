"""Rolling history of recently suggested daily tries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Iterable

from tempo.domains.advice.domain_logic.health_models import parse_date

LOOKBACK_DAYS = 14


@dataclass(frozen=True)
class TryRecord:
    """A single (date, topic) entry; topic is usually a Domain value."""

    date: date
    topic: str


class RecentTryHistory:
    """Date-ordered try records covering a fixed look-back window.

    At most one record is kept per date: appending a second topic for a date
    replaces the first, so same-day suggestions collapse to the latest one.
    Every append evicts records older than ``newest_date - (window_days - 1)``,
    so the history never holds more than ``window_days`` entries.

    Usage::

        history = RecentTryHistory()
        history.append(TryRecord(date(2026, 3, 1), "fitness"))
        history.topics()  # ["fitness"]
    """

    def __init__(
        self,
        records: Iterable[TryRecord] = (),
        window_days: int = LOOKBACK_DAYS,
    ) -> None:
        if window_days < 1:
            raise ValueError("window_days must be at least 1")
        self.window_days = window_days
        self._by_date: dict[date, str] = {}
        for record in records:
            self.append(record)

    def append(self, record: TryRecord) -> None:
        """Add (or replace) the record for ``record.date`` and evict stale ones."""
        self._by_date[record.date] = record.topic
        self._evict()

    def _evict(self) -> None:
        if not self._by_date:
            return
        cutoff = self._window_start(max(self._by_date))
        for day in [d for d in self._by_date if d < cutoff]:
            del self._by_date[day]

    def _window_start(self, as_of: date) -> date:
        return as_of - timedelta(days=self.window_days - 1)

    @property
    def newest_date(self) -> date | None:
        return max(self._by_date) if self._by_date else None

    def records(self) -> list[TryRecord]:
        """All records, oldest first."""
        return [TryRecord(day, self._by_date[day]) for day in sorted(self._by_date)]

    def within_window(self, as_of: date | None = None) -> list[TryRecord]:
        """Records in the window ending at ``as_of`` (defaults to the newest date)."""
        as_of = as_of or self.newest_date
        if as_of is None:
            return []
        start = self._window_start(as_of)
        return [r for r in self.records() if start <= r.date <= as_of]

    def topics(self, as_of: date | None = None) -> list[str]:
        """Topics inside the window, oldest first (duplicates preserved)."""
        return [r.topic for r in self.within_window(as_of)]

    def before(self, day: date) -> RecentTryHistory:
        """A copy holding only records dated strictly before ``day``."""
        return RecentTryHistory(
            (r for r in self.records() if r.date < day), window_days=self.window_days
        )

    def __len__(self) -> int:
        return len(self._by_date)

    def __iter__(self):
        return iter(self.records())

    def __repr__(self) -> str:
        return f"RecentTryHistory(window_days={self.window_days}, records={len(self)})"

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[tuple[Any, str]],
        window_days: int = LOOKBACK_DAYS,
    ) -> RecentTryHistory:
        """Build from ``(date-or-iso-string, topic)`` pairs in any order."""
        records = sorted(
            (TryRecord(parse_date(day), str(topic)) for day, topic in pairs),
            key=lambda r: r.date,
        )
        return cls(records, window_days=window_days)

    def to_list(self) -> list[dict[str, str]]:
        return [{"date": r.date.isoformat(), "topic": r.topic} for r in self.records()]
