"""Health data connectors: abstraction layer for daily health snapshots."""

from __future__ import annotations

from datetime import date
from typing import Protocol, runtime_checkable

from tempo.domains.advice.domain_logic.health_models import HealthSnapshot


@runtime_checkable
class HealthDataProvider(Protocol):
    """Abstract interface for daily health data retrieval.

    Tools call these methods without knowing whether data comes from a
    phone health store, a wearable export or a mock generator.
    """

    async def get_daily_snapshot(self, day: date) -> HealthSnapshot:
        """Snapshot for ``day``; scores may be absent and computed later."""
        ...

    @property
    def data_source(self) -> str:
        """Label for the active data source, e.g. 'mock' or 'payload'."""
        ...

    def get_provenance(self) -> dict[str, str]:
        """Return provenance metadata for tool responses."""
        ...
