"""Concrete HealthDataProvider implementations."""

from __future__ import annotations

from datetime import date
from typing import Any

from tempo.domains.advice.connectors.mock_data import get_mock_health_data
from tempo.domains.advice.domain_logic.health_models import HealthSnapshot


class MockHealthDataProvider:
    """Uses mock data generators. Always available."""

    async def get_daily_snapshot(self, day: date) -> HealthSnapshot:
        return HealthSnapshot.from_dict(get_mock_health_data(day))

    @property
    def data_source(self) -> str:
        return "mock"

    def get_provenance(self) -> dict[str, str]:
        return {
            "data_source": self.data_source,
            "data_source_note": (
                "Using simulated health data. "
                "Send health_data with the request for real measurements."
            ),
        }


class PayloadHealthDataProvider:
    """Serves the health data sent by the client with the request."""

    def __init__(self, payload: dict[str, Any]) -> None:
        self._payload = payload

    async def get_daily_snapshot(self, day: date) -> HealthSnapshot:
        data = dict(self._payload)
        data.setdefault("date", day.isoformat())
        return HealthSnapshot.from_dict(data)

    @property
    def data_source(self) -> str:
        return "payload"

    def get_provenance(self) -> dict[str, str]:
        return {"data_source": self.data_source}
