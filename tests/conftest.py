from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


class FakeExtractSource:
    """In-memory stand-in for ``ExtractDataSource`` used by the tests."""

    def __init__(
        self,
        *,
        movements: list[dict[str, Any]] | None = None,
        movement_history: list[dict[str, Any]] | None = None,
        coffee: list[dict[str, Any]] | None = None,
        coffee_history: list[dict[str, Any]] | None = None,
        catalog: list[dict[str, Any]] | None = None,
        latest_catalog_timestamp: Any = None,
        failing: set[str] | None = None,
    ) -> None:
        self.movements = movements or []
        self.movement_history = movement_history or []
        self.coffee = coffee or []
        self.coffee_history = coffee_history or []
        self.catalog = catalog or []
        self.latest_catalog_timestamp = latest_catalog_timestamp
        self.failing = failing or set()
        self.calls: list[tuple[str, Any]] = []

    def _record(self, name: str, argument: Any = None) -> None:
        from rewards_dashboard.extract_source import DataSourceUnavailableError

        self.calls.append((name, argument))
        if name in self.failing:
            raise DataSourceUnavailableError(name, f"{name} no disponible")

    def fetch_current_movements(self) -> list[dict[str, Any]]:
        self._record("fetch_current_movements")
        return list(self.movements)

    def fetch_historical_movements(self, period_month: str | None = None) -> list[dict[str, Any]]:
        self._record("fetch_historical_movements", period_month)
        if period_month:
            return [doc for doc in self.movement_history if doc.get("periodMonth") == period_month]
        return list(self.movement_history)

    def fetch_current_coffee_movements(self) -> list[dict[str, Any]]:
        self._record("fetch_current_coffee_movements")
        return list(self.coffee)

    def fetch_historical_coffee_movements(self, period_key: str) -> list[dict[str, Any]]:
        self._record("fetch_historical_coffee_movements", period_key)
        return [doc for doc in self.coffee_history if doc.get("periodMonth") == period_key]

    def fetch_catalog_items(self) -> list[dict[str, Any]]:
        self._record("fetch_catalog_items")
        return list(self.catalog)

    def fetch_latest_catalog_timestamp(self) -> Any:
        self._record("fetch_latest_catalog_timestamp")
        return self.latest_catalog_timestamp

    def ping(self) -> bool:
        return "ping" not in self.failing

    def close(self) -> None:
        pass


@pytest.fixture()
def fake_source_factory():
    return FakeExtractSource
