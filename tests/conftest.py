"""Shared test fixtures for borrowwatch."""

import json

import pytest

from borrowwatch.config import AppSettings, DashboardSettings, StorageSettings
from borrowwatch.storage.series_store import SeriesStore


class FakeClock:
    """Manually advanced wall clock returning Unix seconds."""

    def __init__(self, now: float = 50.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_payload(calculation_time: int, coins: list[tuple[str, float, float]]) -> str:
    """Build a raw upstream response body."""
    return json.dumps({
        "code": "000000",
        "data": {
            "calculationTime": calculation_time,
            "coins": [
                {
                    "asset": asset,
                    "totalBorrowInUsdt": borrow,
                    "totalRepayInUsdt": repay,
                }
                for asset, borrow, repay in coins
            ],
        },
    })


@pytest.fixture
def mock_settings(tmp_path) -> AppSettings:
    """Return AppSettings pointing storage at a temp dir."""
    return AppSettings(
        log_level="DEBUG",
        storage=StorageSettings(data_dir=str(tmp_path / "coinsJson")),
        dashboard=DashboardSettings(port=18081),
    )


@pytest.fixture
def store(tmp_path) -> SeriesStore:
    """Initialized SeriesStore in a temp dir."""
    series_store = SeriesStore(tmp_path / "coinsJson")
    series_store.initialize()
    return series_store


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def payload():
    """Factory building raw upstream bodies: payload(calc_time, [(asset, borrow, repay)])."""
    return make_payload
