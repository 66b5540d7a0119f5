"""Shared data models: per-asset series, decoded snapshots and cycle outcomes."""

from dataclasses import dataclass, field
from enum import Enum


@dataclass
class AssetSeries:
    """Persisted history of borrow/repay totals for one asset.

    Index ``i`` of ``borrow``, ``repay`` and ``time`` describes the same
    observation. Use ``append`` so the three lists stay the same length.
    """

    borrow: list[float] = field(default_factory=list)
    repay: list[float] = field(default_factory=list)
    time: list[int] = field(default_factory=list)  # Unix seconds

    def __len__(self) -> int:
        return len(self.time)

    def append(self, borrow: float, repay: float, timestamp: int) -> None:
        """Record one observation."""
        self.borrow.append(float(borrow))
        self.repay.append(float(repay))
        self.time.append(int(timestamp))

    def is_consistent(self) -> bool:
        return len(self.borrow) == len(self.repay) == len(self.time)


@dataclass
class CoinStats:
    """Borrow and repay totals reported for one asset in a snapshot."""

    asset: str
    total_borrow: float
    total_repay: float


@dataclass
class Snapshot:
    """One decoded upstream response."""

    calculation_time: int
    coins: list[CoinStats] = field(default_factory=list)

    @property
    def assets(self) -> list[str]:
        return [coin.asset for coin in self.coins]


class CycleOutcome(str, Enum):
    """Result of one ingestion cycle."""

    ACCEPTED = "accepted"
    STALE = "stale"
    FETCH_FAILED = "fetch_failed"


@dataclass
class CycleResult:
    """What a single ingestion cycle did."""

    outcome: CycleOutcome
    calculation_time: int | None = None
    written: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
