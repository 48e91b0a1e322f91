"""Typed models used by the bridge subsystem."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, FrozenSet, Mapping, Optional

from pytoniq_core import Cell, begin_cell


UINT32_MAX = (1 << 32) - 1
UINT64_MAX = (1 << 64) - 1
# Coins are VarUInteger 16: at most 15 bytes of value
COINS_MAX = (1 << 120) - 1

DEFAULT_STORAGE_MARGIN = 5_000_000  # 0.005 TON kept on the treasury for storage rent


class ValueStrategyKind(str, Enum):
    """How the native value attached to a bridge message is derived."""
    FIXED = "fixed"
    BALANCE_ADJUSTED = "balance_adjusted"


def new_query_id() -> int:
    """Random 64-bit query id; best-effort deduplication only."""
    return random.getrandbits(64)


@dataclass(frozen=True)
class FeeSnapshot:
    """
    Fee and cost structure declared by a treasury contract when it was read.

    ``components`` maps fee names to nanoton amounts; ``mandatory`` names the
    components that must always be attached regardless of the treasury's own
    balance. Snapshots are never mutated; a refresh builds a new one.
    """

    route: str
    components: Mapping[str, int]
    mandatory: FrozenSet[str] = frozenset()
    max_bridge_amount: Optional[int] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        components = dict(self.components)
        for name, amount in components.items():
            if isinstance(amount, bool) or not isinstance(amount, int):
                raise ValueError(f"{self.route}: fee component {name!r} must be an int, got {amount!r}")
            if amount < 0:
                raise ValueError(f"{self.route}: fee component {name!r} is negative ({amount})")

        mandatory = frozenset(self.mandatory)
        unknown = mandatory - components.keys()
        if unknown:
            raise ValueError(f"{self.route}: mandatory components not declared: {sorted(unknown)}")

        if self.max_bridge_amount is not None and self.max_bridge_amount < 0:
            raise ValueError(f"{self.route}: max bridge amount is negative ({self.max_bridge_amount})")

        object.__setattr__(self, "components", MappingProxyType(components))
        object.__setattr__(self, "mandatory", mandatory)
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def total_required_value(self) -> int:
        """Sum of every declared component."""
        total = 0
        for amount in self.components.values():
            total += amount
        return total

    def minimum_required_value(self) -> int:
        """Sum of the mandatory components only."""
        total = 0
        for name in self.mandatory:
            total += self.components[name]
        return total

    def clamp_amount(self, amount: int) -> int:
        """Clamp a bridge amount to the declared maximum, if any."""
        if self.max_bridge_amount is not None and amount > self.max_bridge_amount:
            return self.max_bridge_amount
        return amount

    def age_seconds(self, now: Optional[datetime] = None) -> float:
        now = now or datetime.now(timezone.utc)
        return (now - self.fetched_at).total_seconds()

    def to_dict(self) -> dict:
        return {
            "route": self.route,
            "components": dict(self.components),
            "mandatory": sorted(self.mandatory),
            "maxBridgeAmount": self.max_bridge_amount,
            "totalRequiredValue": self.total_required_value(),
            "minimumRequiredValue": self.minimum_required_value(),
            "fetchedAt": self.fetched_at.isoformat(),
        }


@dataclass(frozen=True)
class RouteConfig:
    """Static configuration of one bridge route."""

    name: str
    variant: str
    treasury_address: str
    jetton_wallet_address: str
    min_bridge_amount: int
    value_strategy: ValueStrategyKind = ValueStrategyKind.FIXED
    storage_margin: int = DEFAULT_STORAGE_MARGIN
    op_code: Optional[int] = None

    def __post_init__(self) -> None:
        if self.min_bridge_amount < 0:
            raise ValueError(f"{self.name}: min bridge amount must be non-negative")
        if self.storage_margin < 0:
            raise ValueError(f"{self.name}: storage margin must be non-negative")
        if self.op_code is not None and not 0 <= self.op_code <= UINT32_MAX:
            raise ValueError(f"{self.name}: op code {self.op_code:#x} does not fit 32 bits")


@dataclass(frozen=True)
class BridgeRequest:
    """One bridge-trigger attempt."""

    amount: int
    value: int
    op_code: int
    query_id: int = field(default_factory=new_query_id)

    def __post_init__(self) -> None:
        if not 0 <= self.amount <= COINS_MAX:
            raise ValueError(f"bridge amount {self.amount} out of range")
        if not 0 <= self.value <= COINS_MAX:
            raise ValueError(f"attached value {self.value} out of range")
        if not 0 <= self.op_code <= UINT32_MAX:
            raise ValueError(f"op code {self.op_code} does not fit 32 bits")
        if not 0 <= self.query_id <= UINT64_MAX:
            raise ValueError(f"query id {self.query_id} does not fit 64 bits")

    def build_body(self) -> Cell:
        """op:uint32 query_id:uint64 amount:Coins extension:(Maybe ^Cell)"""
        return (
            begin_cell()
            .store_uint(self.op_code, 32)
            .store_uint(self.query_id, 64)
            .store_coins(self.amount)
            .store_maybe_ref(None)
            .end_cell()
        )
