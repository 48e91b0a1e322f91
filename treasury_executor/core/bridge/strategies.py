"""
Attached value strategies.

- FixedValue: attach the full fee total declared by the treasury.
- BalanceAdjustedValue: let the treasury's own native balance cover part of
  the fees, never dropping below the mandatory floor, plus a storage margin.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from .contracts import TreasuryContract
from .models import DEFAULT_STORAGE_MARGIN, FeeSnapshot, ValueStrategyKind


def balance_adjusted_value(
    total_required: int,
    treasury_balance: int,
    minimum_required: int,
    storage_margin: int,
) -> int:
    """``max(total_required - treasury_balance, minimum_required) + storage_margin``"""
    needed = total_required - treasury_balance
    if needed < minimum_required:
        needed = minimum_required
    return needed + storage_margin


class ValueStrategy(ABC):
    """Native value to attach to a bridge message."""

    kind: ValueStrategyKind

    @abstractmethod
    async def required_value(self, snapshot: FeeSnapshot, treasury: TreasuryContract) -> int:
        """Nanoton to attach for one bridge of this route."""


class FixedValue(ValueStrategy):
    kind = ValueStrategyKind.FIXED

    async def required_value(self, snapshot: FeeSnapshot, treasury: TreasuryContract) -> int:
        return snapshot.total_required_value()

    def __repr__(self) -> str:
        return "FixedValue()"


class BalanceAdjustedValue(ValueStrategy):
    kind = ValueStrategyKind.BALANCE_ADJUSTED

    def __init__(self, storage_margin: int = DEFAULT_STORAGE_MARGIN):
        if storage_margin < 0:
            raise ValueError("storage margin must be non-negative")
        self.storage_margin = storage_margin

    async def required_value(self, snapshot: FeeSnapshot, treasury: TreasuryContract) -> int:
        treasury_balance = await treasury.get_native_balance()
        return balance_adjusted_value(
            snapshot.total_required_value(),
            treasury_balance,
            snapshot.minimum_required_value(),
            self.storage_margin,
        )

    def __repr__(self) -> str:
        return f"BalanceAdjustedValue(storage_margin={self.storage_margin})"


def build_value_strategy(
    kind: ValueStrategyKind,
    storage_margin: int = DEFAULT_STORAGE_MARGIN,
) -> ValueStrategy:
    if kind == ValueStrategyKind.BALANCE_ADJUSTED:
        return BalanceAdjustedValue(storage_margin)
    return FixedValue()
