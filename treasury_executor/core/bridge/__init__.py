"""Bridge evaluation and execution components."""

from .contracts import BaseContract, JettonWallet, TreasuryContract, parse_address
from .layouts import ETH_LAYOUT, LAYOUTS, TAC_LAYOUT, FieldKind, FieldRole, FieldSpec, TreasuryLayout, get_layout
from .models import (
    DEFAULT_STORAGE_MARGIN,
    BridgeRequest,
    FeeSnapshot,
    RouteConfig,
    ValueStrategyKind,
    new_query_id,
)
from .strategies import BalanceAdjustedValue, FixedValue, ValueStrategy, balance_adjusted_value, build_value_strategy
from .task import RouteRunReport, RouteTask
from .trigger import BridgeTrigger
from .verifier import OutcomeKind, TransactionOutcome, classify

__all__ = [
    # Models
    "DEFAULT_STORAGE_MARGIN",
    "BridgeRequest",
    "FeeSnapshot",
    "RouteConfig",
    "ValueStrategyKind",
    "new_query_id",
    # Layouts
    "ETH_LAYOUT",
    "LAYOUTS",
    "TAC_LAYOUT",
    "FieldKind",
    "FieldRole",
    "FieldSpec",
    "TreasuryLayout",
    "get_layout",
    # Contracts
    "BaseContract",
    "JettonWallet",
    "TreasuryContract",
    "parse_address",
    # Value strategies
    "BalanceAdjustedValue",
    "FixedValue",
    "ValueStrategy",
    "balance_adjusted_value",
    "build_value_strategy",
    # Trigger / verification
    "BridgeTrigger",
    "OutcomeKind",
    "TransactionOutcome",
    "classify",
    # Task
    "RouteRunReport",
    "RouteTask",
]
