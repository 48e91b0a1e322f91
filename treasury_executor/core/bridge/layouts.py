"""
Treasury contract variants and their ``get_full_data`` stack layouts.

Each variant declares, once, which stack index holds which field and what
role the field plays (fee component, mandatory fee, bridge cap, metadata).
A single decoder turns a get-method result into a ``FeeSnapshot``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Tuple

from ..chain.client import StackResult
from ..errors import ConfigurationError
from .models import FeeSnapshot, ValueStrategyKind


class FieldKind(str, Enum):
    INT = "int"
    CELL = "cell"
    ADDRESS = "address"


class FieldRole(str, Enum):
    FEE = "fee"                      # Optional fee component
    MANDATORY_FEE = "mandatory_fee"  # Always attached, used as the value floor
    MAX_AMOUNT = "max_amount"        # Upper bound on the bridged jetton amount
    METADATA = "metadata"            # Routing data, not part of the value


@dataclass(frozen=True)
class FieldSpec:
    name: str
    index: int
    kind: FieldKind
    role: FieldRole = FieldRole.METADATA


@dataclass(frozen=True)
class TreasuryLayout:
    """Getter layout and message constants of one treasury variant."""

    variant: str
    op_code: int
    fields: Tuple[FieldSpec, ...]
    default_strategy: ValueStrategyKind = ValueStrategyKind.FIXED
    getter: str = "get_full_data"

    def __post_init__(self) -> None:
        indexes = [field_spec.index for field_spec in self.fields]
        if len(set(indexes)) != len(indexes):
            raise ValueError(f"{self.variant}: duplicate stack index in layout")
        for field_spec in self.fields:
            if field_spec.role != FieldRole.METADATA and field_spec.kind != FieldKind.INT:
                raise ValueError(f"{self.variant}: {field_spec.name} must be an int field")

    def decode(self, route: str, result: StackResult) -> FeeSnapshot:
        components: Dict[str, int] = {}
        mandatory = set()
        metadata: Dict[str, Any] = {}
        max_bridge_amount = None

        for field_spec in self.fields:
            value = _read(result, field_spec)
            if field_spec.role in (FieldRole.FEE, FieldRole.MANDATORY_FEE):
                components[field_spec.name] = value
                if field_spec.role == FieldRole.MANDATORY_FEE:
                    mandatory.add(field_spec.name)
            elif field_spec.role == FieldRole.MAX_AMOUNT:
                max_bridge_amount = value
            else:
                metadata[field_spec.name] = value

        return FeeSnapshot(
            route=route,
            components=components,
            mandatory=frozenset(mandatory),
            max_bridge_amount=max_bridge_amount,
            metadata=metadata,
        )


def _read(result: StackResult, field_spec: FieldSpec) -> Any:
    if field_spec.kind == FieldKind.INT:
        return result.get_int(field_spec.index)
    if field_spec.kind == FieldKind.CELL:
        return result.get_cell(field_spec.index)
    return result.get_address(field_spec.index)


# TON -> TAC through the cross-chain layer jetton proxy
TAC_LAYOUT = TreasuryLayout(
    variant="tac",
    op_code=0x1D350B50,
    default_strategy=ValueStrategyKind.FIXED,
    fields=(
        FieldSpec("evm_data", 0, FieldKind.CELL),
        FieldSpec("ccl_jetton_proxy", 1, FieldKind.ADDRESS),
        FieldSpec("jetton_master", 2, FieldKind.ADDRESS),
        FieldSpec("jetton_wallet_code", 3, FieldKind.CELL),
        FieldSpec("protocol_fee", 4, FieldKind.INT, FieldRole.FEE),
        FieldSpec("tac_executors_fee", 5, FieldKind.INT, FieldRole.FEE),
        FieldSpec("ton_executors_fee", 6, FieldKind.INT, FieldRole.FEE),
        FieldSpec("jetton_transfer_ton_amount", 7, FieldKind.INT, FieldRole.MANDATORY_FEE),
        FieldSpec("treasury_fee", 8, FieldKind.INT, FieldRole.MANDATORY_FEE),
    ),
)

# TON -> Ethereum through the LayerZero OApp
ETH_LAYOUT = TreasuryLayout(
    variant="eth",
    op_code=0x6E6C1865,
    default_strategy=ValueStrategyKind.BALANCE_ADJUSTED,
    fields=(
        FieldSpec("jetton_master", 0, FieldKind.ADDRESS),
        FieldSpec("jetton_wallet_code", 1, FieldKind.CELL),
        FieldSpec("oapp_address", 2, FieldKind.ADDRESS),
        FieldSpec("dst_evm_address", 3, FieldKind.INT),
        FieldSpec("eth_eid", 4, FieldKind.INT),
        FieldSpec("max_bridge_amount", 5, FieldKind.INT, FieldRole.MAX_AMOUNT),
        FieldSpec("native_fee", 6, FieldKind.INT, FieldRole.FEE),
        FieldSpec("estimated_gas_cost", 7, FieldKind.INT, FieldRole.FEE),
        FieldSpec("jetton_transfer_gas_cost", 8, FieldKind.INT, FieldRole.MANDATORY_FEE),
        FieldSpec("treasury_fee", 9, FieldKind.INT, FieldRole.MANDATORY_FEE),
    ),
)

LAYOUTS: Dict[str, TreasuryLayout] = {
    layout.variant: layout for layout in (TAC_LAYOUT, ETH_LAYOUT)
}


def get_layout(variant: str) -> TreasuryLayout:
    layout = LAYOUTS.get(variant.lower())
    if layout is None:
        raise ConfigurationError(
            f"unknown treasury variant {variant!r}; expected one of {sorted(LAYOUTS)}"
        )
    return layout
