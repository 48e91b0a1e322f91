from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from pytoniq_core import Address, begin_cell

from treasury_executor.core.bridge.layouts import ETH_LAYOUT, TAC_LAYOUT
from treasury_executor.core.bridge.models import FeeSnapshot


TREASURY_ADDRESS = "0:" + "11" * 32
JETTON_WALLET_ADDRESS = "0:" + "22" * 32
EXECUTOR_ADDRESS = "0:" + "33" * 32
JETTON_MASTER_ADDRESS = "0:" + "44" * 32
PROXY_ADDRESS = "0:" + "55" * 32


def address_slice(raw: str):
    return begin_cell().store_address(Address(raw)).end_cell().begin_parse()


def tac_stack(
    protocol_fee=10_000_000,
    tac_executors_fee=20_000_000,
    ton_executors_fee=30_000_000,
    jetton_transfer_ton_amount=50_000_000,
    treasury_fee=5_000_000,
):
    return [
        begin_cell().store_uint(1, 8).end_cell(),
        address_slice(PROXY_ADDRESS),
        address_slice(JETTON_MASTER_ADDRESS),
        begin_cell().end_cell(),
        protocol_fee,
        tac_executors_fee,
        ton_executors_fee,
        jetton_transfer_ton_amount,
        treasury_fee,
    ]


def eth_stack(
    max_bridge_amount=1_000_000_000,
    native_fee=2_000_000,
    estimated_gas_cost=1_000_000,
    jetton_transfer_gas_cost=1_500_000,
    treasury_fee=500_000,
):
    return [
        address_slice(JETTON_MASTER_ADDRESS),
        begin_cell().end_cell(),
        address_slice(PROXY_ADDRESS),
        0xDEADBEEF,
        30101,
        max_bridge_amount,
        native_fee,
        estimated_gas_cost,
        jetton_transfer_gas_cost,
        treasury_fee,
    ]


def make_tx(lt, src=None, body=None, compute_ph=None, internal=True, prev_lt=0):
    in_msg = None
    if src is not None:
        in_msg = SimpleNamespace(
            is_internal=internal,
            info=SimpleNamespace(src=Address(src)),
            body=body,
        )
    return SimpleNamespace(
        lt=lt,
        prev_trans_lt=prev_lt,
        prev_trans_hash=prev_lt.to_bytes(32, "big"),
        in_msg=in_msg,
        description=SimpleNamespace(compute_ph=compute_ph),
    )


def vm_phase(exit_code):
    return SimpleNamespace(type_="vm", exit_code=exit_code)


def skipped_phase(reason):
    return SimpleNamespace(type_="skipped", reason=SimpleNamespace(type_=reason))


@pytest.fixture
def tac_snapshot():
    return FeeSnapshot(
        route="ton_tac",
        components={
            "protocol_fee": 10_000_000,
            "tac_executors_fee": 20_000_000,
            "ton_executors_fee": 30_000_000,
            "jetton_transfer_ton_amount": 50_000_000,
            "treasury_fee": 5_000_000,
        },
        mandatory=frozenset({"jetton_transfer_ton_amount", "treasury_fee"}),
    )


@pytest.fixture
def mock_client():
    """Lite chain client stub."""
    client = MagicMock()
    client.view = AsyncMock()
    client.native_balance = AsyncMock(return_value=0)
    client.transactions = AsyncMock(return_value=[])
    return client


@pytest.fixture
def tac_layout():
    return TAC_LAYOUT


@pytest.fixture
def eth_layout():
    return ETH_LAYOUT
