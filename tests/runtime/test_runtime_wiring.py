"""
Tests for route task construction and the process entry point.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from conftest import JETTON_WALLET_ADDRESS, TREASURY_ADDRESS, eth_stack, tac_stack
from treasury_executor.config import Settings
from treasury_executor.core.chain.client import StackResult
from treasury_executor.core.errors import ConfigurationError, QueryError
from treasury_executor.runtime import build_route_tasks, build_scheduler
from treasury_executor.runtime import run as run_module


def _settings(**overrides):
    params = dict(
        _env_file=None,
        tac_usdt_treasury_address=TREASURY_ADDRESS,
        usdt_tac_wallet_address=JETTON_WALLET_ADDRESS,
        eth_usdt_treasury_address=TREASURY_ADDRESS,
        usdt_eth_wallet_address=JETTON_WALLET_ADDRESS,
        task_delay=2,
    )
    params.update(overrides)
    return Settings(**params)


@pytest.mark.asyncio
async def test_build_route_tasks_reads_each_snapshot(mock_client):
    mock_client.view.side_effect = [
        StackResult("get_full_data", tac_stack()),
        StackResult("get_full_data", eth_stack()),
    ]

    tasks = await build_route_tasks(_settings(), mock_client, MagicMock())

    assert [task.name for task in tasks] == ["ton_tac", "ton_eth"]
    assert tasks[0].snapshot.total_required_value() == 115_000_000
    assert tasks[1].snapshot.max_bridge_amount == 1_000_000_000
    assert mock_client.view.await_count == 2


@pytest.mark.asyncio
async def test_build_route_tasks_propagates_snapshot_failure(mock_client):
    mock_client.view.side_effect = QueryError("getter failed")

    with pytest.raises(QueryError):
        await build_route_tasks(_settings(), mock_client, MagicMock())


def test_build_scheduler_uses_settings():
    route = MagicMock()
    route.name = "ton_tac"

    scheduler = build_scheduler(_settings(exit_on_initial_failure=False), [route])

    assert scheduler.interval_seconds == 120.0
    assert scheduler.status()["routes"][0]["name"] == "ton_tac"


# =============================================================================
# Entry point
# =============================================================================


@pytest.mark.asyncio
async def test_serve_requires_mnemonic():
    with patch.object(run_module, "settings", _settings(wallet_mnemonic="")), \
            patch.object(run_module.LiteChainClient, "connect", new=AsyncMock()) as connect:
        with pytest.raises(ConfigurationError, match="WALLET_MNEMONIC"):
            await run_module._serve()

    connect.assert_not_awaited()


@pytest.mark.asyncio
async def test_serve_closes_client_on_startup_failure():
    client = MagicMock()
    client.close = AsyncMock()

    with patch.object(run_module, "settings", _settings(wallet_mnemonic="word " * 24)), \
            patch.object(run_module.LiteChainClient, "connect", new=AsyncMock(return_value=client)), \
            patch.object(
                run_module.WalletSender,
                "from_mnemonic",
                new=AsyncMock(side_effect=ConfigurationError("bad mnemonic")),
            ):
        with pytest.raises(ConfigurationError):
            await run_module._serve()

    client.close.assert_awaited_once()


def test_main_exits_nonzero_on_executor_error():
    with patch.object(run_module, "setup_logging"), \
            patch.object(run_module, "_serve", new=AsyncMock(side_effect=ConfigurationError("no routes"))):
        with pytest.raises(SystemExit) as exc_info:
            run_module.main()

    assert exc_info.value.code == 1
