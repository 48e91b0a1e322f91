"""
Tests for the lite-server client adapter and stack accessors.
"""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from pytoniq_core import Address, begin_cell

from conftest import TREASURY_ADDRESS, address_slice
from treasury_executor.core.chain.client import LiteChainClient, StackResult, load_lite_config
from treasury_executor.core.errors import ConfigurationError, QueryError


# =============================================================================
# StackResult
# =============================================================================


class TestStackResult:
    def test_typed_accessors(self):
        cell = begin_cell().store_uint(5, 8).end_cell()
        result = StackResult("get_full_data", [42, cell, address_slice(TREASURY_ADDRESS)])

        assert len(result) == 3
        assert result.get_int(0) == 42
        assert result.get_cell(1) is cell
        assert result.get_slice(1).load_uint(8) == 5
        assert result.get_address(2) == Address(TREASURY_ADDRESS)

    def test_address_item_passthrough(self):
        result = StackResult("m", [Address(TREASURY_ADDRESS)])
        assert result.get_address(0) == Address(TREASURY_ADDRESS)

    def test_index_out_of_range(self):
        with pytest.raises(QueryError, match="out of range"):
            StackResult("m", [1]).get_int(3)

    def test_int_type_mismatch(self):
        with pytest.raises(QueryError, match="expected int"):
            StackResult("m", [begin_cell().end_cell()]).get_int(0)

    def test_bool_is_not_int(self):
        with pytest.raises(QueryError):
            StackResult("m", [True]).get_int(0)

    def test_cell_type_mismatch(self):
        with pytest.raises(QueryError, match="expected cell"):
            StackResult("m", [7]).get_cell(0)

    def test_address_from_int_fails(self):
        with pytest.raises(QueryError):
            StackResult("m", [7]).get_address(0)


# =============================================================================
# LiteChainClient
# =============================================================================


def _provider():
    provider = MagicMock()
    provider.run_get_method = AsyncMock(return_value=[1, 2])
    provider.get_account_state = AsyncMock(return_value=SimpleNamespace(balance=1_500))
    provider.get_transactions = AsyncMock(return_value=[])
    provider.close_all = AsyncMock()
    return provider


class TestLiteChainClient:
    @pytest.mark.asyncio
    async def test_view_wraps_stack(self):
        provider = _provider()
        client = LiteChainClient(provider, retry_delay_s=0)
        address = Address(TREASURY_ADDRESS)

        result = await client.view(address, "get_wallet_data")

        assert isinstance(result, StackResult)
        assert result.get_int(1) == 2
        provider.run_get_method.assert_awaited_once_with(address=address, method="get_wallet_data", stack=[])

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self):
        provider = _provider()
        provider.run_get_method.side_effect = [RuntimeError("timeout"), RuntimeError("timeout"), [9]]
        client = LiteChainClient(provider, max_retries=3, retry_delay_s=0)

        result = await client.view(Address(TREASURY_ADDRESS), "get_wallet_data")

        assert result.get_int(0) == 9
        assert provider.run_get_method.await_count == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        provider = _provider()
        provider.get_account_state.side_effect = RuntimeError("no peers")
        client = LiteChainClient(provider, max_retries=2, retry_delay_s=0)

        with pytest.raises(QueryError, match="after 2 attempts") as exc_info:
            await client.native_balance(Address(TREASURY_ADDRESS))

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert provider.get_account_state.await_count == 2

    @pytest.mark.asyncio
    async def test_native_balance(self):
        client = LiteChainClient(_provider(), retry_delay_s=0)
        assert await client.native_balance(Address(TREASURY_ADDRESS)) == 1_500

    @pytest.mark.asyncio
    async def test_transactions(self):
        provider = _provider()
        provider.get_transactions.return_value = ["tx"]
        client = LiteChainClient(provider, retry_delay_s=0)
        address = Address(TREASURY_ADDRESS)

        assert await client.transactions(address, limit=4) == ["tx"]
        provider.get_transactions.assert_awaited_once_with(
            address, 4, from_lt=None, from_hash=None, to_lt=0
        )

    @pytest.mark.asyncio
    async def test_transactions_page_arguments(self):
        provider = _provider()
        client = LiteChainClient(provider, retry_delay_s=0)
        address = Address(TREASURY_ADDRESS)

        await client.transactions(address, limit=16, from_lt=180, from_hash=b"\x01" * 32, to_lt=100)

        provider.get_transactions.assert_awaited_once_with(
            address, 16, from_lt=180, from_hash=b"\x01" * 32, to_lt=100
        )

    @pytest.mark.asyncio
    async def test_close(self):
        provider = _provider()
        await LiteChainClient(provider).close()
        provider.close_all.assert_awaited_once()


# =============================================================================
# load_lite_config
# =============================================================================


class TestLoadLiteConfig:
    @pytest.mark.asyncio
    async def test_from_file(self, tmp_path):
        path = tmp_path / "global.config.json"
        path.write_text(json.dumps({"liteservers": [{"ip": 1, "port": 2}]}))

        config = await load_lite_config(str(path))

        assert config["liteservers"][0]["port"] == 2

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="failed to load"):
            await load_lite_config(str(tmp_path / "nope.json"))

    @pytest.mark.asyncio
    async def test_no_liteservers(self, tmp_path):
        path = tmp_path / "global.config.json"
        path.write_text(json.dumps({"liteservers": []}))

        with pytest.raises(ConfigurationError, match="no liteservers"):
            await load_lite_config(str(path))

    @pytest.mark.asyncio
    async def test_empty_source(self):
        with pytest.raises(ConfigurationError):
            await load_lite_config("")
