"""Contract bindings for jetton wallets and bridge treasuries."""

from __future__ import annotations

import logging
from typing import Any

from pytoniq_core import Address

from ..chain.client import LiteChainClient, StackResult
from ..errors import ConfigurationError, QueryError
from .layouts import TreasuryLayout
from .models import FeeSnapshot


logger = logging.getLogger(__name__)


def parse_address(value: str, label: str) -> Address:
    """Parse a user-friendly or raw address, raising ``ConfigurationError``."""
    try:
        return Address(value)
    except Exception as exc:
        raise ConfigurationError(f"failed to parse {label} address {value!r}: {exc}") from exc


class BaseContract:
    """Shared get-method access for every binding."""

    def __init__(self, client: LiteChainClient, name: str, address: Address):
        self.client = client
        self.name = name
        self.address = address

    async def view(self, method: str, *args: Any) -> StackResult:
        return await self.client.view(self.address, method, list(args))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name}, {self.address.to_str()})"


class JettonWallet(BaseContract):
    """Custodial jetton wallet holding the balance to bridge."""

    async def get_balance(self) -> int:
        result = await self.view("get_wallet_data")
        return result.get_int(0)


class TreasuryContract(BaseContract):
    """Destination treasury that accepts bridge-trigger messages."""

    def __init__(
        self,
        client: LiteChainClient,
        name: str,
        address: Address,
        layout: TreasuryLayout,
    ):
        super().__init__(client, name, address)
        self.layout = layout

    async def get_fee_snapshot(self) -> FeeSnapshot:
        result = await self.view(self.layout.getter)
        try:
            snapshot = self.layout.decode(self.name, result)
        except ValueError as exc:
            raise QueryError(f"{self.name}: invalid {self.layout.getter} data: {exc}") from exc
        logger.info("Fetched fee snapshot %s", snapshot.to_dict())
        return snapshot

    async def get_native_balance(self) -> int:
        return await self.client.native_balance(self.address)
