"""
Lite-server client used by all contract bindings.

Wraps ``pytoniq.LiteBalancer`` with:
- loading of the lite-server network config from a file or URL
- a bounded retry loop around every request
- typed accessors over get-method result stacks
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import httpx
from pytoniq import LiteBalancer
from pytoniq_core import Address, Cell, Slice

from ..errors import ConfigurationError, QueryError


logger = logging.getLogger(__name__)


async def load_lite_config(source: str, timeout_s: float = 30.0) -> Dict[str, Any]:
    """Load a lite-server network config (``global.config.json`` format).

    ``source`` is either a local file path or an http(s) URL.
    """
    if not source:
        raise ConfigurationError("lite servers config is not set")

    try:
        if source.startswith(("http://", "https://")):
            async with httpx.AsyncClient(timeout=timeout_s) as client:
                response = await client.get(source)
                response.raise_for_status()
                config = response.json()
        else:
            config = json.loads(Path(source).expanduser().read_text(encoding="utf-8"))
    except (OSError, ValueError, httpx.HTTPError) as exc:
        raise ConfigurationError(f"failed to load lite servers config from {source}: {exc}") from exc

    if not isinstance(config, dict) or not config.get("liteservers"):
        raise ConfigurationError(f"lite servers config at {source} has no liteservers")
    return config


class StackResult:
    """Result stack of a get-method call with typed, indexed accessors."""

    def __init__(self, method: str, stack: Sequence[Any]):
        self.method = method
        self._stack = list(stack)

    def __len__(self) -> int:
        return len(self._stack)

    def _item(self, index: int) -> Any:
        if index < 0 or index >= len(self._stack):
            raise QueryError(
                f"{self.method}: stack index {index} out of range (size {len(self._stack)})"
            )
        return self._stack[index]

    def _type_error(self, index: int, expected: str, item: Any) -> QueryError:
        return QueryError(
            f"{self.method}: stack item {index} is {type(item).__name__}, expected {expected}"
        )

    def get_int(self, index: int) -> int:
        item = self._item(index)
        if isinstance(item, bool) or not isinstance(item, int):
            raise self._type_error(index, "int", item)
        return item

    def get_cell(self, index: int) -> Cell:
        item = self._item(index)
        if not isinstance(item, Cell):
            raise self._type_error(index, "cell", item)
        return item

    def get_slice(self, index: int) -> Slice:
        item = self._item(index)
        if isinstance(item, Slice):
            return item
        if isinstance(item, Cell):
            return item.begin_parse()
        raise self._type_error(index, "slice", item)

    def get_address(self, index: int) -> Address:
        item = self._item(index)
        if isinstance(item, Address):
            return item
        try:
            return self.get_slice(index).load_address()
        except QueryError:
            raise
        except Exception as exc:
            raise QueryError(f"{self.method}: stack item {index} is not an address: {exc}") from exc


class LiteChainClient:
    """
    Thin adapter over ``pytoniq.LiteBalancer``.

    Every request is attempted up to ``max_retries`` times; the final failure
    is raised as ``QueryError``. Nothing above this layer retries.

    Usage:
        client = await LiteChainClient.connect("global.config.json")
        result = await client.view(address, "get_wallet_data")
        balance = result.get_int(0)
        await client.close()
    """

    def __init__(
        self,
        provider: Any,
        *,
        max_retries: int = 5,
        retry_delay_s: float = 1.0,
    ):
        self.provider = provider
        self._max_retries = max(1, max_retries)
        self._retry_delay = retry_delay_s

    @classmethod
    async def connect(
        cls,
        config_source: str,
        *,
        trust_level: int = 2,
        timeout_s: float = 10.0,
        max_retries: int = 5,
    ) -> "LiteChainClient":
        config = await load_lite_config(config_source)
        provider = LiteBalancer.from_config(config, trust_level=trust_level, timeout=timeout_s)
        try:
            await provider.start_up()
        except Exception as exc:
            raise QueryError(f"failed to connect to lite servers: {exc}") from exc
        logger.info("Connected to %d lite servers", len(config["liteservers"]))
        return cls(provider, max_retries=max_retries)

    async def close(self) -> None:
        await self.provider.close_all()

    async def _call(
        self,
        description: str,
        func: Callable[..., Awaitable[Any]],
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        last_error: Optional[Exception] = None
        for attempt in range(self._max_retries):
            try:
                return await func(*args, **kwargs)
            except asyncio.CancelledError:
                raise
            except Exception as exc:  # noqa: BLE001
                last_error = exc
                logger.debug(
                    "%s failed (attempt %d/%d): %s",
                    description, attempt + 1, self._max_retries, exc,
                )
                if attempt < self._max_retries - 1 and self._retry_delay > 0:
                    await asyncio.sleep(self._retry_delay)

        raise QueryError(
            f"{description} failed after {self._max_retries} attempts: {last_error}"
        ) from last_error

    async def view(
        self,
        address: Address,
        method: str,
        args: Optional[List[Any]] = None,
    ) -> StackResult:
        """Run a get-method against the latest masterchain block."""
        stack = await self._call(
            f"get-method {method} on {address}",
            self.provider.run_get_method,
            address=address,
            method=method,
            stack=list(args or []),
        )
        return StackResult(method, stack)

    async def native_balance(self, address: Address) -> int:
        """Native (nanoton) balance of an account."""
        state = await self._call(
            f"account state of {address}",
            self.provider.get_account_state,
            address,
        )
        return int(state.balance)

    async def transactions(
        self,
        address: Address,
        limit: int = 16,
        *,
        from_lt: Optional[int] = None,
        from_hash: Optional[bytes] = None,
        to_lt: int = 0,
    ) -> List[Any]:
        """Account transactions, newest first.

        Starts at ``from_lt``/``from_hash`` (latest when unset) and stops
        before the first transaction with ``lt <= to_lt`` (0 disables).
        """
        return await self._call(
            f"transactions of {address}",
            self.provider.get_transactions,
            address,
            limit,
            from_lt=from_lt,
            from_hash=from_hash,
            to_lt=to_lt,
        )
