"""
Signing wallet used to submit bridge messages.

The wallet contract (V3R2 by default) signs an external message carrying one
internal message to the treasury. After submission the sender polls the
destination account until the transaction produced by that internal message
shows up, so callers can inspect its compute phase.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Type

from pytoniq import WalletV3R2, WalletV4R2
from pytoniq_core import Address, Cell

from ..errors import ConfigurationError, QueryError, SubmitError
from .client import LiteChainClient
from .models import TransactionRecord


logger = logging.getLogger(__name__)


# Send mode flags
PAY_GAS_SEPARATELY = 1

WALLET_VERSIONS: Dict[str, Type[Any]] = {
    "v3r2": WalletV3R2,
    "v4r2": WalletV4R2,
}


class WalletSender:
    """Submits internal messages and waits for the resulting transaction."""

    def __init__(
        self,
        wallet: Any,
        client: LiteChainClient,
        *,
        wait_timeout_s: float = 120.0,
        poll_interval_s: float = 3.0,
        scan_depth: int = 16,
    ):
        self._wallet = wallet
        self._client = client
        self._wait_timeout = wait_timeout_s
        self._poll_interval = poll_interval_s
        self._scan_depth = scan_depth

    @classmethod
    async def from_mnemonic(
        cls,
        client: LiteChainClient,
        mnemonic: str,
        *,
        version: str = "v3r2",
        **kwargs: Any,
    ) -> "WalletSender":
        words = mnemonic.split()
        if not words:
            raise ConfigurationError("wallet mnemonic is not set")

        wallet_cls = WALLET_VERSIONS.get(version.lower())
        if wallet_cls is None:
            raise ConfigurationError(
                f"unsupported wallet version {version!r}; expected one of {sorted(WALLET_VERSIONS)}"
            )

        try:
            wallet = await wallet_cls.from_mnemonic(provider=client.provider, mnemonics=words)
        except Exception as exc:
            raise ConfigurationError(f"failed to create wallet: {exc}") from exc

        logger.info("Executor wallet %s (%s)", wallet.address.to_str(), version)
        return cls(wallet, client, **kwargs)

    @property
    def address(self) -> Address:
        return self._wallet.address

    async def send_and_wait(
        self,
        destination: Address,
        value: int,
        body: Cell,
        *,
        bounce: bool = True,
        send_mode: int = PAY_GAS_SEPARATELY,
    ) -> Optional[TransactionRecord]:
        """
        Send ``value`` nanoton with ``body`` to ``destination`` and wait.

        Returns:
            The destination transaction triggered by the message, or ``None``
            when it did not appear within the wait timeout.

        Raises:
            QueryError: the destination history could not be read before sending
            SubmitError: the external message was rejected
        """
        after_lt = await self._latest_lt(destination)

        message = self._wallet.create_wallet_internal_message(
            destination=destination,
            send_mode=send_mode,
            value=value,
            body=body,
            bounce=bounce,
        )
        try:
            await self._wallet.raw_transfer(msgs=[message])
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            raise SubmitError(f"failed to submit message to {destination.to_str()}: {exc}") from exc

        logger.info(
            "Submitted message to %s (value=%d, body=%s), waiting for transaction",
            destination.to_str(), value, body.hash.hex(),
        )
        return await self._wait_for_transaction(destination, body.hash, after_lt)

    async def _latest_lt(self, destination: Address) -> int:
        txs = await self._client.transactions(destination, limit=1)
        return int(txs[0].lt) if txs else 0

    async def _wait_for_transaction(
        self,
        destination: Address,
        body_hash: bytes,
        after_lt: int,
    ) -> Optional[TransactionRecord]:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._wait_timeout

        while True:
            try:
                txs = await self._history_since(destination, after_lt)
            except QueryError as exc:
                logger.warning("Polling %s failed: %s", destination.to_str(), exc)
                txs = []

            for tx in txs:
                if self._is_ours(tx, body_hash):
                    return TransactionRecord.from_tlb(tx)

            if loop.time() >= deadline:
                logger.warning(
                    "No transaction on %s for body %s after %.0fs",
                    destination.to_str(), body_hash.hex(), self._wait_timeout,
                )
                return None
            await asyncio.sleep(self._poll_interval)

    async def _history_since(self, destination: Address, after_lt: int) -> List[Any]:
        """Transactions of ``destination`` newer than ``after_lt``, newest first.

        Pages of ``scan_depth`` are read back along the account's
        ``prev_trans_lt`` chain until ``after_lt`` is reached.
        """
        history: List[Any] = []
        from_lt: Optional[int] = None
        from_hash: Optional[bytes] = None

        while True:
            page = await self._client.transactions(
                destination,
                limit=self._scan_depth,
                from_lt=from_lt,
                from_hash=from_hash,
                to_lt=after_lt,
            )
            for tx in page:
                if int(tx.lt) <= after_lt:
                    return history
                history.append(tx)

            if len(page) < self._scan_depth:
                return history
            prev_lt = int(page[-1].prev_trans_lt)
            if prev_lt <= after_lt or (from_lt is not None and prev_lt >= from_lt):
                return history
            from_lt, from_hash = prev_lt, page[-1].prev_trans_hash

    def _is_ours(self, tx: Any, body_hash: bytes) -> bool:
        in_msg = getattr(tx, "in_msg", None)
        if in_msg is None or not getattr(in_msg, "is_internal", False):
            return False
        if in_msg.info.src != self.address:
            return False
        return in_msg.body is not None and in_msg.body.hash == body_hash
