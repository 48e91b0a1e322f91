"""Bridge trigger: builds the bridge message and submits it."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ..chain.models import TransactionRecord
from ..chain.wallet import PAY_GAS_SEPARATELY, WalletSender
from .contracts import TreasuryContract
from .models import BridgeRequest, new_query_id


logger = logging.getLogger(__name__)


class BridgeTrigger:
    """
    Sends bridge-trigger messages to one treasury.

    The message is bounceable: if the treasury rejects it, the network returns
    the attached value to the executor wallet.
    """

    def __init__(
        self,
        treasury: TreasuryContract,
        sender: WalletSender,
        *,
        op_code: Optional[int] = None,
        query_id_factory: Callable[[], int] = new_query_id,
        send_mode: int = PAY_GAS_SEPARATELY,
    ):
        self.treasury = treasury
        self.sender = sender
        self.op_code = treasury.layout.op_code if op_code is None else op_code
        self._query_id_factory = query_id_factory
        self._send_mode = send_mode

    def build_request(self, amount: int, value: int) -> BridgeRequest:
        return BridgeRequest(
            amount=amount,
            value=value,
            op_code=self.op_code,
            query_id=self._query_id_factory(),
        )

    async def send(self, amount: int, value: int) -> Optional[TransactionRecord]:
        """Submit a bridge request and wait for the treasury transaction.

        Submission errors propagate as-is; no retry happens here.
        """
        request = self.build_request(amount, value)
        logger.info(
            "Triggering bridge on %s: amount=%d value=%d query_id=%d",
            self.treasury.name, request.amount, request.value, request.query_id,
        )
        return await self.sender.send_and_wait(
            self.treasury.address,
            request.value,
            request.build_body(),
            bounce=True,
            send_mode=self._send_mode,
        )
