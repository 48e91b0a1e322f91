"""
Route task: one evaluation of one bridge route.

Each run re-derives its decision from live state:
1. read the jetton wallet balance
2. skip when it is below the route minimum
3. clamp to the treasury's declared maximum
4. compute the native value to attach
5. trigger the bridge and verify the treasury transaction
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..chain.client import LiteChainClient
from ..chain.wallet import WalletSender
from .contracts import JettonWallet, TreasuryContract, parse_address
from .layouts import get_layout
from .models import FeeSnapshot, RouteConfig
from .strategies import ValueStrategy, build_value_strategy
from .trigger import BridgeTrigger
from .verifier import TransactionOutcome, classify


logger = logging.getLogger(__name__)


STATUS_SKIPPED = "skipped"
STATUS_BRIDGED = "bridged"


@dataclass(frozen=True)
class RouteRunReport:
    """What a single successful run did."""
    route: str
    status: str
    balance: int
    amount: int = 0
    value: int = 0
    outcome: Optional[TransactionOutcome] = None

    @property
    def bridged(self) -> bool:
        return self.status == STATUS_BRIDGED


class RouteTask:
    """Evaluates and executes one bridge route."""

    def __init__(
        self,
        *,
        config: RouteConfig,
        treasury: TreasuryContract,
        jetton_wallet: JettonWallet,
        trigger: BridgeTrigger,
        snapshot: FeeSnapshot,
        value_strategy: ValueStrategy,
        fee_refresh_interval_s: float = 0.0,
    ):
        self.config = config
        self.treasury = treasury
        self.jetton_wallet = jetton_wallet
        self.trigger = trigger
        self.value_strategy = value_strategy
        self._snapshot = snapshot
        self._refresh_interval = fee_refresh_interval_s

    @classmethod
    async def create(
        cls,
        config: RouteConfig,
        client: LiteChainClient,
        sender: WalletSender,
        *,
        fee_refresh_interval_s: float = 0.0,
    ) -> "RouteTask":
        """
        Bind contracts and read the initial fee snapshot.

        Raises:
            ConfigurationError: unknown variant or unparsable address
            QueryError: the treasury getter could not be read
        """
        layout = get_layout(config.variant)
        treasury = TreasuryContract(
            client,
            config.name,
            parse_address(config.treasury_address, f"{config.name} treasury"),
            layout,
        )
        jetton_wallet = JettonWallet(
            client,
            f"{config.name}_jetton_wallet",
            parse_address(config.jetton_wallet_address, f"{config.name} jetton wallet"),
        )
        snapshot = await treasury.get_fee_snapshot()

        return cls(
            config=config,
            treasury=treasury,
            jetton_wallet=jetton_wallet,
            trigger=BridgeTrigger(treasury, sender, op_code=config.op_code),
            snapshot=snapshot,
            value_strategy=build_value_strategy(config.value_strategy, config.storage_margin),
            fee_refresh_interval_s=fee_refresh_interval_s,
        )

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def snapshot(self) -> FeeSnapshot:
        return self._snapshot

    async def _current_snapshot(self) -> FeeSnapshot:
        if self._refresh_interval > 0 and self._snapshot.age_seconds() >= self._refresh_interval:
            self._snapshot = await self.treasury.get_fee_snapshot()
        return self._snapshot

    async def run(self) -> RouteRunReport:
        """
        Evaluate the route once.

        Returns:
            A report with status ``skipped`` (dust) or ``bridged``.

        Raises:
            QueryError: balance, treasury balance, or snapshot refresh failed
            SubmitError: the bridge message could not be submitted
            VerificationError: the treasury transaction did not succeed
        """
        balance = await self.jetton_wallet.get_balance()

        if balance < self.config.min_bridge_amount:
            logger.debug(
                "%s: balance %d below minimum %d, skipping",
                self.name, balance, self.config.min_bridge_amount,
            )
            return RouteRunReport(route=self.name, status=STATUS_SKIPPED, balance=balance)

        snapshot = await self._current_snapshot()

        amount = snapshot.clamp_amount(balance)
        if amount != balance:
            logger.info("%s: clamping %d to max bridge amount %d", self.name, balance, amount)

        value = await self.value_strategy.required_value(snapshot, self.treasury)

        record = await self.trigger.send(amount, value)
        outcome = classify(record)
        outcome.raise_for_status()

        return RouteRunReport(
            route=self.name,
            status=STATUS_BRIDGED,
            balance=balance,
            amount=amount,
            value=value,
            outcome=outcome,
        )
