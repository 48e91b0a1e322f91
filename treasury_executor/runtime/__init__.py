from __future__ import annotations

import logging
from typing import List

from .scheduler import BridgeScheduler, RouteState, TickResult
from ..config import Settings
from ..core.bridge.task import RouteTask
from ..core.chain.client import LiteChainClient
from ..core.chain.wallet import WalletSender


logger = logging.getLogger(__name__)


async def build_route_tasks(
    settings: Settings,
    client: LiteChainClient,
    sender: WalletSender,
) -> List[RouteTask]:
    """Create one task per configured route, reading each fee snapshot.

    Errors propagate; the caller decides whether they are fatal.
    """
    tasks: List[RouteTask] = []
    for config in settings.route_configs():
        task = await RouteTask.create(
            config,
            client,
            sender,
            fee_refresh_interval_s=settings.fee_refresh_interval_seconds,
        )
        logger.info(
            "Route %s ready: variant=%s min_bridge_amount=%d strategy=%r",
            task.name, config.variant, config.min_bridge_amount, task.value_strategy,
        )
        tasks.append(task)
    return tasks


def build_scheduler(settings: Settings, tasks: List[RouteTask]) -> BridgeScheduler:
    return BridgeScheduler(
        tasks,
        interval_seconds=settings.interval_seconds,
        exit_on_initial_failure=settings.exit_on_initial_failure,
    )


__all__ = ["BridgeScheduler", "RouteState", "TickResult", "build_route_tasks", "build_scheduler"]
