from __future__ import annotations

import asyncio
import logging
import signal
import sys

from . import build_route_tasks, build_scheduler
from ..config import settings
from ..core.chain.client import LiteChainClient
from ..core.chain.wallet import WalletSender
from ..core.errors import ConfigurationError, ExecutorError
from ..logging_config import setup_logging


logger = logging.getLogger("treasury_executor")


async def _serve() -> None:
    settings.route_configs()
    if not settings.wallet_mnemonic:
        raise ConfigurationError("WALLET_MNEMONIC is not set")

    client = await LiteChainClient.connect(
        settings.lite_servers_config,
        trust_level=settings.trust_level,
        timeout_s=settings.rpc_timeout_seconds,
        max_retries=settings.rpc_max_retries,
    )
    try:
        sender = await WalletSender.from_mnemonic(
            client,
            settings.wallet_mnemonic,
            version=settings.wallet_version,
            wait_timeout_s=settings.send_timeout_seconds,
            poll_interval_s=settings.send_poll_interval_seconds,
        )
        tasks = await build_route_tasks(settings, client, sender)
        logger.info("Starting executor with %d routes", len(tasks))
        scheduler = build_scheduler(settings, tasks)

        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, stop_event.set)

        await scheduler.run(stop_event)
    finally:
        await client.close()


def main() -> None:
    setup_logging()
    try:
        asyncio.run(_serve())
    except ExecutorError as exc:
        logger.error("Executor terminated: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
