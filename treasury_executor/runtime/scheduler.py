from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import structlog

from ..core.bridge.task import RouteRunReport, RouteTask
from ..core.errors import ExecutorError, InitialRunError


@dataclass(slots=True)
class RouteState:
    status: str = "idle"
    run_count: int = 0
    consecutive_errors: int = 0
    last_started: Optional[datetime] = None
    last_completed: Optional[datetime] = None
    last_error: Optional[str] = None
    last_report: Optional[RouteRunReport] = None


@dataclass(slots=True)
class TickResult:
    """Per-route results of one scheduler tick."""

    tick: int
    reports: Dict[str, RouteRunReport] = field(default_factory=dict)
    errors: Dict[str, Exception] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


class BridgeScheduler:
    """
    Runs every route once at startup, then once per interval until stopped.

    Routes run one after another inside a tick: they share the executor
    wallet, whose seqno must not be raced by overlapping sends. A failing
    route is logged and recorded; it never stops the other routes or later
    ticks. Ticks are anchored to their start time, and a tick that overruns
    the interval is followed immediately by the next one.
    """

    def __init__(
        self,
        routes: Sequence[RouteTask],
        *,
        interval_seconds: float,
        exit_on_initial_failure: bool = True,
        logger: Optional[Any] = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        names = [route.name for route in routes]
        if len(set(names)) != len(names):
            raise ValueError("route names must be unique")

        self.logger = logger or structlog.stdlib.get_logger("scheduler")
        self._routes: List[RouteTask] = list(routes)
        self._state: Dict[str, RouteState] = {name: RouteState() for name in names}
        self._interval = float(interval_seconds)
        self._exit_on_initial_failure = exit_on_initial_failure
        self._tick = 0

    @property
    def interval_seconds(self) -> float:
        return self._interval

    async def run(self, stop_event: asyncio.Event) -> None:
        """Run until ``stop_event`` is set.

        Raises:
            InitialRunError: the startup tick had failures and
                ``exit_on_initial_failure`` is enabled
        """
        loop = asyncio.get_running_loop()
        self.logger.info(
            "scheduler_started",
            routes=[route.name for route in self._routes],
            interval_seconds=self._interval,
            exit_on_initial_failure=self._exit_on_initial_failure,
        )

        while not stop_event.is_set():
            started = loop.time()
            result = await self.run_once(stop_event)

            if result.tick == 1 and not result.ok and self._exit_on_initial_failure:
                raise InitialRunError(result.errors)

            delay = max(0.0, self._interval - (loop.time() - started))
            if await _wait_for_stop(stop_event, delay):
                break

        self.logger.info("scheduler_stopped", ticks=self._tick)

    async def run_once(self, stop_event: Optional[asyncio.Event] = None) -> TickResult:
        """Run every route once, sequentially."""
        self._tick += 1
        result = TickResult(tick=self._tick)

        for route in self._routes:
            if stop_event is not None and stop_event.is_set():
                break
            try:
                result.reports[route.name] = await self._run_route(route)
            except Exception as exc:  # noqa: BLE001
                result.errors[route.name] = exc

        return result

    async def _run_route(self, route: RouteTask) -> RouteRunReport:
        state = self._state[route.name]
        state.status = "running"
        state.last_started = datetime.now(timezone.utc)

        structlog.contextvars.bind_contextvars(route=route.name, tick=self._tick)
        try:
            report = await route.run()
        except Exception as exc:
            state.last_error = str(exc)
            state.consecutive_errors += 1
            classified = isinstance(exc, ExecutorError)
            recoverable = exc.recoverable if classified else False
            log = self.logger.warning if recoverable else self.logger.error
            log(
                "route_run_failed",
                error=str(exc),
                error_type=type(exc).__name__,
                category=exc.category.value if classified else "unexpected",
                recoverable=recoverable,
                consecutive_errors=state.consecutive_errors,
                exc_info=not classified,
            )
            raise
        else:
            state.last_error = None
            state.consecutive_errors = 0
            state.last_report = report
            if report.bridged:
                self.logger.info(
                    "route_run_succeeded",
                    balance=report.balance,
                    amount=report.amount,
                    value=report.value,
                    tx_hash=report.outcome.record.hash if report.outcome and report.outcome.record else None,
                )
            else:
                self.logger.info("route_run_skipped", balance=report.balance)
            return report
        finally:
            state.run_count += 1
            state.last_completed = datetime.now(timezone.utc)
            state.status = "idle"
            structlog.contextvars.unbind_contextvars("route", "tick")

    # ---------------------------
    # Introspection
    # ---------------------------
    def route_state(self, name: str) -> Optional[RouteState]:
        return self._state.get(name)

    def status(self) -> dict[str, Any]:
        return {
            "tick": self._tick,
            "interval_seconds": self._interval,
            "routes": [
                {
                    "name": route.name,
                    "status": state.status,
                    "run_count": state.run_count,
                    "consecutive_errors": state.consecutive_errors,
                    "last_started": _iso(state.last_started),
                    "last_completed": _iso(state.last_completed),
                    "last_error": state.last_error,
                    "last_status": state.last_report.status if state.last_report else None,
                }
                for route in self._routes
                for state in (self._state[route.name],)
            ],
        }


async def _wait_for_stop(stop_event: asyncio.Event, timeout: float) -> bool:
    """Sleep up to ``timeout`` seconds; True when the stop event fired."""
    if stop_event.is_set():
        return True
    try:
        await asyncio.wait_for(stop_event.wait(), timeout=timeout)
    except asyncio.TimeoutError:
        pass
    return stop_event.is_set()


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.astimezone(timezone.utc).isoformat() if value else None
