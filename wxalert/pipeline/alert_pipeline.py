"""Alert orchestrator: concurrent fetch, classify, bundle raw inputs for audit."""

import asyncio
import logging

from wxalert.config.schema import AlertEngineConfig, ThresholdConfig
from wxalert.errors import OperationCancelled, ProviderTimeout
from wxalert.ingest.openweather_client import OpenWeatherClient
from wxalert.models.alert import AlertSet
from wxalert.models.observation import Coordinate
from wxalert.rules.classifier import ThresholdClassifier

logger = logging.getLogger(__name__)

DEFAULT_DEADLINE_SECONDS = 20.0


class AlertOrchestrator:
    """Derives the alert set for one coordinate per call. Holds no mutable state."""

    def __init__(
        self,
        client: OpenWeatherClient,
        thresholds: ThresholdConfig | None = None,
        deadline: float = DEFAULT_DEADLINE_SECONDS,
    ):
        self.client = client
        self.classifier = ThresholdClassifier(thresholds)
        self.deadline = deadline

    @classmethod
    def from_config(cls, config: AlertEngineConfig) -> "AlertOrchestrator":
        return cls(
            OpenWeatherClient.from_config(config.provider),
            config.thresholds,
            config.provider.deadline_seconds,
        )

    async def derive_alerts(
        self,
        coordinate: Coordinate,
        deadline: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> AlertSet:
        """Fetch current + forecast concurrently and classify.

        All-or-nothing: if either fetch fails, times out, or `cancel` is set,
        both fetches are cancelled and the error is raised. Never returns a
        partial alert set.
        """
        timeout = self.deadline if deadline is None else deadline
        tasks = {
            "current": asyncio.create_task(self.client.fetch_current(coordinate)),
            "forecast": asyncio.create_task(self.client.fetch_forecast(coordinate)),
        }
        cancel_task = asyncio.create_task(cancel.wait()) if cancel is not None else None

        try:
            await self._wait_all(tasks, cancel_task, timeout)
        finally:
            leftovers = [t for t in (*tasks.values(), cancel_task) if t is not None]
            for task in leftovers:
                task.cancel()
            # Let in-flight requests observe the cancellation before returning
            await asyncio.gather(*leftovers, return_exceptions=True)

        current = tasks["current"].result()
        forecast = tasks["forecast"].result()
        alerts = self.classifier.classify(current, forecast)
        logger.info(
            "Derived %d alerts for (%.4f, %.4f) from %d forecast steps",
            len(alerts), coordinate.latitude, coordinate.longitude, len(forecast),
        )
        return AlertSet(
            coordinate=coordinate,
            alerts=tuple(alerts),
            current=current,
            forecast=forecast,
        )

    async def _wait_all(
        self,
        tasks: dict[str, asyncio.Task],
        cancel_task: asyncio.Task | None,
        timeout: float,
    ) -> None:
        """Return when every fetch succeeded; raise on the first failure."""
        loop = asyncio.get_running_loop()
        expires_at = loop.time() + timeout
        pending: set[asyncio.Task] = set(tasks.values())

        while pending:
            waiters = pending | ({cancel_task} if cancel_task is not None else set())
            done, _ = await asyncio.wait(
                waiters,
                timeout=max(0.0, expires_at - loop.time()),
                return_when=asyncio.FIRST_COMPLETED,
            )
            if cancel_task is not None and cancel_task in done:
                logger.info("Derivation cancelled by caller")
                raise OperationCancelled("Alert derivation cancelled")
            if not done:
                waiting = sorted(name for name, t in tasks.items() if t in pending)
                logger.warning("Provider deadline of %.1fs exceeded: %s", timeout, waiting)
                raise ProviderTimeout(
                    f"No response within {timeout:.1f}s for {', '.join(waiting)}",
                    waiting[0],
                )
            for task in done:
                pending.discard(task)
                exc = task.exception()
                if exc is not None:
                    raise exc


def derive_alerts(
    coordinate: Coordinate,
    config: AlertEngineConfig | None = None,
    deadline: float | None = None,
) -> AlertSet:
    """Blocking wrapper for synchronous callers."""
    orchestrator = AlertOrchestrator.from_config(config or AlertEngineConfig())
    return asyncio.run(orchestrator.derive_alerts(coordinate, deadline=deadline))
