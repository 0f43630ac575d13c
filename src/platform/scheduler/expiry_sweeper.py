import time
from typing import Awaitable, Callable

import anyio
from anyio.abc import TaskGroup

from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics


class ExpirySweeper:
    """
    Periodically runs one expiry pass (orders or listings).

    A failed pass is logged and counted; the next tick retries. Correctness
    does not depend on the interval: every transition is a compare-and-set, so
    overlapping sweeps on several instances are safe.
    """

    def __init__(
        self,
        *,
        entity: str,
        sweep: Callable[[], Awaitable[int]],
        interval_seconds: float,
    ) -> None:
        self.entity = entity
        self._sweep = sweep
        self._interval_seconds = interval_seconds

    async def start(self, *, task_group: TaskGroup) -> None:
        task_group.start_soon(self._sweep_loop)  # pyrefly: ignore[bad-argument-type]
        Logger.base.info(
            f'🧹 [Sweeper] {self.entity} sweep every {self._interval_seconds}s started'
        )

    async def run_once(self) -> int:
        started = time.perf_counter()
        try:
            return await self._sweep()
        except Exception as e:
            Logger.base.exception(f'❌ [Sweeper] {self.entity} sweep failed: {e}')
            metrics.record_sweep(
                entity=self.entity,
                result='error',
                expired=0,
                duration=time.perf_counter() - started,
            )
            return 0

    async def _sweep_loop(self) -> None:
        while True:
            await self.run_once()
            await anyio.sleep(self._interval_seconds)
