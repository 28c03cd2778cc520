"""Periodic retention sweep for chat history."""

import asyncio

import structlog

from app.services.chat_coordinator import ChatCoordinator

logger = structlog.get_logger()


class RetentionScheduler:
    """Runs ``ChatCoordinator.run_cleanup`` on a fixed interval.

    Owned by the application lifespan: started on startup and cancelled on
    shutdown. A failed sweep is logged and the next tick runs as usual.
    """

    def __init__(self, coordinator: ChatCoordinator, interval_seconds: float) -> None:
        self._coordinator = coordinator
        self._interval = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="chat-retention-sweep")
        logger.info("Retention sweep scheduled", interval_seconds=self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Retention sweep stopped")

    async def sweep_once(self) -> int:
        """Run a single sweep, logging instead of raising on failure."""
        try:
            removed = await self._coordinator.run_cleanup()
        except Exception:
            logger.exception("Retention sweep failed")
            return 0
        logger.info("Retention sweep finished", removed_messages=removed)
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.sweep_once()
