"""
Outreach Worker
Long-running alternative to cron: runs one scheduler tick per interval

Run as separate process:
    python -m churchcomm.workers.outreach_worker
"""
import asyncio
import logging
import signal
from typing import Optional

from dotenv import load_dotenv

from churchcomm.core.config import get_config_manager, get_settings
from churchcomm.domain.services.outreach_scheduler import OutreachScheduler
from churchcomm.infrastructure.factory import build_outreach_scheduler

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# Configure logging for worker
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


class OutreachWorker:
    """
    Background worker that drives the outreach scheduler.

    Each iteration runs one tick and then waits tick_interval_seconds.
    A tick that raises (organization list unavailable) counts as an error;
    after MAX_CONSECUTIVE_ERRORS in a row the worker stops.
    """

    MAX_CONSECUTIVE_ERRORS = 10

    def __init__(self, scheduler: Optional[OutreachScheduler] = None, tick_interval: Optional[float] = None):
        self.scheduler = scheduler
        self.tick_interval = tick_interval
        self.running = False
        self._stop_event = asyncio.Event()

        # Stats
        self._ticks_completed = 0
        self._ticks_failed = 0
        self._calls_started = 0

    def initialize(self) -> None:
        """Build the scheduler from environment and YAML config."""
        logger.info("Initializing Outreach Worker...")

        if self.scheduler is None:
            self.scheduler = build_outreach_scheduler(get_settings(), get_config_manager())
        if self.tick_interval is None:
            self.tick_interval = get_config_manager().get_outreach_config().tick_interval_seconds

        logger.info(f"Outreach Worker initialized (interval: {self.tick_interval}s)")

    async def run(self) -> None:
        self.initialize()

        self.running = True
        consecutive_errors = 0

        logger.info("Outreach Worker started")

        while self.running:
            try:
                summary = await self.scheduler.run_tick()
                self._ticks_completed += 1
                self._calls_started += summary.total_executed
                consecutive_errors = 0
            except asyncio.CancelledError:
                logger.info("Worker received cancellation signal")
                break
            except Exception as e:
                consecutive_errors += 1
                self._ticks_failed += 1
                logger.error(f"Worker error ({consecutive_errors}): {e}", exc_info=True)

                if consecutive_errors >= self.MAX_CONSECUTIVE_ERRORS:
                    logger.critical("Too many consecutive errors, stopping worker")
                    break

            await self._sleep(self.tick_interval)

        await self.shutdown()

    async def _sleep(self, seconds: float) -> None:
        """Wait for the next tick, waking early on stop()."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass

    def stop(self) -> None:
        self.running = False
        self._stop_event.set()

    async def shutdown(self) -> None:
        """Graceful shutdown."""
        self.running = False

        if self.scheduler is not None:
            await self.scheduler.executor.voice_provider.cleanup()

        logger.info(
            f"Outreach Worker shutdown complete. "
            f"Ticks: {self._ticks_completed}, Failed: {self._ticks_failed}, "
            f"Calls started: {self._calls_started}"
        )

    def get_stats(self) -> dict:
        return {
            "running": self.running,
            "ticks_completed": self._ticks_completed,
            "ticks_failed": self._ticks_failed,
            "calls_started": self._calls_started,
        }


async def main():
    """Entry point for running the outreach worker as separate process."""
    worker = OutreachWorker()

    loop = asyncio.get_running_loop()

    def signal_handler():
        logger.info("Received shutdown signal")
        worker.stop()

    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, signal_handler)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass

    try:
        await worker.run()
    except KeyboardInterrupt:
        logger.info("Worker interrupted by user")


if __name__ == "__main__":
    asyncio.run(main())
