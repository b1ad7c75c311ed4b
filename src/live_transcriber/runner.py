"""Runs one job with SIGINT/SIGTERM mapped onto the driver's shutdown event."""

import asyncio
import signal

from live_transcriber.domain import JobSpec, PipelineOutcome
from live_transcriber.handlers import PipelineDriver
from live_transcriber.logging import setup_logging

logger = setup_logging(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


async def run_job(
    driver: PipelineDriver,
    job: JobSpec,
    shutdown: asyncio.Event | None = None,
    install_signal_handlers: bool = True,
) -> PipelineOutcome:
    """
    Runs the driver for one job.

    While the run is in progress, SIGINT and SIGTERM set the shutdown event
    instead of killing the process, so teardown always happens; the handlers
    are removed again when the run ends.
    """
    shutdown = shutdown or asyncio.Event()
    loop = asyncio.get_running_loop()

    def request_shutdown(sig: signal.Signals) -> None:
        logger.info("Received signal, shutting down gracefully", extra={"signal": sig.name})
        shutdown.set()

    installed = []
    if install_signal_handlers:
        for sig in SHUTDOWN_SIGNALS:
            try:
                loop.add_signal_handler(sig, request_shutdown, sig)
                installed.append(sig)
            except (NotImplementedError, RuntimeError):
                logger.warning("Signal handlers unavailable", extra={"signal": sig.name})

    try:
        return await driver.run(job, shutdown)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)
