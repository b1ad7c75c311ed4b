"""
Live Transcriber Service.

Entry point for the live transcription service. With JOB_SOURCE=env (the
default) one job is read from the environment and run to completion; with
JOB_SOURCE=queue the process consumes jobs from RabbitMQ, one at a time.
"""

import asyncio
import sys

import ddtrace.auto  # noqa: F401

from live_transcriber.config import load_config, load_job_from_env
from live_transcriber.dependencies import get_driver, get_worker
from live_transcriber.exceptions import ConfigurationError
from live_transcriber.logging import setup_logging
from live_transcriber.runner import run_job

logger = setup_logging(__name__)


def main() -> int:
    """Starts the service and returns the process exit status."""
    logger.info("Live transcriber started")

    try:
        config = load_config()
        job = load_job_from_env() if config.job_source == "env" else None
    except ConfigurationError as e:
        logger.error("Missing required configuration", extra={"fields": e.fields})
        return 1

    if job is None:
        worker = get_worker(config)
        worker.start()
        return 0

    outcome = asyncio.run(run_job(get_driver(config), job))
    return outcome.exit_code


if __name__ == "__main__":
    sys.exit(main())
