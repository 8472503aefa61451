"""Polling a submitted alignment job until it finishes."""

import logging
import time
from typing import Callable, Optional, Tuple

from .blast_client import AlignmentServiceClient
from .error_handler import PollTimeoutError, RemoteJobFailedError
from .models import AlignmentJob, JobStatus, Query

logger = logging.getLogger(__name__)


def wait_for_results(client: AlignmentServiceClient, job: AlignmentJob,
                     poll_interval: float, max_wait: float,
                     sleep: Callable[[float], None] = time.sleep) -> AlignmentJob:
    """
    Poll a job at a fixed interval until it is READY.

    The elapsed counter advances by ``poll_interval`` after every wait; the
    job times out once it exceeds ``max_wait``.

    Args:
        client: Service client used for status requests
        job: Submitted job, updated in place
        poll_interval: Seconds between status requests
        max_wait: Ceiling on the elapsed counter
        sleep: Wait function

    Returns:
        The job in READY state

    Raises:
        RemoteJobFailedError: If the service reports FAILED
        PollTimeoutError: If the ceiling is exceeded first
    """
    logger.info(f"Waiting for BLAST result (polling every {poll_interval:g}s, "
                f"up to {max_wait:g}s)...")

    while True:
        status = client.poll(job.rid)
        job.polls += 1

        if status == JobStatus.READY:
            job.status = JobStatus.READY
            logger.info("Results are ready!")
            return job
        if status == JobStatus.FAILED:
            job.status = JobStatus.FAILED
            raise RemoteJobFailedError(f"BLAST search {job.rid} failed at NCBI", rid=job.rid)

        job.status = JobStatus.RUNNING
        logger.info(f"...status: running ({job.elapsed:g}s elapsed)")
        sleep(poll_interval)
        job.elapsed += poll_interval

        if job.elapsed > max_wait:
            job.status = JobStatus.TIMED_OUT
            raise PollTimeoutError(
                f"Timeout: search {job.rid} took longer than {max_wait:g}s",
                rid=job.rid, elapsed=job.elapsed
            )


def run_search(client: AlignmentServiceClient, query: Query,
               poll_interval: float, max_wait: float,
               entrez_query: Optional[str] = None,
               sleep: Callable[[float], None] = time.sleep) -> Tuple[AlignmentJob, str]:
    """Submit a query, wait for it and fetch the text report."""
    job = client.submit(query, entrez_query=entrez_query)
    wait_for_results(client, job, poll_interval, max_wait, sleep=sleep)
    report = client.fetch(job.rid)
    logger.info(f"Fetched report for {job.rid} ({len(report)} characters)")
    return job, report
