"""Clients for the remote alignment service (NCBI BLAST URL API)."""

import logging
import re
import time
from abc import ABC, abstractmethod
from typing import Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import BlastConfig
from .error_handler import ServiceError, SubmissionError
from .logging_config import log_api_call
from .models import AlignmentJob, JobStatus, Query

logger = logging.getLogger(__name__)

RID_PATTERN = re.compile(r'RID = (\S+)')
RTOE_PATTERN = re.compile(r'RTOE = (\d+)')
STATUS_PATTERN = re.compile(r'Status=\s*(\w+)')

SNIPPET_LENGTH = 500


class AlignmentServiceClient(ABC):
    """Submit / poll / fetch interface of a remote alignment service."""

    @abstractmethod
    def submit(self, query: Query, entrez_query: Optional[str] = None) -> AlignmentJob:
        """Start a search and return the job with its RID.

        Raises:
            SubmissionError: If the service returned no RID
        """

    @abstractmethod
    def poll(self, rid: str) -> JobStatus:
        """Current status of a job: RUNNING, READY or FAILED."""

    @abstractmethod
    def fetch(self, rid: str) -> str:
        """Text report of a finished job."""


def parse_rid(text: str) -> Optional[str]:
    """Extract the request ID from a submission response."""
    match = RID_PATTERN.search(text)
    return match.group(1) if match else None


def parse_rtoe(text: str) -> Optional[int]:
    """Extract the estimated seconds to completion, if reported."""
    match = RTOE_PATTERN.search(text)
    return int(match.group(1)) if match else None


def parse_status(text: str) -> JobStatus:
    """Map a SearchInfo response to a job status.

    Anything other than READY or FAILED (WAITING, UNKNOWN, no status line)
    counts as still running.
    """
    match = STATUS_PATTERN.search(text)
    value = match.group(1).strip().upper() if match else ""

    if value == "READY":
        return JobStatus.READY
    if value == "FAILED":
        return JobStatus.FAILED
    return JobStatus.RUNNING


class NcbiBlastClient(AlignmentServiceClient):
    """Talks to the NCBI BLAST URL API with requests."""

    def __init__(self, config: Optional[BlastConfig] = None,
                 session: Optional[requests.Session] = None):
        """
        Args:
            config: BLAST settings (URL, program, database, timeouts)
            session: Preconfigured session; a retrying one is created if omitted
        """
        self.config = config or BlastConfig()
        self.session = session or self._create_session()
        self.last_request_time = 0.0

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        retry_strategy = Retry(
            total=self.config.retry_attempts,
            backoff_factor=2,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"]  # a retried Put would queue a second search
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def _rate_limit(self) -> None:
        """Enforce the minimum spacing between requests."""
        interval = self.config.min_request_interval
        if interval <= 0:
            return

        time_since_last = time.time() - self.last_request_time
        if time_since_last < interval:
            time.sleep(interval - time_since_last)

        self.last_request_time = time.time()

    def _request(self, method: str, operation: str, **kwargs) -> str:
        """Send a request and return the body text."""
        self._rate_limit()
        params: Dict = kwargs.get('params') or {}

        start = time.time()
        try:
            response = self.session.request(
                method, self.config.url, timeout=self.config.request_timeout, **kwargs
            )
            response.raise_for_status()
        except requests.RequestException as e:
            log_api_call('blast', operation, params, time.time() - start, success=False)
            raise ServiceError(f"BLAST {operation} request failed: {e}") from e

        log_api_call('blast', operation, params, time.time() - start, success=True)
        return response.text

    def submit(self, query: Query, entrez_query: Optional[str] = None) -> AlignmentJob:
        data = {
            'CMD': 'Put',
            'PROGRAM': self.config.program,
            'DATABASE': self.config.database,
            'QUERY': query.to_fasta(),
        }
        if entrez_query:
            data['ENTREZ_QUERY'] = entrez_query
        if self.config.tool:
            data['TOOL'] = self.config.tool
        if self.config.email:
            data['EMAIL'] = self.config.email

        logger.info(f"Submitting {query.length} bp query to {self.config.program}/{self.config.database}"
                    + (f" ({entrez_query})" if entrez_query else ""))
        text = self._request('POST', 'submit', data=data)

        rid = parse_rid(text)
        if not rid:
            snippet = text[:SNIPPET_LENGTH]
            logger.error(f"No RID in submission response:\n{snippet}")
            raise SubmissionError("Failed to get RID from NCBI", response_snippet=snippet)

        job = AlignmentJob(rid=rid, estimated_seconds=parse_rtoe(text))
        logger.info(f"RID: {rid}" + (f" (estimated {job.estimated_seconds}s)"
                                     if job.estimated_seconds is not None else ""))
        return job

    def poll(self, rid: str) -> JobStatus:
        text = self._request('GET', 'poll', params={
            'CMD': 'Get',
            'RID': rid,
            'FORMAT_OBJECT': 'SearchInfo',
        })
        return parse_status(text)

    def fetch(self, rid: str) -> str:
        return self._request('GET', 'fetch', params={
            'CMD': 'Get',
            'RID': rid,
            'FORMAT_TYPE': 'Text',
        })

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
