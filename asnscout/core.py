"""
Core utilities and base classes for asnscout.
"""

import os
import time
import logging
import threading
import requests
import urllib3
from urllib3.util.retry import Retry
from dataclasses import dataclass, field
from typing import List, Optional

from . import __version__


@dataclass
class PerformanceMetrics:
    """Track lookup metrics for one run"""
    start_time: float = field(default_factory=time.time)
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_processed: int = 0
    delivered_records: int = 0
    not_found: List[str] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def elapsed_time(self) -> float:
        return time.time() - self.start_time

    @property
    def requests_per_second(self) -> float:
        if self.elapsed_time > 0:
            return self.total_requests / self.elapsed_time
        return 0.0

    def add_request(self, success: bool = True):
        with self._lock:
            self.total_requests += 1
            if success:
                self.successful_requests += 1
            else:
                self.failed_requests += 1

    def add_not_found(self, query: str):
        # a not-found answer is a completed request, just an empty one
        with self._lock:
            self.total_requests += 1
            self.not_found.append(query)

    def add_processed(self, count: int = 1):
        with self._lock:
            self.total_processed += count

    def add_delivered(self, count: int):
        with self._lock:
            self.delivered_records += count

    def get_summary(self) -> str:
        return (f"Queries: {self.total_processed:,} | "
                f"Requests: {self.total_requests:,} | "
                f"Not found: {len(self.not_found):,} | "
                f"Records: {self.delivered_records:,} | "
                f"Rate: {self.requests_per_second:.1f}/sec")


class HTTPSessionManager:
    """Builds and owns one pooled HTTP session"""

    def __init__(self, proxy: Optional[str] = None, verify_tls: bool = True,
                 pool_size: int = 10):
        self.proxy = proxy
        self.verify_tls = verify_tls
        self.pool_size = pool_size
        self._session = None

    def get_session(self) -> requests.Session:
        """Get or create HTTP session with connection pooling"""
        if self._session is None:
            self._session = requests.Session()

            # Retries are left to the caller; the adapter must not replay requests
            adapter = requests.adapters.HTTPAdapter(
                pool_connections=self.pool_size,
                pool_maxsize=self.pool_size,
                max_retries=Retry(total=0, raise_on_redirect=False)
            )
            self._session.mount('http://', adapter)
            self._session.mount('https://', adapter)

            self._session.headers.update({
                'User-Agent': f'asnscout/{__version__}',
                'Accept': 'application/json',
            })

            if self.proxy:
                self._session.proxies.update({'http': self.proxy, 'https': self.proxy})

            if not self.verify_tls:
                urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
                self._session.verify = False

        return self._session

    def close(self):
        """Close the HTTP session"""
        if self._session:
            self._session.close()
            self._session = None


def setup_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """Setup logging with configurable verbosity"""
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    logger = logging.getLogger()
    logger.setLevel(level)
    logger.handlers.clear()
    logger.addHandler(console_handler)

    # urllib3 logs every connection at DEBUG
    logging.getLogger('urllib3').setLevel(max(level, logging.INFO))

    return logger


class Config:
    """Global configuration constants"""

    # Lookup service
    API_URL = os.environ.get("ASNSCOUT_API_URL", "https://asnmap.projectdiscovery.io/api/v1/asnmap")
    API_KEY_ENV = "PDCP_API_KEY"
    API_KEY_HEADER = "X-PDCP-Key"
    NOT_FOUND_MARKER = "no results found"
    NOT_FOUND_BODY = '{"error":"no results found"}'

    # Timeouts in seconds
    REQUEST_TIMEOUT = 30
    DNS_TIMEOUT = 5

    # Bounded worker pool size for lookups
    DEFAULT_CONCURRENCY = 10
    MAX_CONCURRENCY = 100

    @classmethod
    def api_key_from_env(cls) -> Optional[str]:
        return os.environ.get(cls.API_KEY_ENV) or None
