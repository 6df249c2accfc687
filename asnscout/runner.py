"""
Resolution pipeline.

The Runner owns the input normalizer and the lookup client. One run moves
through CREATED -> INPUT_PREPARED -> PROCESSING -> CLOSED: inputs are turned
into a read-only query queue, every query is looked up by a bounded pool of
workers, and each successful lookup is delivered to the result callback as
one deduplicated batch.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple
from tqdm import tqdm

from .client import LookupClient
from .core import Config, PerformanceMetrics
from .errors import (
    ASNScoutError, ConfigurationError, NotFoundError, RunnerClosedError, TransportError
)
from .inputs import ASN, DOMAIN, IP, ORG, InputNormalizer, Query, classify_inputs
from .models import Response, dedupe_responses
from .resolver import DomainResolver
from .utils import validate_asn


class RunnerState(Enum):
    CREATED = 'created'
    INPUT_PREPARED = 'input_prepared'
    PROCESSING = 'processing'
    CLOSED = 'closed'


@dataclass
class Options:
    """Configuration for one resolution run"""
    ip: List[str] = field(default_factory=list)
    asn: List[str] = field(default_factory=list)
    org: List[str] = field(default_factory=list)
    domain: List[str] = field(default_factory=list)
    inputs: List[str] = field(default_factory=list)  # auto-detected tokens
    on_result: Optional[Callable[[List[Response]], None]] = None
    concurrency: int = Config.DEFAULT_CONCURRENCY
    resolvers: List[str] = field(default_factory=list)
    include_ipv6: bool = False
    api_key: Optional[str] = None
    proxy: Optional[str] = None
    timeout: int = Config.REQUEST_TIMEOUT
    show_progress: bool = False


class Runner:
    """Runs lookups for every input and streams batches to the callback"""

    def __init__(self, options: Options, client=None, resolver=None):
        """
        Validate the options and wire the collaborators.

        Args:
            options: Run configuration
            client: Object with get_data(query); a LookupClient is built when omitted
            resolver: Object with resolve(domain); a DomainResolver is built for domain input when omitted

        Raises:
            ConfigurationError: If no input is supplied or an option is invalid
        """
        self.options = options
        self.logger = logging.getLogger(__name__)
        self.buckets = self._build_buckets(options)
        self.concurrency = self._validate(options)

        self._owns_client = client is None
        self.client = client or LookupClient(
            api_key=options.api_key, proxy=options.proxy, timeout=options.timeout
        )
        # Resolver() reads the system resolver config, so only build one when needed
        if resolver is None and self.buckets[DOMAIN]:
            resolver = DomainResolver(
                nameservers=options.resolvers or None, include_ipv6=options.include_ipv6
            )
        self.resolver = resolver
        self.normalizer = InputNormalizer(self.resolver)
        self.metrics = PerformanceMetrics()

        self.queries: Tuple[Query, ...] = ()
        self._origins: Dict[str, str] = {}
        self.state = RunnerState.CREATED
        self._cond = threading.Condition()
        self._stop = threading.Event()
        self._delivering = 0
        self._processing = False
        self._released = False
        self._local = threading.local()

    @staticmethod
    def _build_buckets(options: Options) -> Dict[str, List[str]]:
        buckets = classify_inputs(options.inputs)
        for kind, values in ((IP, options.ip), (ASN, options.asn),
                             (ORG, options.org), (DOMAIN, options.domain)):
            buckets[kind] = [v for v in values if v and v.strip()] + buckets[kind]
        return buckets

    def _validate(self, options: Options) -> int:
        if not any(self.buckets.values()):
            raise ConfigurationError("no input supplied: provide at least one IP, ASN, organization or domain")
        if not callable(options.on_result):
            raise ConfigurationError("on_result must be a callable accepting a list of records")
        for value in self.buckets[ASN]:
            if not validate_asn(value):
                raise ConfigurationError(f"invalid ASN: {value!r}")
        if options.concurrency < 1:
            raise ConfigurationError(f"concurrency must be at least 1, got {options.concurrency}")
        if options.concurrency > Config.MAX_CONCURRENCY:
            self.logger.warning(f"Concurrency capped at {Config.MAX_CONCURRENCY}")
            return Config.MAX_CONCURRENCY
        return options.concurrency

    def _check_state(self, expected: RunnerState, action: str):
        if self.state is RunnerState.CLOSED:
            raise RunnerClosedError(f"cannot {action}: runner is closed")
        if self.state is not expected:
            raise ASNScoutError(f"cannot {action} in state '{self.state.value}'")

    def prepare_input(self):
        """
        Normalize the input buckets into the query queue.

        Raises:
            ConfigurationError: If explicit IP/ASN/org input yields no query
            RunnerClosedError: If the runner was closed
        """
        with self._cond:
            self._check_state(RunnerState.CREATED, "prepare input")

        queries = self.normalizer.normalize(
            ip=self.buckets[IP], asn=self.buckets[ASN],
            org=self.buckets[ORG], domain=self.buckets[DOMAIN]
        )

        if not queries:
            if self.buckets[IP] or self.buckets[ASN] or self.buckets[ORG]:
                raise ConfigurationError("no query could be built from the supplied input")
            self.logger.warning("No domain resolved to an address, nothing to look up")

        with self._cond:
            self._check_state(RunnerState.CREATED, "prepare input")
            self.queries = tuple(queries)
            self._origins = {q.value: q.origin for q in queries if q.origin}
            self.state = RunnerState.INPUT_PREPARED

        self.logger.info(f"Prepared {len(self.queries)} queries")

    def process(self):
        """
        Look up every query and deliver the results.

        Queries that match nothing are recorded in metrics.not_found and
        skipped. The first transport failure stops new lookups and is raised
        once the in-flight lookups have finished.

        Raises:
            TransportError: If the lookup service could not be reached
            RunnerClosedError: If the runner was closed
        """
        with self._cond:
            self._check_state(RunnerState.INPUT_PREPARED, "process")
            self.state = RunnerState.PROCESSING
            self._processing = True

        first_error = None
        try:
            if self.queries:
                first_error = self._run_workers()
        finally:
            with self._cond:
                self._processing = False
                release = self.state is RunnerState.CLOSED
            if release:
                self._release()

        self.logger.info(self.metrics.get_summary())
        if self.metrics.not_found:
            self.logger.debug(f"No results for: {', '.join(self.metrics.not_found)}")
        if first_error is not None:
            raise first_error

    def _run_workers(self) -> Optional[Exception]:
        workers = min(self.concurrency, len(self.queries))
        first_error = None

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='asnscout') as executor:
            future_to_query = {executor.submit(self._process_query, q): q for q in self.queries}

            with tqdm(total=len(future_to_query), desc="ASN lookups", unit="query",
                      disable=not self.options.show_progress) as pbar:
                try:
                    for future in as_completed(future_to_query):
                        query = future_to_query[future]
                        try:
                            future.result()
                        except Exception as e:
                            if first_error is None:
                                first_error = e
                                self.logger.error(f"Lookup failed for {query.value}: {e}")
                                self._stop.set()
                        pbar.update(1)
                except BaseException:
                    # interrupted (e.g. Ctrl-C): drop queued lookups before the pool drains
                    self._stop.set()
                    for future in future_to_query:
                        future.cancel()
                    raise

        return first_error

    def _process_query(self, query: Query):
        if self._stop.is_set():
            return

        self.metrics.add_processed(1)
        try:
            records = self.client.get_data(query.value)
        except NotFoundError as e:
            self.logger.debug(f"{query.value}: {e}")
            self.metrics.add_not_found(query.value)
            return
        except TransportError:
            self.metrics.add_request(success=False)
            self._stop.set()
            raise
        self.metrics.add_request(success=True)

        batch = dedupe_responses(records)
        if len(batch) != len(records):
            self.logger.debug(f"{query.value}: dropped {len(records) - len(batch)} duplicate records")
        self._deliver(batch)

    def _deliver(self, batch: List[Response]):
        with self._cond:
            if self.state is RunnerState.CLOSED:
                return
            self._delivering += 1

        self._local.in_callback = True
        try:
            self.options.on_result(batch)
            self.metrics.add_delivered(len(batch))
        finally:
            self._local.in_callback = False
            with self._cond:
                self._delivering -= 1
                self._cond.notify_all()

    def close(self):
        """
        Stop the run and release resources.

        Safe to call more than once and in any state. Once it returns the
        result callback is not invoked again.
        """
        own = 1 if getattr(self._local, 'in_callback', False) else 0
        with self._cond:
            if self.state is RunnerState.CLOSED:
                return
            self.state = RunnerState.CLOSED
            self._stop.set()
            self._cond.wait_for(lambda: self._delivering <= own)
            release = not self._processing

        # an active process() releases the client once its workers are done
        if release:
            self._release()
        self.logger.debug("Runner closed")

    def _release(self):
        with self._cond:
            if self._released:
                return
            self._released = True
        if self._owns_client:
            self.client.close()

    def run(self):
        """Prepare, process and close in one call"""
        try:
            self.prepare_input()
            self.process()
        finally:
            self.close()

    def origin_of(self, value: str) -> str:
        """Return the domain a query was resolved from, or the query itself"""
        return self._origins.get(value, value)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
