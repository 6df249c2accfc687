"""Shared fakes for the lookup service and DNS."""

import threading
import time

import pytest

from asnscout.errors import NotFoundError, ResolutionError
from asnscout.models import Response

NOT_FOUND = 'bad request: {"error":"no results found"}'

THERAVANCE = Response(
    first_ip="216.101.17.0",
    last_ip="216.101.17.255",
    input="14421",
    asn=14421,
    country="US",
    org="theravance",
)

CNE_SMALL = Response(
    first_ip="118.67.200.0",
    last_ip="118.67.203.255",
    input="7712",
    asn=7712,
    country="KH",
    org="cne-as-ap cambodian network exchange co., ltd.",
)

CNE_LARGE = Response(
    first_ip="118.67.200.0",
    last_ip="118.67.207.255",
    input="7712",
    asn=7712,
    country="KH",
    org="cne-as-ap cambodian network exchange co., ltd.",
)

CLOUDFLARE = Response(
    first_ip="104.16.0.0",
    last_ip="104.20.63.255",
    input="104.16.99.52",
    asn=13335,
    country="US",
    org="cloudflarenet",
)

GOOGLE = Response(
    first_ip="142.250.0.0",
    last_ip="142.250.82.255",
    input="142.250.72.14",
    asn=15169,
    country="US",
    org="google",
)


def service_answers():
    """Answers keyed by query, shaped like the live service's."""
    return {
        "14421": [THERAVANCE],
        # the service repeats identical records for some ASNs
        "7712": [CNE_SMALL, CNE_LARGE, CNE_SMALL],
        "104.16.99.52": [CLOUDFLARE],
        "142.250.72.14": [GOOGLE],
    }


class FakeClient:
    """Stands in for LookupClient; unknown queries are not found."""

    def __init__(self, answers=None):
        self.answers = service_answers() if answers is None else answers
        self.calls = []
        self.closed = False
        self._lock = threading.Lock()

    def get_data(self, query):
        with self._lock:
            self.calls.append(query)
        answer = self.answers.get(query)
        if isinstance(answer, Exception):
            raise answer
        if not answer:
            raise NotFoundError(NOT_FOUND, query=query)
        return list(answer)

    def close(self):
        self.closed = True


class SlowClient(FakeClient):
    """FakeClient that takes `delay` seconds per lookup."""

    def __init__(self, answers=None, delay=0.05):
        super().__init__(answers)
        self.delay = delay

    def get_data(self, query):
        time.sleep(self.delay)
        return super().get_data(query)


class FakeResolver:
    """Stands in for DomainResolver."""

    def __init__(self, mapping=None):
        self.mapping = {"google.com": ["142.250.72.14"]} if mapping is None else mapping
        self.calls = []

    def resolve(self, domain):
        self.calls.append(domain)
        answer = self.mapping.get(domain)
        if answer is None:
            raise ResolutionError(domain, "domain does not exist")
        return list(answer)


class Collector:
    """Thread-safe result sink recording every batch."""

    def __init__(self):
        self.batches = []
        self._lock = threading.Lock()

    def __call__(self, records):
        with self._lock:
            self.batches.append(records)

    @property
    def records(self):
        return [r for batch in self.batches for r in batch]


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def fake_resolver():
    return FakeResolver()


@pytest.fixture
def collector():
    return Collector()
