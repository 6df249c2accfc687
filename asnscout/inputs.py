"""
Input normalization.

Turns the user-supplied input buckets (IPs, ASNs, organizations and domains)
into one ordered queue of query strings for the lookup client. Domains are
expanded to their resolved addresses; each address keeps its domain as the
origin so results can be reported against what the user typed.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .errors import ResolutionError
from .utils import validate_asn, validate_domain, validate_ip_address

IP = 'ip'
ASN = 'asn'
ORG = 'org'
DOMAIN = 'domain'


@dataclass(frozen=True)
class Query:
    """A normalized query ready for the lookup client"""
    value: str
    kind: str
    origin: Optional[str] = None


def normalize_asn(value: str) -> str:
    """Strip whitespace and a leading case-insensitive 'AS' prefix"""
    value = value.strip()
    if value[:2].lower() == 'as':
        value = value[2:]
    return value


def identify_input(value: str) -> str:
    """
    Classify a raw input token.

    Args:
        value: Token from the command line or an input file

    Returns:
        One of 'ip', 'asn', 'domain' or 'org'
    """
    value = value.strip()
    if validate_ip_address(value):
        return IP
    if validate_asn(value):
        return ASN
    if validate_domain(value):
        return DOMAIN
    return ORG


def classify_inputs(values: Iterable[str]) -> Dict[str, List[str]]:
    """Split auto-detected tokens into per-kind buckets"""
    buckets = {IP: [], ASN: [], ORG: [], DOMAIN: []}
    for value in values:
        value = value.strip()
        if value:
            buckets[identify_input(value)].append(value)
    return buckets


def load_input_file(path: str) -> List[str]:
    """
    Read input tokens from a file, one per line.

    Args:
        path: Path to input file

    Returns:
        Non-blank stripped lines
    """
    with open(path, 'r') as f:
        return [line.strip() for line in f if line.strip()]


class InputNormalizer:
    """Builds the query queue from input buckets"""

    def __init__(self, resolver):
        self.resolver = resolver
        self.logger = logging.getLogger(__name__)

    def normalize(self, ip: Iterable[str] = (), asn: Iterable[str] = (),
                  org: Iterable[str] = (), domain: Iterable[str] = ()) -> List[Query]:
        """
        Produce the ordered query list.

        IPs come first, then ASNs, organizations and finally the addresses
        resolved from domains; each group keeps its input order. A value
        queued twice is kept only at its first position.

        Args:
            ip: IP address strings, queued verbatim
            asn: ASN strings, 'AS' prefix stripped
            org: Organization names, queued verbatim
            domain: Domain names to resolve

        Returns:
            List of Query objects
        """
        queries: List[Query] = []
        seen = set()

        def add(query: Query):
            if query.value and query.value not in seen:
                seen.add(query.value)
                queries.append(query)

        for value in ip:
            add(Query(value.strip(), IP))
        for value in asn:
            add(Query(normalize_asn(value), ASN))
        for value in org:
            add(Query(value.strip(), ORG))
        for value in domain:
            value = value.strip()
            if not value:
                continue
            for address in self.resolve_domain(value):
                add(Query(address, IP, origin=value))

        self.logger.debug(f"Prepared {len(queries)} queries")
        return queries

    def resolve_domain(self, domain: str) -> List[str]:
        """Resolve a domain, returning no addresses when resolution fails"""
        try:
            addresses = self.resolver.resolve(domain)
        except ResolutionError as e:
            self.logger.warning(f"Skipping {domain}: {e.reason}")
            return []

        if not addresses:
            self.logger.warning(f"Skipping {domain}: no addresses")
        return addresses
