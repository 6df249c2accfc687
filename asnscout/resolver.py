"""
Domain to IP resolution using dnspython.
"""

import logging
import dns.exception
import dns.resolver
from typing import List, Optional

from .core import Config
from .errors import ResolutionError


class DomainResolver:
    """Resolves domain names to their A (and optionally AAAA) addresses"""

    def __init__(self, nameservers: Optional[List[str]] = None,
                 timeout: float = Config.DNS_TIMEOUT, include_ipv6: bool = False):
        self.logger = logging.getLogger(__name__)
        self.include_ipv6 = include_ipv6
        self.resolver = dns.resolver.Resolver()
        self.resolver.timeout = timeout
        self.resolver.lifetime = timeout
        if nameservers:
            self.resolver.nameservers = list(nameservers)

    def resolve(self, domain: str) -> List[str]:
        """
        Resolve a domain to its addresses.

        Args:
            domain: Domain name to resolve

        Returns:
            List of IP address strings, possibly empty

        Raises:
            ResolutionError: If the resolver fails for the domain
        """
        record_types = ['A', 'AAAA'] if self.include_ipv6 else ['A']
        addresses = []

        for record_type in record_types:
            try:
                answers = self.resolver.resolve(domain, record_type)
            except dns.resolver.NoAnswer:
                continue
            except dns.resolver.NXDOMAIN:
                raise ResolutionError(domain, "domain does not exist")
            except dns.exception.Timeout:
                raise ResolutionError(domain, "timed out")
            except dns.resolver.NoNameservers:
                raise ResolutionError(domain, "no nameservers available")
            except dns.exception.DNSException as e:
                raise ResolutionError(domain, str(e))

            for rdata in answers:
                address = rdata.to_text()
                if address not in addresses:
                    addresses.append(address)

        self.logger.debug(f"{domain} -> {', '.join(addresses) or 'no addresses'}")
        return addresses
