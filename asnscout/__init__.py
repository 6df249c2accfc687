"""
asnscout - ASN mapping tool

Resolves IP addresses, ASNs, organization names and domains into the
ASN ranges that own them.
"""

__version__ = "1.0.0"
__author__ = "asnscout Contributors"

from .core import Config, PerformanceMetrics, setup_logging
from .errors import (
    ASNScoutError, ConfigurationError, NotFoundError, ResolutionError,
    RunnerClosedError, ServiceError, TransportError
)
from .models import Response, contains_response, dedupe_responses
from .client import LookupClient
from .resolver import DomainResolver
from .inputs import InputNormalizer, Query, identify_input, normalize_asn
from .runner import Options, Runner, RunnerState
from .output import OutputWriter

__all__ = [
    'Config',
    'PerformanceMetrics',
    'setup_logging',
    'ASNScoutError',
    'ConfigurationError',
    'NotFoundError',
    'ResolutionError',
    'RunnerClosedError',
    'ServiceError',
    'TransportError',
    'Response',
    'contains_response',
    'dedupe_responses',
    'LookupClient',
    'DomainResolver',
    'InputNormalizer',
    'Query',
    'identify_input',
    'normalize_asn',
    'Options',
    'Runner',
    'RunnerState',
    'OutputWriter',
]
