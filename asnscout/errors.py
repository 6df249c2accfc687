"""
Exception hierarchy for asnscout.

Per-query data conditions (NotFoundError, ResolutionError) are absorbed by
the pipeline; infrastructure failures (TransportError) end the run.
"""

from typing import Optional


class ASNScoutError(Exception):
    """Base class for all asnscout errors"""


class ConfigurationError(ASNScoutError):
    """Raised when a runner is built without usable input or with bad options"""


class RunnerClosedError(ASNScoutError):
    """Raised when a closed runner is asked to do more work"""


class ServiceError(ASNScoutError):
    """Base class for errors reported while talking to the lookup service"""

    def __init__(self, message: str, query: Optional[str] = None,
                 status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.query = query
        self.status_code = status_code

    def __str__(self) -> str:
        return self.message


class NotFoundError(ServiceError):
    """The service matched nothing for the query"""


class TransportError(ServiceError):
    """Network, HTTP or protocol failure while querying the service"""


class ResolutionError(ASNScoutError):
    """A domain could not be resolved to any address"""

    def __init__(self, domain: str, reason: str = "no addresses"):
        super().__init__(f"failed to resolve {domain}: {reason}")
        self.domain = domain
        self.reason = reason
