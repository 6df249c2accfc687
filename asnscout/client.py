"""
Lookup client for the ASN mapping service.

The client turns one query string (IP literal, bare ASN digits or an
organization name) into the list of ASN records the service returns.
"""

import logging
import requests
from typing import List, Optional

from .core import Config, HTTPSessionManager
from .errors import NotFoundError, TransportError
from .models import Response
from .utils import validate_ip_address


def query_parameter(query: str) -> str:
    """
    Pick the service parameter for a normalized query.

    Args:
        query: IP literal, ASN digits or organization name

    Returns:
        One of 'ip', 'asn' or 'org'
    """
    if validate_ip_address(query):
        return 'ip'
    if query.isdigit():
        return 'asn'
    return 'org'


class LookupClient:
    """HTTP client for the ASN mapping API"""

    def __init__(self, api_url: str = None, api_key: Optional[str] = None,
                 proxy: Optional[str] = None, timeout: int = Config.REQUEST_TIMEOUT,
                 verify_tls: bool = True, session_manager: Optional[HTTPSessionManager] = None):
        self.api_url = api_url or Config.API_URL
        self.api_key = api_key or Config.api_key_from_env()
        self.timeout = timeout
        self.session_manager = session_manager or HTTPSessionManager(proxy=proxy, verify_tls=verify_tls)
        self.logger = logging.getLogger(__name__)

    def get_data(self, query: str) -> List[Response]:
        """
        Look up ASN records for a single query.

        Args:
            query: Normalized query string

        Returns:
            Non-empty list of records in the order the service returned them

        Raises:
            NotFoundError: If the service has no match for the query
            TransportError: For any other failure talking to the service
        """
        query = query.strip()
        if not query:
            raise ValueError("empty query")

        param = query_parameter(query)
        headers = {}
        if self.api_key:
            headers[Config.API_KEY_HEADER] = self.api_key

        self.logger.debug(f"Querying {self.api_url} with {param}={query}")
        session = self.session_manager.get_session()

        try:
            response = session.get(
                self.api_url,
                params={param: query},
                headers=headers,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"request failed: {e}", query=query)

        body = response.text.strip()

        if not 200 <= response.status_code < 300:
            message = f"bad request: {body}"
            if Config.NOT_FOUND_MARKER in body:
                raise NotFoundError(message, query=query, status_code=response.status_code)
            if response.status_code == 401:
                self.logger.warning(f"Service rejected credentials, set {Config.API_KEY_ENV}")
            raise TransportError(message, query=query, status_code=response.status_code)

        if not body:
            # 204 or an empty 2xx body carries no records
            raise NotFoundError(f"bad request: {Config.NOT_FOUND_BODY}", query=query,
                                status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise TransportError(f"invalid response: {e}", query=query,
                                 status_code=response.status_code)

        if isinstance(payload, dict) and Config.NOT_FOUND_MARKER in str(payload.get("error", "")):
            raise NotFoundError(f"bad request: {body}", query=query,
                                status_code=response.status_code)

        if not payload:
            # null or [] is still a zero-match answer
            raise NotFoundError(f"bad request: {Config.NOT_FOUND_BODY}", query=query,
                                status_code=response.status_code)

        if not isinstance(payload, list):
            raise TransportError(f"unexpected response format: {body[:200]}", query=query,
                                 status_code=response.status_code)

        results = []
        for item in payload:
            if not isinstance(item, dict):
                raise TransportError(f"unexpected record format: {item!r}", query=query)
            results.append(Response.from_dict(item))

        self.logger.debug(f"{query}: {len(results)} records")
        return results

    def close(self):
        """Release the HTTP session"""
        self.session_manager.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
