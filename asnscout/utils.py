"""
Utility functions and helpers.
"""

import ipaddress
import re

_ASN_PATTERN = re.compile(r'^(?:as)?\d+$', re.IGNORECASE)
_DOMAIN_PATTERN = re.compile(
    r'^(?:[a-zA-Z0-9_](?:[a-zA-Z0-9_-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z][a-zA-Z0-9-]{0,61}[a-zA-Z0-9]\.?$'
)


def validate_ip_address(ip_string: str) -> bool:
    """
    Validate if a string is a valid IP address.

    Args:
        ip_string: String to validate

    Returns:
        True if valid IP address, False otherwise
    """
    try:
        ipaddress.ip_address(ip_string)
        return True
    except ValueError:
        return False


def validate_asn(asn_string: str) -> bool:
    """Check for bare ASN digits with an optional AS prefix"""
    return bool(_ASN_PATTERN.match(asn_string.strip()))


def validate_domain(domain: str) -> bool:
    """
    Validate if a string looks like a resolvable domain name.

    Args:
        domain: String to validate

    Returns:
        True if the string has the shape of a domain name
    """
    if not domain or len(domain) > 253 or ' ' in domain:
        return False
    return bool(_DOMAIN_PATTERN.match(domain))


def format_duration(seconds: float) -> str:
    """
    Format duration in human readable format.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string (e.g., "1m 23s")
    """
    if seconds < 60:
        return f"{seconds:.1f}s"

    minutes = int(seconds // 60)
    remaining_seconds = int(seconds % 60)

    if minutes < 60:
        return f"{minutes}m {remaining_seconds}s"

    hours = int(minutes // 60)
    remaining_minutes = int(minutes % 60)
    return f"{hours}h {remaining_minutes}m {remaining_seconds}s"
