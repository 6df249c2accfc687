"""
Data model for ASN lookup results.
"""

import ipaddress
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List

from .errors import TransportError


@dataclass(frozen=True, eq=False)
class Response:
    """One ASN ownership range matched by a query"""
    first_ip: str
    last_ip: str
    input: str
    asn: int
    country: str
    org: str

    def equal(self, other: "Response") -> bool:
        """
        Compare two records on every field.

        This is the only supported way to compare records: the service can
        return overlapping ranges for one ASN as separate entries, so no
        structural or partial comparison is generated for this class.
        """
        return (self.first_ip == other.first_ip
                and self.last_ip == other.last_ip
                and self.input == other.input
                and self.asn == other.asn
                and self.country == other.country
                and self.org == other.org)

    @property
    def has_range(self) -> bool:
        return bool(self.first_ip and self.last_ip)

    @property
    def is_ipv6(self) -> bool:
        return ":" in self.first_ip

    def cidrs(self) -> List[str]:
        """
        Convert the first/last address pair into covering CIDR blocks.

        Returns:
            List of CIDR strings, empty when the record carries no range
        """
        if not self.has_range:
            return []
        first = ipaddress.ip_address(self.first_ip)
        last = ipaddress.ip_address(self.last_ip)
        return [str(net) for net in ipaddress.summarize_address_range(first, last)]

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Response":
        """
        Build a record from one object of the service's JSON answer.

        Args:
            payload: Dict with first_ip, last_ip, input, as_number, as_country, as_name

        Returns:
            Response instance

        Raises:
            TransportError: If the object violates the record invariants
        """
        try:
            asn = int(payload.get("as_number") or 0)
        except (TypeError, ValueError):
            raise TransportError(f"invalid as_number in response: {payload!r}")
        if asn <= 0:
            raise TransportError(f"missing as_number in response: {payload!r}")

        first_ip = (payload.get("first_ip") or "").strip()
        last_ip = (payload.get("last_ip") or "").strip()
        if bool(first_ip) != bool(last_ip):
            raise TransportError(f"incomplete range in response: {payload!r}")
        if first_ip:
            try:
                first = ipaddress.ip_address(first_ip)
                last = ipaddress.ip_address(last_ip)
            except ValueError as e:
                raise TransportError(f"invalid range in response: {e}")
            if first.version != last.version or first > last:
                raise TransportError(f"invalid range in response: {first_ip} - {last_ip}")

        return cls(
            first_ip=first_ip,
            last_ip=last_ip,
            input=payload.get("input") or "",
            asn=asn,
            country=payload.get("as_country") or "",
            org=payload.get("as_name") or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        return {
            "first_ip": data["first_ip"],
            "last_ip": data["last_ip"],
            "input": data["input"],
            "as_number": data["asn"],
            "as_country": data["country"],
            "as_name": data["org"],
        }


def dedupe_responses(records: Iterable[Response]) -> List[Response]:
    """
    Remove records equal to an earlier one, preserving order.

    Args:
        records: Records of a single batch

    Returns:
        Deduplicated list
    """
    unique: List[Response] = []
    for record in records:
        if not contains_response(unique, record):
            unique.append(record)
    return unique


def contains_response(records: Iterable[Response], expected: Response) -> bool:
    """Check whether any record equals the expected one"""
    return any(record.equal(expected) for record in records)
