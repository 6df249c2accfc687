"""
Result formatting and output sinks.

Records are rendered as plain CIDR lines (default), JSON lines or
pipe-separated CSV, and written to stdout and/or an output file.
"""

import json
import logging
import sys
import threading
from datetime import datetime
from typing import Callable, List, Optional, TextIO

from .models import Response

PLAIN = 'plain'
JSON = 'json'
CSV = 'csv'

CSV_HEADER = "timestamp|input|as_number|as_name|as_country|as_range"


def _visible(records: List[Response], include_ipv6: bool) -> List[Response]:
    return [r for r in records if include_ipv6 or not r.is_ipv6]


def _identity(value: str) -> str:
    return value


def format_plain(records: List[Response], include_ipv6: bool = False) -> List[str]:
    """
    Render records as one CIDR block per line.

    Args:
        records: Records of one batch
        include_ipv6: Keep IPv6 ranges

    Returns:
        List of output lines
    """
    lines = []
    for record in _visible(records, include_ipv6):
        lines.extend(record.cidrs())
    return lines


def format_json(records: List[Response], display_input: Optional[Callable[[str], str]] = None,
                include_ipv6: bool = False) -> List[str]:
    """
    Render records as JSON lines.

    Args:
        records: Records of one batch
        display_input: Maps a record's query to the input shown to the user
        include_ipv6: Keep IPv6 ranges

    Returns:
        List of JSON strings, one per record
    """
    display_input = display_input or _identity
    timestamp = datetime.now().isoformat(sep=' ', timespec='seconds')
    lines = []
    for record in _visible(records, include_ipv6):
        lines.append(json.dumps({
            'timestamp': timestamp,
            'input': display_input(record.input),
            'as_number': f"AS{record.asn}",
            'as_name': record.org,
            'as_country': record.country,
            'as_range': record.cidrs(),
        }))
    return lines


def format_csv(records: List[Response], display_input: Optional[Callable[[str], str]] = None,
               include_ipv6: bool = False) -> List[str]:
    """Render records as pipe separated rows, header not included"""
    display_input = display_input or _identity
    timestamp = datetime.now().isoformat(sep=' ', timespec='seconds')
    return [
        "|".join([
            timestamp,
            display_input(record.input),
            f"AS{record.asn}",
            record.org,
            record.country,
            ",".join(record.cidrs()),
        ])
        for record in _visible(records, include_ipv6)
    ]


class OutputWriter:
    """Thread-safe result sink writing formatted batches"""

    def __init__(self, fmt: str = PLAIN, output_file: Optional[str] = None,
                 include_ipv6: bool = False, display_input: Optional[Callable[[str], str]] = None,
                 stream: Optional[TextIO] = None):
        if fmt not in (PLAIN, JSON, CSV):
            raise ValueError(f"Unknown output format: {fmt}")
        self.fmt = fmt
        self.include_ipv6 = include_ipv6
        self.display_input = display_input
        self.stream = stream if stream is not None else sys.stdout
        self.output_file = output_file
        self.lines_written = 0
        self.logger = logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._header_written = False
        self._file = open(output_file, 'w') if output_file else None

    def format(self, records: List[Response]) -> List[str]:
        if self.fmt == JSON:
            return format_json(records, self.display_input, self.include_ipv6)
        if self.fmt == CSV:
            return format_csv(records, self.display_input, self.include_ipv6)
        return format_plain(records, self.include_ipv6)

    def write(self, records: List[Response]):
        """Format one batch and write it atomically"""
        lines = self.format(records)
        if not lines:
            return

        with self._lock:
            if self.fmt == CSV and not self._header_written:
                lines = [CSV_HEADER] + lines
                self._header_written = True
            text = "\n".join(lines) + "\n"
            self.stream.write(text)
            self.stream.flush()
            if self._file:
                self._file.write(text)
            self.lines_written += len(lines)

    __call__ = write

    def close(self):
        """Close the output file"""
        with self._lock:
            if self._file:
                self._file.close()
                self._file = None
                self.logger.info(f"✔ Wrote {self.lines_written:,} lines to '{self.output_file}'")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
