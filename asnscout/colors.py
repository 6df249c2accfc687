"""
Terminal colours for asnscout status messages.

Results go to stdout uncoloured; only the banner and status lines printed
to stderr are styled.
"""

import os
import sys
from typing import Optional, TextIO


class Colors:
    """ANSI escape codes"""

    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'

    GREEN = '\033[92m'
    CYAN = '\033[96m'
    MAGENTA = '\033[95m'
    RED = '\033[91m'
    PINK = '\033[38;5;198m'


class ColorScheme:
    """Color scheme for different types of output"""

    def __init__(self, enabled: bool = True, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stderr
        self.enabled = enabled and self._supports_color(self.stream)

    @staticmethod
    def _supports_color(stream: TextIO) -> bool:
        """Check if the stream is a colour capable terminal"""
        if "NO_COLOR" in os.environ:
            return False
        return (
            hasattr(stream, "isatty") and
            stream.isatty() and
            sys.platform != "win32"
        ) or "FORCE_COLOR" in os.environ

    def colorize(self, text: str, color: str) -> str:
        """Apply color to text if colors are enabled"""
        if not self.enabled:
            return text
        return f"{color}{text}{Colors.RESET}"

    def success(self, text: str) -> str:
        return self.colorize(text, Colors.GREEN + Colors.BOLD)

    def error(self, text: str) -> str:
        return self.colorize(text, Colors.RED + Colors.BOLD)

    def info(self, text: str) -> str:
        return self.colorize(text, Colors.CYAN)

    def highlight(self, text: str) -> str:
        return self.colorize(text, Colors.MAGENTA + Colors.BOLD)

    def dim(self, text: str) -> str:
        return self.colorize(text, Colors.DIM)

    def stat_number(self, text: str) -> str:
        return self.colorize(text, Colors.PINK + Colors.BOLD)

    def echo(self, text: str):
        """Print a status line to the message stream"""
        print(text, file=self.stream)


def create_ascii_banner(version: str) -> str:
    """Create ASCII art banner for asnscout"""
    banner = r"""
    ___   _____ _   _______________  __  ________
   / _ | / ___// | / / ___/ ___/ _ \/ / / /_  __/
  / __ |_\__ \/  |/ /\__ \/ /__/ // / /_/ / / /
 /_/ |_/____/_/|_/ /____/\___/\___/\____/ /_/
"""
    return banner.strip("\n") + f"\n        ASN mapping for IPs, orgs and domains  v{version}"
