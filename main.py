#!/usr/bin/env python3
"""
asnscout - Main Entry Point

Maps IP addresses, ASNs, organization names and domains to the
ASN ranges that own them.
"""

import sys

if __name__ == "__main__":
    from asnscout.cli import main
    sys.exit(main())
