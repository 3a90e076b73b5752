#!/usr/bin/env python3
"""
StubServer - HTTP stub server CLI

Run from a checkout without installing:
    python3 stub-server.py --config stubs.yaml --verbose
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent / 'src'))

from stubserver.cli import main

if __name__ == '__main__':
    sys.exit(main())
