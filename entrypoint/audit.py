#!/usr/bin/env python
"""
Run a revenue audit on the fallback property and market.

Usage:
    python entrypoint/audit.py
    python entrypoint/audit.py --previous-aps 1.05 --days-out 5
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from revenue_engine.cli import main


if __name__ == "__main__":
    sys.exit(main())
