#!/usr/bin/env python3
"""Host the daily backup scheduler."""
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from r2vault.cli import scheduler_main


if __name__ == "__main__":
    sys.exit(scheduler_main())
