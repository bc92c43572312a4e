#!/usr/bin/env python3
"""Verify object storage configuration and connectivity."""
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from r2vault.cli import verify_main


if __name__ == "__main__":
    sys.exit(verify_main())
