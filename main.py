#!/usr/bin/env python3
"""
Device Rename Tool - Main Entry

Usage:
    python main.py plan --config nodes.json --db domoticz.db
    python main.py apply --config nodes.json --db domoticz.db --dry-run
    python main.py apply --config nodes.json --db domoticz.db --undo-file undo.sql
    python main.py rules
"""

import sys
from pathlib import Path

# Ensure the current directory is in the Python path
sys.path.insert(0, str(Path(__file__).parent))

from devname_cli import main


if __name__ == "__main__":
    sys.exit(main())
