#!/usr/bin/env python3
"""
Webnotes CLI.

Run from a checkout without installing the package.

Usage:
    python cli.py --help
    python cli.py notes list
    python cli.py --offline notes create --title "Groceries"
    python cli.py --debug sync status
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from webnotes.cli.main import main

if __name__ == "__main__":
    main()
