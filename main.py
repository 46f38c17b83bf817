#!/usr/bin/env python3
"""
MapTracker launcher.

Runs the maptracker CLI straight from a checkout by putting src/ on the path:

  python main.py run path.json --dry-run
  python main.py locate forest
"""

import sys
from pathlib import Path

src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from maptracker.main import main

if __name__ == "__main__":
    sys.exit(main())
