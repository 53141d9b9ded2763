#!/usr/bin/env python3
"""
Schema Cold-Start Lab - run benchmarks from a source checkout.

Examples:
    python main.py cases
    python main.py matrix --runs 10
    python main.py coldstart --cold-runs 25 --output-dir results
"""

import sys

from coldstart_lab.cli import main

if __name__ == "__main__":
    sys.exit(main())
