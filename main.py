#!/usr/bin/env python3
"""
Wrapper script for pechkin.cli.
Lets the notifier run from a checkout, e.g. from a filesystem watcher hook.
"""

import sys

from pechkin.cli import main

if __name__ == "__main__":
    sys.exit(main())
