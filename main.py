"""Command-line Entry Point - Root Module.

Runs the discovery feed from a source checkout without installing it.
"""

import sys

from discovery_feed.main import main

__all__ = ["main"]


if __name__ == "__main__":
    sys.exit(main())
