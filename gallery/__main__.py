"""
Main entry point for running the package as a module.

Usage:
    python -m gallery serve --root ./static
    python -m gallery scan --root ./static --show-files
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
