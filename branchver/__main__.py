"""
Entry point for python -m branchver

Allows running the package as a module:
    python -m branchver
"""

import sys

from .cli import main

if __name__ == '__main__':
    sys.exit(main())
