"""
Entry point for running dirwatch via `python -m dirwatch`.
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
