"""
Main entry point for running the package as a module.

Usage:
    python -m imgroll process photo.jpg -o out/
    python -m imgroll event s3-event.json
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
