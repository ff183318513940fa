"""
Hauswart — Entry Point.

Single entry point: `python main.py list` prints the open tasks.
"""

import logging
import sys

from hauswart.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from hauswart.cli import main

if __name__ == "__main__":
    sys.exit(main())
