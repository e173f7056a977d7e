"""Entry point for ``python -m sensor_fixtures``."""

import sys

from sensor_fixtures.adapters.inbound.cli import main

if __name__ == "__main__":
    sys.exit(main())
