"""Allow ``python -m reviewqueue``."""

from __future__ import annotations

import sys

from reviewqueue.cli import main

if __name__ == "__main__":
    sys.exit(main())
