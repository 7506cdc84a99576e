"""Allow ``python -m minideploy``."""

from __future__ import annotations

import sys

from minideploy.cli import main

if __name__ == "__main__":
    sys.exit(main())
