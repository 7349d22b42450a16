"""Allow running Lintic with ``python -m lintic``."""
from __future__ import annotations

import sys

from lintic.cli import main

sys.exit(main())
