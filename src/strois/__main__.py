"""Allow running the CLI with ``python -m strois``."""

import sys

from .cli import main

sys.exit(main())
