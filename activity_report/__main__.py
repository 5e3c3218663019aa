"""Allow running with ``python -m activity_report``."""

import sys

from .cli import main

sys.exit(main())
