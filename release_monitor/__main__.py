"""Allow running as ``python -m release_monitor``."""

import sys

from release_monitor.main import main

sys.exit(main())
