"""Allow running the cue sheet tool with ``python -m services.cuesheet_service.src``."""

import sys

from .main import main

sys.exit(main())
