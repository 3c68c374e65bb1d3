"""Package-wide logger."""

import logging

logger = logging.getLogger("revive")
