"""
Logging setup.

Every module logs through logging.getLogger(__name__); this only
configures the root handler once at app creation.
"""

import logging

from internhub.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging(level: str = None) -> None:
    global _configured
    if _configured:
        return
    settings = get_settings()
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
    )
    # Driver chatter drowns out fallback warnings
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    _configured = True
