"""
Logging setup for the storefront.

Configures the root logger once with a single stream handler. Modules log
through logging.getLogger(__name__).
"""
import os
import sys
import logging

LOG_FORMAT = '[%(asctime)s] %(levelname)s %(name)s: %(message)s'

_configured = False


def setup_logging(level: str = None) -> None:
    """
    Configure root logging for the process.

    Args:
        level: Log level name; defaults to LOG_LEVEL env var or INFO
    """
    global _configured

    level_name = (level or os.getenv('LOG_LEVEL', 'INFO')).upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger('httpx').setLevel(logging.WARNING)

    _configured = True
