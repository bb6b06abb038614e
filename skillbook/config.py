"""
Skillbook configuration, read from the environment (and .env if present).
"""

import logging
import os
from typing import Any, Dict

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_INSTALL_DIR = "~/.skillbook/commands"
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_WATCH_INTERVAL = 2.0


def load_settings() -> Dict[str, Any]:
    """Load .env and return the SKILLBOOK_* settings with defaults applied."""
    load_dotenv()

    interval_raw = os.getenv("SKILLBOOK_WATCH_INTERVAL", "")
    try:
        watch_interval = float(interval_raw) if interval_raw else DEFAULT_WATCH_INTERVAL
    except ValueError:
        logger.warning("Invalid SKILLBOOK_WATCH_INTERVAL %r; using %.1f", interval_raw, DEFAULT_WATCH_INTERVAL)
        watch_interval = DEFAULT_WATCH_INTERVAL

    return {
        "skills_dir": os.getenv("SKILLBOOK_SKILLS_DIR") or None,
        "install_dir": os.path.expanduser(os.getenv("SKILLBOOK_INSTALL_DIR") or DEFAULT_INSTALL_DIR),
        "log_level": (os.getenv("SKILLBOOK_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        "watch_interval": watch_interval,
    }
