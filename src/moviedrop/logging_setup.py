import logging
import os
from typing import Optional

def setup_logging(level: Optional[str] = None) -> None:
    """
    Minimal logging setup for the CLI.
    - Uses LOG_LEVEL env if level is None (default INFO).
    - Configures a single console handler via logging.basicConfig.
    - Keeps urllib3 retry chatter at WARNING unless we are debugging.
    """
    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    # Fallback to INFO if user passes something weird
    level_value = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level_value,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    if level_value > logging.DEBUG:
        logging.getLogger("urllib3").setLevel(logging.WARNING)
