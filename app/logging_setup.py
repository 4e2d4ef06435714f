from __future__ import annotations

import logging
import os


def ensure_logging() -> None:
    level_name = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    formatter = logging.Formatter("%(levelname)s: %(message)s")
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    else:
        # Lambda pre-installs a handler on the root logger.
        root.setLevel(level)
        for handler in root.handlers:
            handler.setFormatter(formatter)
