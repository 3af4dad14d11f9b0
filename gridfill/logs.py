from __future__ import annotations

import logging
import os
from typing import Optional, Union

ENV_LOG_LEVEL = "GRIDFILL_LOG_LEVEL"

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[Union[str, int]] = None) -> None:
    """Configure root logging for command-line use.

    The level comes from the argument, then GRIDFILL_LOG_LEVEL, then WARNING.
    Library modules only ever call logging.getLogger(__name__).
    """
    if level is None:
        level = os.getenv(ENV_LOG_LEVEL) or "WARNING"
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(level=level, format=_FORMAT)
