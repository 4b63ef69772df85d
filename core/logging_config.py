from __future__ import annotations

import logging

from core.settings import Settings


def configure_logging(settings: Settings) -> None:
    """Initialise the root logger once with the configured level."""

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
