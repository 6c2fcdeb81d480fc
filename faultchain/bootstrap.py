"""Start-up lifecycle — apply settings once before concurrent use begins."""

import logging

from faultchain.config import Settings, get_settings
from faultchain.core.stack import set_default_depth
from faultchain.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


def configure(settings: Settings | None = None) -> Settings:
    """Apply stack depth and logging. Call once, before registering codes."""
    settings = settings or get_settings()
    set_default_depth(settings.stack_depth)
    setup_logging(settings.log_level, settings.log_format)
    logger.info(
        "faultchain configured",
        extra={"stack_depth": settings.stack_depth},
    )
    return settings
