"""Logging bootstrap for applications embedding rasterconfig."""

import logging
from typing import Optional

from rasterconfig.observability.json_formatter import JsonFormatter
from rasterconfig.observability.logging_filter import LogContextFilter
from rasterconfig.settings import RasterConfigSettings, get_settings

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(context)s"

_PACKAGE_LOGGER = "rasterconfig"


def configure_logging(
        settings: Optional[RasterConfigSettings] = None,
        handler: Optional[logging.Handler] = None,
) -> logging.Handler:
    """Attach a handler to the package logger using the configured level and format.

    Calling it again replaces the handler installed by the previous call.
    """
    settings = settings or get_settings()
    handler = handler or logging.StreamHandler()
    if settings.log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    handler.addFilter(LogContextFilter())
    handler._rasterconfig_handler = True

    pkg_logger = logging.getLogger(_PACKAGE_LOGGER)
    for existing in list(pkg_logger.handlers):
        if getattr(existing, "_rasterconfig_handler", False):
            pkg_logger.removeHandler(existing)
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(settings.log_level)
    return handler
