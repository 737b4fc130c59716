from .context import get_obs_context, obs_scope, update_obs_context, clear_obs_context, with_obs_context
from .json_formatter import JsonFormatter
from .logging_filter import LogContextFilter, install_log_context_filter, redact_descriptor
from .bootstrap import configure_logging

__all__ = [
    "get_obs_context",
    "obs_scope",
    "update_obs_context",
    "clear_obs_context",
    "with_obs_context",
    "JsonFormatter",
    "LogContextFilter",
    "install_log_context_filter",
    "redact_descriptor",
    "configure_logging",
]
