"""
Logging filter that injects whitelisted observability context into every log record.

Ensure your formatter includes %(context)s to render the injected context. For JSON
formatters, emit the record.__dict__["context"] map.
"""
from __future__ import annotations

import logging
from typing import Any, Dict

from rasterconfig.observability.context import get_obs_context

_ALLOWED_KEYS = {
    "descriptor",
    "store_kind",
    "family",
    "authorization_provider",
    "request_id",
    "user_id",
    "component",
}

_SENSITIVE_HINTS = {
    "password",
    "secret",
    "token",
    "api_key",
    "credential",
}

_MAX_VALUE_LEN = 256


def redact_value(key: str, value: Any) -> Any:
    k = (key or "").lower()
    if any(hint in k for hint in _SENSITIVE_HINTS):
        return "[REDACTED]"
    if isinstance(value, (dict, list)):
        return "[OMITTED]"
    s = str(value)
    if len(s) > _MAX_VALUE_LEN:
        return s[:_MAX_VALUE_LEN] + "…"
    return value


def redact_descriptor(descriptor: str) -> str:
    """Mask the values of sensitive keys inside a flat key=value;... descriptor."""
    parts = []
    for entry in (descriptor or "").split(";"):
        key, sep, value = entry.partition("=")
        if sep and any(hint in key.strip().lower() for hint in _SENSITIVE_HINTS):
            value = "[REDACTED]"
        parts.append(f"{key}{sep}{value}")
    return ";".join(parts)


class LogContextFilter(logging.Filter):
    """Inject whitelisted observability context onto LogRecord.context."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        out: Dict[str, Any] = {}
        for k, v in get_obs_context().items():
            if k not in _ALLOWED_KEYS:
                continue
            if k == "descriptor" and isinstance(v, str):
                v = redact_descriptor(v)
            out[k] = redact_value(k, v)
        record.context = out
        return True


def install_log_context_filter(target: logging.Logger | logging.Handler | None = None) -> None:
    """Install LogContextFilter on target (root logger by default) and its handlers."""
    target = target or logging.getLogger()
    _ensure_filter(target)
    for h in getattr(target, "handlers", []):
        _ensure_filter(h)


def _ensure_filter(target: logging.Logger | logging.Handler) -> None:
    if not any(isinstance(f, LogContextFilter) for f in target.filters):
        target.addFilter(LogContextFilter())
