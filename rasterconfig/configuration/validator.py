"""
Configuration Validator

Lenient checks for optional settings. Anything rejected here is logged and
treated as absent rather than failing resolution.
"""

import logging
from typing import Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

ALLOWED_URL_SCHEMES = {"http", "https", "file"}


def validate_authorization_url(value: Optional[str]) -> Optional[str]:
    """Return value stripped when it is a well-formed URL, else None.

    http(s) URLs need a host; file URLs need a path.
    """
    if value is None:
        return None
    candidate = value.strip()
    if not candidate:
        return None
    try:
        parsed = urlparse(candidate)
        parsed.port  # raises ValueError on a non-numeric port
    except ValueError as e:
        logger.warning(f"Malformed authorization service URL {candidate!r}: {e}")
        return None
    scheme = parsed.scheme.lower()
    if scheme not in ALLOWED_URL_SCHEMES:
        logger.warning(
            f"Malformed authorization service URL {candidate!r}: "
            f"scheme must be one of {sorted(ALLOWED_URL_SCHEMES)}"
        )
        return None
    if scheme == "file" and not parsed.path:
        logger.warning(f"Malformed authorization service URL {candidate!r}: missing path")
        return None
    if scheme != "file" and not parsed.hostname:
        logger.warning(f"Malformed authorization service URL {candidate!r}: missing host")
        return None
    return candidate
