"""
Environment Variable Expansion

Optional expansion of ${VAR} and ${VAR:-default} placeholders inside parameter
values, so descriptors can reference secrets kept out of the descriptor
string itself (``password=${DB_PASSWORD}``). Enabled with
RASTERCONFIG_EXPAND_ENV=true.
"""

import logging
import os
import re
from typing import Dict, Mapping

logger = logging.getLogger(__name__)

# Environment variable pattern for ${VAR} and ${VAR:-default}
_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-(.*?))?\}")


class EnvironmentHandler:
    """Placeholder expansion against os.environ"""

    @staticmethod
    def expand_env_string(s: str) -> str:
        """Expand ${VAR} and ${VAR:-default} in a string.

        An unset variable without a default expands to an empty string.
        """
        if not isinstance(s, str) or "${" not in s:
            return s

        def repl(m: re.Match) -> str:
            name = m.group(1)
            default = m.group(2)
            value = os.environ.get(name)
            if value is None:
                if default is None:
                    logger.warning(f"Environment variable '{name}' is not set; expanding to ''")
                return default or ""
            return value

        return _ENV_PATTERN.sub(repl, s)

    @classmethod
    def expand_params(cls, params: Mapping[str, str]) -> Dict[str, str]:
        """Return a copy of params with placeholders in values expanded (keys untouched)."""
        return {k: cls.expand_env_string(v) for k, v in params.items()}
