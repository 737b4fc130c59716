"""
Error taxonomy for raster store configuration resolution.

Callers can distinguish "the descriptor is invalid" (DescriptorError and
InvalidOverrideValue), "no backend understands this" (NoMatchingBackend) and
"the backend is currently unreachable" (StoreConstructionFailed) and pick a
recovery strategy accordingly.
"""
from __future__ import annotations

from typing import Iterable, Optional

__all__ = [
    "RasterConfigError",
    "DescriptorError",
    "MalformedDescriptor",
    "DocumentParseError",
    "InvalidOverrideValue",
    "NoMatchingBackend",
    "OverrideNotSet",
    "StoreConstructionFailed",
]


class RasterConfigError(Exception):
    """Base class for every error raised by rasterconfig."""


class DescriptorError(RasterConfigError, ValueError):
    """The raw descriptor could not be turned into a parameter mapping."""


class MalformedDescriptor(DescriptorError):
    """A flat parameter string does not follow the key=value;... grammar."""


class DocumentParseError(DescriptorError):
    """A parameter document is malformed, unreachable or not trusted."""

    def __init__(self, message: str, *, locator: Optional[str] = None) -> None:
        super().__init__(message)
        self.locator = locator


class InvalidOverrideValue(RasterConfigError, ValueError):
    """A reserved override key carries a value of the wrong type."""

    def __init__(self, key: str, value: str, reason: str = "") -> None:
        message = f"Invalid value {value!r} for override '{key}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.key = key
        self.value = value


class NoMatchingBackend(RasterConfigError, LookupError):
    """No registered store family claims the backend parameters."""

    def __init__(self, keys: Iterable[str], families: Iterable[str] = ()) -> None:
        self.keys = tuple(sorted(keys))
        self.families = tuple(families)
        available = ", ".join(self.families) or "none"
        super().__init__(
            f"No store family claims parameters {list(self.keys)}. Available: {available}"
        )


class OverrideNotSet(RasterConfigError, RuntimeError):
    """An override was read without checking that it is set."""

    def __init__(self, name: str) -> None:
        super().__init__(f"{name} is not set for this config")
        self.name = name


class StoreConstructionFailed(RasterConfigError, RuntimeError):
    """The selected family failed to build a store handle.

    The handle stays unset on the configuration, so the next access retries.
    """

    def __init__(self, kind: str, family: str, reason: str = "") -> None:
        message = f"Store creation failed for {kind} (family '{family}')"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.kind = kind
        self.family = family
