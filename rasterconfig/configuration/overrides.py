"""
Override settings.

Five reserved parameter keys tune how a caller renders what the store holds.
They are pulled out of the descriptor's parameters before a store family is
chosen, so backends never see them. Each boolean/integer override is
tri-state: unset, or set with a value. Callers check is_set before get().
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import Any, Dict, Generic, Mapping, Optional, Tuple, TypeVar, Union

from rasterconfig.configuration.validator import validate_authorization_url
from rasterconfig.errors import InvalidOverrideValue, OverrideNotSet

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConfigParameter(Enum):
    """Reserved keys, stripped from the backend parameters."""
    INTERPOLATION = "interpolationOverride"
    SCALE_TO_8BIT = "scaleTo8Bit"
    EQUALIZE_HISTOGRAM = "equalizeHistogramOverride"
    AUTHORIZATION_PROVIDER = "authorizationProvider"
    AUTHORIZATION_URL = "authorizationUrl"

    @property
    def config_name(self) -> str:
        return self.value


RESERVED_KEYS = frozenset(p.config_name for p in ConfigParameter)


class Interpolation(IntEnum):
    """Interpolation codes accepted by ``interpolationOverride``."""
    NEAREST = 0
    BILINEAR = 1
    BICUBIC = 2
    BICUBIC_2 = 3


@dataclass(frozen=True)
class Override(Generic[T]):
    """An optional setting whose absence is a checkable state."""
    name: str
    value: Optional[T] = None
    is_set: bool = False

    @classmethod
    def unset(cls, name: str) -> "Override[T]":
        return cls(name=name)

    @classmethod
    def of(cls, name: str, value: T) -> "Override[T]":
        return cls(name=name, value=value, is_set=True)

    def get(self) -> T:
        if not self.is_set:
            raise OverrideNotSet(self.name)
        return self.value

    def get_or(self, default: T) -> T:
        """The override when set, otherwise the caller's default."""
        return self.value if self.is_set else default

    def __repr__(self) -> str:
        return f"Override({self.name}={self.value!r})" if self.is_set else f"Override({self.name} unset)"


@dataclass(frozen=True)
class OverrideSettings:
    interpolation: Override[Union[Interpolation, int]] = field(
        default_factory=lambda: Override.unset("Interpolation Override"))
    scale_to_8bit: Override[bool] = field(
        default_factory=lambda: Override.unset("Scale To 8-bit"))
    equalize_histogram: Override[bool] = field(
        default_factory=lambda: Override.unset("Equalize Histogram"))
    authorization_provider: Optional[str] = None
    authorization_url: Optional[str] = None

    @classmethod
    def build(
            cls,
            *,
            interpolation: Optional[int] = None,
            scale_to_8bit: Optional[bool] = None,
            equalize_histogram: Optional[bool] = None,
            authorization_provider: Optional[str] = None,
            authorization_url: Optional[str] = None,
    ) -> "OverrideSettings":
        """Programmatic construction; None leaves an override unset."""
        result = cls(
            authorization_provider=authorization_provider or None,
            authorization_url=validate_authorization_url(authorization_url),
        )
        changes: Dict[str, Override] = {}
        if interpolation is not None:
            code = to_interpolation(ConfigParameter.INTERPOLATION.config_name, interpolation)
            changes["interpolation"] = Override.of(result.interpolation.name, code)
        if scale_to_8bit is not None:
            changes["scale_to_8bit"] = Override.of(result.scale_to_8bit.name, bool(scale_to_8bit))
        if equalize_histogram is not None:
            changes["equalize_histogram"] = Override.of(result.equalize_histogram.name, bool(equalize_histogram))
        return replace(result, **changes)


def parse_bool(raw: str) -> bool:
    return raw.strip().lower() == "true"


def to_interpolation(key: str, raw: Any) -> Union[Interpolation, int]:
    """Parse an interpolation code.

    Known codes come back as Interpolation members; any other integer is kept
    as a plain int so the override still counts as set.

    Raises:
        InvalidOverrideValue: raw does not parse as an integer
    """
    try:
        code = int(raw.strip()) if isinstance(raw, str) else int(raw)
    except (TypeError, ValueError) as e:
        raise InvalidOverrideValue(key, str(raw), "expected an integer") from e
    if code in {m.value for m in Interpolation}:
        return Interpolation(code)
    logger.debug(f"Interpolation code {code} has no named mode; keeping the raw value")
    return code


def split_reserved(params: Mapping[str, str]) -> Tuple[Dict[str, str], Dict[str, str]]:
    """Split params into (reserved, store) dicts; the input is left untouched."""
    reserved = {k: v for k, v in params.items() if k in RESERVED_KEYS}
    store = {k: v for k, v in params.items() if k not in RESERVED_KEYS}
    return reserved, store


def extract_overrides(params: Mapping[str, str]) -> Tuple[OverrideSettings, Dict[str, str]]:
    """Pull the reserved keys out of params.

    Returns:
        (overrides, store_params) where store_params is a new dict without the
        reserved keys.

    Raises:
        InvalidOverrideValue: interpolationOverride does not parse as an integer
    """
    reserved, store_params = split_reserved(params)
    defaults = OverrideSettings()

    interpolation = defaults.interpolation
    key = ConfigParameter.INTERPOLATION.config_name
    if key in reserved:
        interpolation = Override.of(interpolation.name, to_interpolation(key, reserved[key]))

    scale = defaults.scale_to_8bit
    key = ConfigParameter.SCALE_TO_8BIT.config_name
    if reserved.get(key) is not None:
        scale = Override.of(scale.name, parse_bool(reserved[key]))

    equalize = defaults.equalize_histogram
    key = ConfigParameter.EQUALIZE_HISTOGRAM.config_name
    if reserved.get(key) is not None:
        equalize = Override.of(equalize.name, parse_bool(reserved[key]))

    overrides = OverrideSettings(
        interpolation=interpolation,
        scale_to_8bit=scale,
        equalize_histogram=equalize,
        authorization_provider=reserved.get(ConfigParameter.AUTHORIZATION_PROVIDER.config_name) or None,
        authorization_url=validate_authorization_url(reserved.get(ConfigParameter.AUTHORIZATION_URL.config_name)),
    )
    return overrides, store_params
