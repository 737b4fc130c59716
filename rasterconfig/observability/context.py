"""
Observability context shared by log records.

A contextvars map carries identifiers (descriptor, store_kind, family, ...) for
the current resolution or handle construction so every log line emitted below
it can be correlated without threading the values through call signatures.
"""

import contextvars
import functools
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional, Union

_obs_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar(
    "rasterconfig_obs_context", default={}
)


def get_obs_context() -> Dict[str, Any]:
    """Get a shallow copy of the current observability context."""
    return dict(_obs_context.get() or {})


def update_obs_context(values: Dict[str, Any]) -> None:
    """Merge values into the current observability context."""
    if not isinstance(values, dict):
        return
    current = get_obs_context()
    current.update(values)
    _obs_context.set(current)


def clear_obs_context() -> None:
    _obs_context.set({})


@contextmanager
def obs_scope(**values: Any) -> Iterator[Dict[str, Any]]:
    """Temporarily merge values into the context; restores the previous state on exit."""
    effective = {**get_obs_context(), **{k: v for k, v in values.items() if v is not None}}
    token = _obs_context.set(effective)
    try:
        yield effective
    finally:
        _obs_context.reset(token)


def with_obs_context(
        ctx_or_fn: Optional[Union[Dict[str, Any], Callable[..., Optional[Dict[str, Any]]]]] = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator running a function inside obs_scope.

    ctx_or_fn is either a dict to merge, or a callable receiving the wrapped
    function's (*args, **kwargs) and returning the dict.
    """

    def _decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(fn)
        def _wrap(*args: Any, **kwargs: Any) -> Any:
            if callable(ctx_or_fn):
                values = dict(ctx_or_fn(*args, **kwargs) or {})
            else:
                values = dict(ctx_or_fn or {})
            with obs_scope(**values):
                return fn(*args, **kwargs)

        return _wrap

    return _decorator
