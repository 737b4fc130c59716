"""
Authorization factory registry.

Factories come from the built-ins, the ``rasterconfig.authorization_factories``
entry point group and explicit register_authorization_factory() calls. A name
that matches nothing selects the no-op factory; resolution never fails.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from rasterconfig.auth.base import EMPTY_AUTHORIZATION_FACTORY, AuthorizationFactory
from rasterconfig.plugins import PluginRegistry

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "rasterconfig.authorization_factories"


def _builtin_factories() -> List[AuthorizationFactory]:
    from rasterconfig.auth.json_file import JsonFileAuthorizationFactory
    return [JsonFileAuthorizationFactory()]


class AuthorizationRegistry(PluginRegistry[AuthorizationFactory]):
    def __init__(self, group: str = ENTRY_POINT_GROUP, include_builtins: bool = True):
        super().__init__(
            group,
            AuthorizationFactory,
            key=str,
            builtins=_builtin_factories if include_builtins else None,
        )

    def factories(self) -> Tuple[AuthorizationFactory, ...]:
        return self.plugins()

    def resolve(self, name: Optional[str]) -> AuthorizationFactory:
        if name:
            for factory in self.factories():
                if str(factory) == name:
                    return factory
            logger.debug(f"No authorization factory named '{name}'; using the empty factory")
        return EMPTY_AUTHORIZATION_FACTORY


_default_registry = AuthorizationRegistry()


def get_authorization_registry() -> AuthorizationRegistry:
    return _default_registry


def register_authorization_factory(factory: AuthorizationFactory) -> None:
    _default_registry.register(factory)


def get_authorization_factory(name: Optional[str]) -> AuthorizationFactory:
    return _default_registry.resolve(name)
