from .base import (
    AuthorizationFactory,
    AuthorizationProvider,
    EmptyAuthorizationFactory,
    EmptyAuthorizationProvider,
    EMPTY_AUTHORIZATION_FACTORY,
)
from .context import set_current_user, get_current_user
from .json_file import JsonFileAuthorizationFactory, JsonFileAuthorizationProvider
from .registry import (
    AuthorizationRegistry,
    get_authorization_registry,
    register_authorization_factory,
    get_authorization_factory,
)

__all__ = [
    "AuthorizationFactory",
    "AuthorizationProvider",
    "EmptyAuthorizationFactory",
    "EmptyAuthorizationProvider",
    "EMPTY_AUTHORIZATION_FACTORY",
    "set_current_user",
    "get_current_user",
    "JsonFileAuthorizationFactory",
    "JsonFileAuthorizationProvider",
    "AuthorizationRegistry",
    "get_authorization_registry",
    "register_authorization_factory",
    "get_authorization_factory",
]
