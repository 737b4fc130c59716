"""
Authorization strategy interfaces and the no-op default.
"""

from abc import ABC, abstractmethod
from typing import List, Optional


class AuthorizationProvider(ABC):
    """Answers which authorizations a user holds."""

    @abstractmethod
    def get_authorizations(self, user: Optional[str] = None) -> List[str]:
        ...


class AuthorizationFactory(ABC):
    """Named strategy selected by the ``authorizationProvider`` parameter.

    The registry matches on ``name``; str(factory) returns it as well.
    """

    name: str = ""

    @abstractmethod
    def create_authorization_provider(self, url: Optional[str]) -> AuthorizationProvider:
        ...

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


class EmptyAuthorizationProvider(AuthorizationProvider):
    def get_authorizations(self, user: Optional[str] = None) -> List[str]:
        return []


class EmptyAuthorizationFactory(AuthorizationFactory):
    """Default strategy: grants nothing and never fails."""

    name = "empty"

    def create_authorization_provider(self, url: Optional[str]) -> AuthorizationProvider:
        return EmptyAuthorizationProvider()


EMPTY_AUTHORIZATION_FACTORY = EmptyAuthorizationFactory()
