"""
JSON file authorization strategy ("jsonFile").

The authorization URL points at a document shaped like::

    {"authorizationSet": {"alice": ["public", "internal"], "bob": ["public"]}}

It may be a filesystem path, a file:// URL or an http(s) URL. The document is
read once per provider on first lookup. Read failures are logged and grant
nothing.
"""

import json
import logging
import threading
from typing import Dict, List, Optional
from urllib.parse import unquote, urlparse

import requests

from rasterconfig.auth.base import AuthorizationFactory, AuthorizationProvider
from rasterconfig.auth.context import get_current_user
from rasterconfig.settings import get_settings

logger = logging.getLogger(__name__)


def _read_text(url: str, timeout: float) -> str:
    parsed = urlparse(url)
    if parsed.scheme in ("http", "https"):
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        return response.text
    path = unquote(parsed.path) if parsed.scheme == "file" else url
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


class JsonFileAuthorizationProvider(AuthorizationProvider):
    def __init__(self, url: Optional[str]):
        self.url = url
        self._lock = threading.Lock()
        self._authorization_set: Optional[Dict[str, List[str]]] = None

    def _load(self) -> Dict[str, List[str]]:
        if self._authorization_set is not None:
            return self._authorization_set
        with self._lock:
            if self._authorization_set is None:
                self._authorization_set = self._read()
        return self._authorization_set

    def _read(self) -> Dict[str, List[str]]:
        if not self.url:
            logger.warning("jsonFile authorization selected without an authorization URL")
            return {}
        try:
            data = json.loads(_read_text(self.url, get_settings().document_timeout))
        except (OSError, ValueError, requests.RequestException) as e:
            logger.warning(f"Could not read authorization file {self.url}: {e}")
            return {}
        auth_set = data.get("authorizationSet") if isinstance(data, dict) else None
        if not isinstance(auth_set, dict):
            logger.warning(f"Authorization file {self.url} has no 'authorizationSet' object")
            return {}
        return {str(user): [str(a) for a in (auths or [])] for user, auths in auth_set.items()}

    def get_authorizations(self, user: Optional[str] = None) -> List[str]:
        user = user if user is not None else get_current_user()
        if user is None:
            return []
        return list(self._load().get(user, []))


class JsonFileAuthorizationFactory(AuthorizationFactory):
    name = "jsonFile"

    def create_authorization_provider(self, url: Optional[str]) -> AuthorizationProvider:
        return JsonFileAuthorizationProvider(url)
