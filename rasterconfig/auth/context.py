"""
Current user for authorization lookups.

Set the user at the entry point (request handler, job runner) with
set_current_user(); authorization providers fall back to it when called
without an explicit user.

Example usage:
    from rasterconfig.auth.context import set_current_user
    set_current_user("alice")
    config.create_authorization_provider().get_authorizations()
"""
from contextvars import ContextVar

current_user = ContextVar("rasterconfig_current_user", default=None)


def set_current_user(user):
    """Set the current user for the active context (request, thread, or task)."""
    current_user.set(user)


def get_current_user():
    """Get the current user for the active context (request, thread, or task)."""
    return current_user.get()
