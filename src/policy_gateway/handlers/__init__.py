"""Handler layer for HTTP endpoints.

This layer contains the HTTP request/response handlers.
Handlers depend on services (business logic), not directly on repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access / Upstream)
"""

from .policy_handler import PolicyHandler, result_to_response

__all__ = [
    "PolicyHandler",
    "result_to_response",
]
