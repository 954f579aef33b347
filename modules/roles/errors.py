"""Error taxonomy for role resolution, toggling and administration."""

from __future__ import annotations

__all__ = [
    "ConfigError",
    "NoMatch",
    "RemoteError",
    "RemoteNotFound",
    "RoleGatewayError",
    "Unauthorized",
]


class RoleGatewayError(Exception):
    """Base class for every error raised by the role gateway."""


class ConfigError(RoleGatewayError):
    """Configuration is missing or invalid; the process must not start."""


class NoMatch(RoleGatewayError):
    """The query shares no trigrams with any public role."""

    def __init__(self, query: str) -> None:
        super().__init__(f"no public role matches {query!r}")
        self.query = query


class Unauthorized(RoleGatewayError):
    """The permission gate rejected the operation."""

    def __init__(self, operation: str, *, caller_id: int | None = None, reason: str = "") -> None:
        detail = f" ({reason})" if reason else ""
        super().__init__(f"{operation} not permitted for caller {caller_id}{detail}")
        self.operation = operation
        self.caller_id = caller_id
        self.reason = reason


class RemoteNotFound(RoleGatewayError):
    """A role, member or guild is absent from the remote directory.

    ``kind`` is ``"role"``, ``"member"`` or ``"guild"``; ``role`` holds the
    identifier that was looked up.
    """

    def __init__(self, role: str | int, *, kind: str = "role") -> None:
        super().__init__(f"{kind} {role!r} not found in the remote directory")
        self.role = role
        self.kind = kind


class RemoteError(RoleGatewayError):
    """A remote directory call failed; ``__cause__`` carries the transport error."""

    def __init__(self, action: str, detail: str = "") -> None:
        message = f"remote {action} failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.action = action
        self.detail = detail
