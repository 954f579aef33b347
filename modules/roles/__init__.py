"""Fuzzy role resolution, permission gating and toggle engine."""

from modules.roles.directory import RoleDirectory, RoleEntry
from modules.roles.errors import (
    ConfigError,
    NoMatch,
    RemoteError,
    RemoteNotFound,
    RoleGatewayError,
    Unauthorized,
)
from modules.roles.matcher import MatchResult, match, similarity
from modules.roles.permissions import Caller, GateContext, Operation, PermissionGate
from modules.roles.toggle import ToggleEngine, ToggleOutcome, ToggleResult

__all__ = [
    "Caller",
    "ConfigError",
    "GateContext",
    "MatchResult",
    "NoMatch",
    "Operation",
    "PermissionGate",
    "RemoteError",
    "RemoteNotFound",
    "RoleDirectory",
    "RoleEntry",
    "RoleGatewayError",
    "ToggleEngine",
    "ToggleOutcome",
    "ToggleResult",
    "Unauthorized",
    "match",
    "similarity",
]
