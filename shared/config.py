"""Runtime configuration for the role gateway.

Settings are read once at startup from a TOML file and a handful of
environment overrides, validated, and frozen into a :class:`Settings`
instance that is passed explicitly to every component.
"""

from __future__ import annotations

import logging
import os
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from modules.roles.errors import ConfigError
from shared.redaction import mask_secret, sanitize_data

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_DISPLAY_NAME",
    "DEFAULT_PREFIX",
    "Settings",
    "load_settings",
    "parse_settings",
    "redact_token",
]

log = logging.getLogger("secretariat.config")

DEFAULT_CONFIG_PATH = "config.toml"
DEFAULT_PREFIX = ">"
DEFAULT_DISPLAY_NAME = "Secretariat"

_MISSING_VALUE = "—"
_INT_RE = re.compile(r"^\s*(\d+)\s*$")
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True, slots=True)
class Settings:
    token: str
    public_roles: tuple[tuple[str, str], ...]
    prefix: str = DEFAULT_PREFIX
    display_name: str = DEFAULT_DISPLAY_NAME
    thumbnail_url: Optional[str] = None
    home_channel: Optional[str] = None
    owner_ids: frozenset[int] = field(default_factory=frozenset)
    log_level: str = "INFO"
    env_name: str = "dev"
    health_port: Optional[int] = None

    def snapshot(self) -> dict[str, object]:
        """Return a log-safe view of the settings."""

        snapshot = {
            "token": redact_token(self.token),
            "prefix": self.prefix,
            "display_name": self.display_name,
            "thumbnail_url": self.thumbnail_url or _MISSING_VALUE,
            "home_channel": self.home_channel or _MISSING_VALUE,
            "owner_ids": sorted(self.owner_ids),
            "public_roles": [key for key, _ in self.public_roles],
            "log_level": self.log_level,
            "env_name": self.env_name,
            "health_port": self.health_port if self.health_port is not None else _MISSING_VALUE,
        }
        return sanitize_data(snapshot)


def redact_token(token: str | None) -> str:
    if not token:
        return _MISSING_VALUE
    return mask_secret(token)


def _looks_like_token(token: str) -> bool:
    parts = token.split(".")
    return len(parts) == 3 and all(part.strip() for part in parts)


def _optional_str(raw: Mapping[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"'{key}' must be a string")
    text = value.strip()
    return text or None


def _coerce_port(value: Any, source: str) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ConfigError(f"{source} must be an integer port")
    if isinstance(value, int):
        port = value
    else:
        match = _INT_RE.match(str(value))
        if match is None:
            raise ConfigError(f"{source} must be an integer port, got {value!r}")
        port = int(match.group(1))
    if not 0 < port < 65536:
        raise ConfigError(f"{source} out of range: {port}")
    return port


def _parse_owner_ids(value: Any) -> frozenset[int]:
    if value is None:
        return frozenset()
    if not isinstance(value, (list, tuple)):
        raise ConfigError("'owner_ids' must be a list of user ids")
    ids: set[int] = set()
    for item in value:
        if isinstance(item, bool):
            raise ConfigError(f"invalid owner id: {item!r}")
        if isinstance(item, int):
            ids.add(item)
            continue
        match = _INT_RE.match(str(item))
        if match is None:
            raise ConfigError(f"invalid owner id: {item!r}")
        ids.add(int(match.group(1)))
    return frozenset(ids)


def _parse_public_roles(value: Any) -> tuple[tuple[str, str], ...]:
    """Accept either a ``[public_roles]`` table or a ``[[public_roles]]`` array."""

    if value is None:
        raise ConfigError("'public_roles' is required")

    pairs: list[tuple[Any, Any]]
    if isinstance(value, Mapping):
        pairs = list(value.items())
    elif isinstance(value, list):
        pairs = []
        for index, item in enumerate(value):
            if not isinstance(item, Mapping) or "name" not in item:
                raise ConfigError(f"public_roles[{index}] needs a 'name'")
            pairs.append((item["name"], item.get("description", "")))
    else:
        raise ConfigError("'public_roles' must be a table or an array of tables")

    seen: set[str] = set()
    roles: list[tuple[str, str]] = []
    for raw_key, raw_description in pairs:
        if not isinstance(raw_key, str) or not raw_key.strip():
            raise ConfigError(f"public role names must be non-empty strings, got {raw_key!r}")
        key = raw_key.strip()
        if key in seen:
            raise ConfigError(f"duplicate public role: {key!r}")
        if raw_description is None:
            raw_description = ""
        if not isinstance(raw_description, str):
            raise ConfigError(f"description for {key!r} must be a string")
        seen.add(key)
        roles.append((key, raw_description.strip()))
    return tuple(roles)


def parse_settings(
    raw: Mapping[str, Any],
    *,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Validate a decoded config mapping and apply environment overrides."""

    env = os.environ if environ is None else environ

    token = (env.get("DISCORD_TOKEN") or "").strip() or _optional_str(raw, "token")
    if not token:
        raise ConfigError("missing credential: set 'token' or DISCORD_TOKEN")
    if not _looks_like_token(token):
        raise ConfigError("credential does not look like a bot token")

    prefix = _optional_str(raw, "prefix") or DEFAULT_PREFIX
    if any(ch.isspace() for ch in prefix):
        raise ConfigError("'prefix' must not contain whitespace")

    home_channel = _optional_str(raw, "home_channel")
    if home_channel:
        home_channel = home_channel.lstrip("#") or None

    log_level = (env.get("LOG_LEVEL") or _optional_str(raw, "log_level") or "INFO").upper()
    if log_level not in _LOG_LEVELS:
        raise ConfigError(f"unknown log level: {log_level}")

    if env.get("PORT"):
        health_port = _coerce_port(env.get("PORT"), "PORT")
    else:
        health_port = _coerce_port(raw.get("health_port"), "'health_port'")

    return Settings(
        token=token,
        public_roles=_parse_public_roles(raw.get("public_roles")),
        prefix=prefix,
        display_name=_optional_str(raw, "display_name") or DEFAULT_DISPLAY_NAME,
        thumbnail_url=_optional_str(raw, "thumbnail_url"),
        home_channel=home_channel,
        owner_ids=_parse_owner_ids(raw.get("owner_ids")),
        log_level=log_level,
        env_name=(env.get("ENV_NAME") or _optional_str(raw, "env_name") or "dev"),
        health_port=health_port,
    )


def load_settings(
    path: str | os.PathLike[str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Read and validate the TOML config file.

    The path defaults to ``$SECRETARIAT_CONFIG`` and then ``config.toml`` in
    the working directory. Every failure surfaces as :class:`ConfigError`.
    """

    env = os.environ if environ is None else environ
    resolved = Path(path or env.get("SECRETARIAT_CONFIG") or DEFAULT_CONFIG_PATH)
    try:
        with resolved.open("rb") as handle:
            raw = tomllib.load(handle)
    except FileNotFoundError as exc:
        raise ConfigError(f"config file not found: {resolved}") from exc
    except OSError as exc:
        raise ConfigError(f"config file unreadable: {resolved}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"config file invalid: {resolved}: {exc}") from exc

    settings = parse_settings(raw, environ=env)
    log.debug("config loaded", extra={"path": str(resolved), "roles": len(settings.public_roles)})
    return settings
