"""Pytest configuration for shared test fixtures."""

from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Iterable, Optional


def _ensure_project_root_on_path(source_file: Path) -> None:
    """Add the repository root to ``sys.path`` when running from subpackages."""

    for candidate in [source_file.parent, *source_file.parents]:
        if (candidate / "pyproject.toml").is_file():
            project_root = str(candidate)
            if project_root not in sys.path:
                sys.path.insert(0, project_root)
            break


_ensure_project_root_on_path(Path(__file__).resolve())

import pytest

from modules.roles.errors import RemoteError, RemoteNotFound
from modules.roles.remote import RemoteRole
from shared.config import Settings

TEST_TOKEN = "MTIzNDU2Nzg5.GaBcDe.abcdefghijklmnopqrstuvwxyz0123"
OWNER_ID = 1
MEMBER_ID = 42
GUILD_ID = 7000

DEFAULT_PUBLIC_ROLES = (
    ("Engineer", "Builds and ships things"),
    ("Designer", "Draws the pictures"),
    ("Manager", "Keeps the calendar"),
)

DEFAULT_REMOTE_ROLES = (
    (101, "Engineer"),
    (102, "Designer"),
    (103, "Manager"),
    (900, "Moderator"),
)


class FakeRemoteDirectory:
    """In-memory remote directory that records every call it receives."""

    def __init__(
        self,
        roles: Iterable[tuple[int, str]] = DEFAULT_REMOTE_ROLES,
        members: Optional[dict[int, set[int]]] = None,
    ) -> None:
        self.roles = [RemoteRole(id=role_id, name=name) for role_id, name in roles]
        self.members: dict[int, set[int]] = {
            user: set(held) for user, held in (members or {}).items()
        }
        self.calls: list[tuple[Any, ...]] = []
        self.failures: dict[str, Exception] = {}

    def _maybe_fail(self, action: str) -> None:
        error = self.failures.get(action)
        if error is not None:
            raise error

    async def get_member_roles(self, guild_id: int, user_id: int) -> set[int]:
        self.calls.append(("get_member_roles", guild_id, user_id))
        self._maybe_fail("get_member_roles")
        return set(self.members.get(user_id, set()))

    async def get_roles(self, guild_id: int) -> list[RemoteRole]:
        self.calls.append(("get_roles", guild_id))
        self._maybe_fail("get_roles")
        return list(self.roles)

    async def add_role(self, guild_id: int, user_id: int, role_id: int) -> None:
        self.calls.append(("add_role", guild_id, user_id, role_id))
        self._maybe_fail("add_role")
        self.members.setdefault(user_id, set()).add(role_id)

    async def remove_role(self, guild_id: int, user_id: int, role_id: int) -> None:
        self.calls.append(("remove_role", guild_id, user_id, role_id))
        self._maybe_fail("remove_role")
        self.members.setdefault(user_id, set()).discard(role_id)

    async def rename_role(self, guild_id: int, role_id: int, new_name: str) -> None:
        self.calls.append(("rename_role", guild_id, role_id, new_name))
        self._maybe_fail("rename_role")
        for index, role in enumerate(self.roles):
            if role.id == role_id:
                self.roles[index] = RemoteRole(id=role_id, name=new_name)
                return
        raise RemoteNotFound(role_id)

    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]


class FakeMessage:
    def __init__(self, content: str = "") -> None:
        self.id = 5555
        self.content = content
        self.reactions: list[str] = []

    async def add_reaction(self, emoji: str) -> None:
        self.reactions.append(emoji)


class FakeContext:
    """Stands in for ``commands.Context`` when command callbacks are invoked directly."""

    def __init__(
        self,
        *,
        author_id: int = MEMBER_ID,
        channel_name: str = "roles",
        guild_id: int = GUILD_ID,
        content: str = "",
        command_name: str = "role",
    ) -> None:
        self.author = SimpleNamespace(id=author_id, roles=[], display_name=f"user-{author_id}")
        self.channel = SimpleNamespace(name=channel_name)
        self.guild = SimpleNamespace(id=guild_id, name="Guild", get_member=lambda _uid: None)
        self.message = FakeMessage(content)
        self.command = SimpleNamespace(name=command_name)
        self.sent: list[dict[str, Any]] = []
        self.replies: list[dict[str, Any]] = []

    async def send(self, content: Optional[str] = None, **kwargs: Any) -> None:
        self.sent.append({"content": content, **kwargs})

    async def reply(self, content: Optional[str] = None, **kwargs: Any) -> None:
        self.replies.append({"content": content, **kwargs})


def build_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "token": TEST_TOKEN,
        "public_roles": DEFAULT_PUBLIC_ROLES,
        "owner_ids": frozenset({OWNER_ID}),
        "display_name": "Secretariat",
        "thumbnail_url": "https://example.invalid/crest.png",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def fake_env():
    return SimpleNamespace(
        Remote=FakeRemoteDirectory,
        Message=FakeMessage,
        Context=FakeContext,
        settings=build_settings,
        RemoteError=RemoteError,
        RemoteNotFound=RemoteNotFound,
        RemoteRole=RemoteRole,
        OWNER_ID=OWNER_ID,
        MEMBER_ID=MEMBER_ID,
        GUILD_ID=GUILD_ID,
        TOKEN=TEST_TOKEN,
    )


@pytest.fixture
def settings() -> Settings:
    return build_settings()


@pytest.fixture
def remote() -> FakeRemoteDirectory:
    return FakeRemoteDirectory()
