import pytest

from modules.roles.directory import RoleDirectory, RoleEntry
from modules.roles.errors import ConfigError


def test_directory_preserves_configuration_order():
    directory = RoleDirectory([("Zeta", "last letter"), ("Alpha", ""), ("Mid", "middle")])

    assert directory.keys() == ("Zeta", "Alpha", "Mid")
    assert [entry.key for entry in directory] == ["Zeta", "Alpha", "Mid"]
    assert len(directory) == 3


def test_directory_rejects_duplicate_keys():
    with pytest.raises(ConfigError):
        RoleDirectory([("Engineer", "a"), ("Engineer", "b")])


def test_directory_rejects_blank_keys():
    with pytest.raises(ConfigError):
        RoleDirectory([("  ", "blank")])


def test_membership_is_exact(settings):
    directory = RoleDirectory.from_settings(settings)

    assert "Engineer" in directory
    assert "engineer" not in directory
    assert directory.get("Nope") is None


def test_remote_id_binds_once():
    entry = RoleEntry(key="Engineer")

    assert entry.bind_remote_id(101) == 101
    assert entry.bind_remote_id(555) == 101
    assert entry.remote_id == 101
