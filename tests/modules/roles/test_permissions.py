import pytest

from modules.roles.directory import RoleDirectory
from modules.roles.permissions import Caller, GateContext, Operation, PermissionGate


@pytest.fixture
def directory(settings):
    return RoleDirectory.from_settings(settings)


def test_toggle_allowed_for_any_caller_on_whitelisted_role(directory):
    gate = PermissionGate(directory, owner_ids={1})

    assert gate.authorize(Caller(id=42), Operation.TOGGLE, GateContext(role_key="Engineer"))


@pytest.mark.parametrize("caller", [Caller(id=42), Caller(id=1, is_owner=True)])
def test_toggle_rejected_for_unlisted_role_regardless_of_caller(directory, caller):
    gate = PermissionGate(directory, owner_ids={1})

    assert not gate.authorize(caller, Operation.TOGGLE, GateContext(role_key="Moderator"))
    assert not gate.authorize(caller, Operation.TOGGLE, GateContext(role_key=None))


@pytest.mark.parametrize("operation", [Operation.LIST_REMOTE, Operation.RENAME, Operation.RECONCILE])
def test_admin_operations_require_configured_owner(directory, operation):
    gate = PermissionGate(directory, owner_ids={1})

    assert gate.authorize(gate.caller(1), operation, GateContext())
    assert not gate.authorize(gate.caller(42), operation, GateContext())


def test_owner_flag_comes_from_configuration(directory):
    gate = PermissionGate(directory, owner_ids=[1])

    assert gate.caller(1).is_owner
    assert not gate.caller(2).is_owner
    assert gate.caller(2, [10, 11]).roles == frozenset({10, 11})


def test_home_channel_rejects_every_operation_elsewhere(directory):
    gate = PermissionGate(directory, owner_ids={1}, home_channel="roles")
    owner = gate.caller(1)

    for operation in Operation:
        context = GateContext(channel_name="general", role_key="Engineer")
        assert not gate.authorize(owner, operation, context)

    assert gate.authorize(owner, Operation.TOGGLE, GateContext(channel_name="roles", role_key="Engineer"))


def test_no_home_channel_accepts_any_channel(directory):
    gate = PermissionGate(directory)

    assert gate.channel_allowed("anywhere")
    assert gate.channel_allowed(None)


def test_from_settings_uses_configured_values(fake_env):
    settings = fake_env.settings(home_channel="roles", owner_ids=frozenset({99}))
    gate = PermissionGate.from_settings(settings, RoleDirectory.from_settings(settings))

    assert gate.home_channel == "roles"
    assert gate.caller(99).is_owner


def test_public_listing_is_open_to_everyone_in_the_home_channel(directory):
    gate = PermissionGate(directory, owner_ids={1}, home_channel="roles")

    assert not Operation.LIST_PUBLIC.admin
    assert gate.authorize(gate.caller(42), Operation.LIST_PUBLIC, GateContext(channel_name="roles"))
    assert not gate.authorize(gate.caller(42), Operation.LIST_PUBLIC, GateContext(channel_name="general"))
