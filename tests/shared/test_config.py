import textwrap

import pytest

from modules.roles.errors import ConfigError
from shared.config import DEFAULT_PREFIX, load_settings, parse_settings

TOKEN = "MTIzNDU2Nzg5.GaBcDe.abcdefghijklmnopqrstuvwxyz0123"


def _write(tmp_path, body: str):
    path = tmp_path / "config.toml"
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return path


def test_load_settings_reads_full_file(tmp_path):
    path = _write(
        tmp_path,
        f"""
        token = "{TOKEN}"
        prefix = "!"
        display_name = "Desk"
        thumbnail_url = "https://example.invalid/t.png"
        home_channel = "#roles"
        owner_ids = ["123", 456]
        health_port = 8080

        [public_roles]
        Engineer = "Builds things"
        Designer = "Draws things"
        "Data Science" = "Counts things"
        """,
    )

    settings = load_settings(path, environ={})

    assert settings.token == TOKEN
    assert settings.prefix == "!"
    assert settings.display_name == "Desk"
    assert settings.home_channel == "roles"
    assert settings.owner_ids == frozenset({123, 456})
    assert settings.health_port == 8080
    assert [key for key, _ in settings.public_roles] == ["Engineer", "Designer", "Data Science"]


def test_array_form_of_public_roles(tmp_path):
    path = _write(
        tmp_path,
        f"""
        token = "{TOKEN}"

        [[public_roles]]
        name = "Engineer"
        description = "Builds"

        [[public_roles]]
        name = "Designer"
        """,
    )

    settings = load_settings(path, environ={})

    assert settings.public_roles == (("Engineer", "Builds"), ("Designer", ""))
    assert settings.prefix == DEFAULT_PREFIX
    assert settings.home_channel is None
    assert settings.health_port is None


def test_environment_overrides(tmp_path):
    path = _write(
        tmp_path,
        """
        token = "x.y.z"
        log_level = "info"
        [public_roles]
        Engineer = ""
        """,
    )
    env = {"DISCORD_TOKEN": TOKEN, "LOG_LEVEL": "debug", "PORT": "9000", "ENV_NAME": "prod"}

    settings = load_settings(path, environ=env)

    assert settings.token == TOKEN
    assert settings.log_level == "DEBUG"
    assert settings.health_port == 9000
    assert settings.env_name == "prod"


def test_config_path_from_environment(tmp_path):
    path = _write(tmp_path, f'token = "{TOKEN}"\n[public_roles]\nEngineer = ""\n')

    settings = load_settings(environ={"SECRETARIAT_CONFIG": str(path)})

    assert settings.public_roles == (("Engineer", ""),)


def test_missing_file_is_config_error(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_settings(tmp_path / "absent.toml", environ={})


def test_duplicate_keys_in_toml_are_config_error(tmp_path):
    path = _write(tmp_path, f'token = "{TOKEN}"\n[public_roles]\nEngineer = "a"\nEngineer = "b"\n')

    with pytest.raises(ConfigError, match="invalid"):
        load_settings(path, environ={})


@pytest.mark.parametrize(
    "raw,message",
    [
        ({"public_roles": {"Engineer": ""}}, "missing credential"),
        ({"token": "not-a-token", "public_roles": {"Engineer": ""}}, "bot token"),
        ({"token": TOKEN}, "public_roles"),
        ({"token": TOKEN, "public_roles": {"  ": ""}}, "non-empty"),
        ({"token": TOKEN, "public_roles": [{"name": "A"}, {"name": " A "}]}, "duplicate"),
        ({"token": TOKEN, "public_roles": {"A": 3}}, "description"),
        ({"token": TOKEN, "public_roles": {"A": ""}, "owner_ids": ["abc"]}, "owner id"),
        ({"token": TOKEN, "public_roles": {"A": ""}, "owner_ids": "1"}, "owner_ids"),
        ({"token": TOKEN, "public_roles": {"A": ""}, "health_port": 70000}, "out of range"),
        ({"token": TOKEN, "public_roles": {"A": ""}, "prefix": "a b"}, "whitespace"),
        ({"token": TOKEN, "public_roles": {"A": ""}, "log_level": "loud"}, "log level"),
    ],
)
def test_invalid_configuration_raises(raw, message):
    with pytest.raises(ConfigError, match=message):
        parse_settings(raw, environ={})


def test_snapshot_redacts_token():
    settings = parse_settings({"token": TOKEN, "public_roles": {"Engineer": ""}}, environ={})

    snapshot = settings.snapshot()

    assert TOKEN not in str(snapshot)
    assert snapshot["token"].startswith("***")
    assert snapshot["public_roles"] == ["Engineer"]


def test_snapshot_masks_secrets_in_other_fields():
    webhook = "https://discord.com/api/webhooks/123456/secret-part"
    settings = parse_settings(
        {
            "token": TOKEN,
            "public_roles": {"Engineer": ""},
            "thumbnail_url": webhook,
            "env_name": "prod",
        },
        environ={},
    )

    snapshot = settings.snapshot()

    assert webhook not in str(snapshot)
    assert snapshot["thumbnail_url"].startswith("***")
    assert snapshot["env_name"] == "prod"
    assert snapshot["prefix"] == ">"
