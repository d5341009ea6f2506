from pathlib import Path

import pytest

from pechkin.config import ConfigError, build_config, find_config_file, load_config, merge_sections

SAMPLE_CONFIG = """
[general]
mail_server = "smtp.example.com"
mail_server_port = 587
auth_user = "robot"
auth_pass = "secret"
mail_from = "robot@example.com"
mail_from_name = "Pechkin"
mail_to = "ops@example.com"
msg_subj = "New file: %s"
max_file_size = 1048576

[scans]
mail_to = "scans@example.com"
attach_file = "/srv/scans/%s"
match_name = '\\.pdf$'
mail_server_ssl = true
"""


def _write_config(tmp_path: Path, text: str = SAMPLE_CONFIG, name: str = "pechkin.toml") -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_general_section_is_loaded_by_default(tmp_path: Path) -> None:
    config = load_config(_write_config(tmp_path))

    assert config.table == "general"
    assert config.smtp.host == "smtp.example.com"
    assert config.smtp.port == 587
    assert config.smtp.use_ssl is False
    assert config.sender.email == "robot@example.com"
    assert config.sender.name == "Pechkin"
    assert config.recipient.email == "ops@example.com"
    assert config.recipient.name is None
    assert config.template.subject == "New file: %s"
    assert config.attachment.max_file_size == 1048576
    assert config.attachment.attach_file == ""
    assert config.log_file is None


def test_named_table_overlays_general(tmp_path: Path) -> None:
    config = load_config(_write_config(tmp_path), "scans")

    assert config.table == "scans"
    assert config.recipient.email == "scans@example.com"
    assert config.sender.email == "robot@example.com"
    assert config.attachment.attach_file == "/srv/scans/%s"
    assert config.attachment.match_name == r"\.pdf$"
    assert config.smtp.use_ssl is True
    assert config.smtp.port == 587


def test_missing_table_falls_back_to_general(tmp_path: Path) -> None:
    config = load_config(_write_config(tmp_path), "nope")

    assert config.recipient.email == "ops@example.com"


def test_mailto_override_wins(tmp_path: Path) -> None:
    config = load_config(_write_config(tmp_path), "scans", mail_to="oncall@example.com")

    assert config.recipient.email == "oncall@example.com"


def test_config_path_may_omit_extension(tmp_path: Path) -> None:
    path = _write_config(tmp_path)

    assert find_config_file(tmp_path / "pechkin") == path


def test_default_search_paths_are_tried_in_order(tmp_path: Path) -> None:
    first = tmp_path / "etc" / "pechkin.toml"
    second = _write_config(tmp_path)

    assert find_config_file(None, (first, second)) == second


def test_missing_config_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "absent.toml")


def test_malformed_config_raises(tmp_path: Path) -> None:
    path = _write_config(tmp_path, "[general\nmail_to = ")

    with pytest.raises(ConfigError, match="Unable to parse"):
        load_config(path)


def test_section_must_be_a_table() -> None:
    with pytest.raises(ConfigError, match="must be a table"):
        merge_sections({"general": {}, "scans": "oops"}, "scans")


@pytest.mark.parametrize(
    ("values", "message"),
    [
        ({"mail_server_port": "abc"}, "mail_server_port must be an integer"),
        ({"mail_server_port": 70000}, "mail_server_port must be <= 65535"),
        ({"max_file_size": -1}, "max_file_size must be >= 0"),
        ({"mail_server_ssl": "maybe"}, "mail_server_ssl must be a boolean"),
        ({"mail_from": ["a@example.com"]}, "mail_from must be a string"),
    ],
)
def test_field_type_errors_are_reported(values: dict, message: str) -> None:
    with pytest.raises(ConfigError, match=message):
        build_config(values)


def test_defaults_for_empty_config() -> None:
    config = build_config({})

    assert config.smtp.host == "localhost"
    assert config.smtp.port == 0
    assert config.smtp.timeout_sec == 30
    assert config.attachment.max_file_size == 0
    assert config.cc == ""


def test_password_is_hidden_from_repr() -> None:
    config = build_config({"auth_user": "robot", "auth_pass": "hunter2"})

    assert config.smtp.password == "hunter2"
    assert "hunter2" not in repr(config)
