from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pechkin.models import (
    DEFAULT_SMTP_HOST,
    Address,
    AttachmentRules,
    DispatchConfig,
    SMTPConfig,
    Template,
)

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "general"
CONFIG_SUFFIX = ".toml"
CONFIG_NAME = "pechkin" + CONFIG_SUFFIX
DEFAULT_SEARCH_PATHS = (Path("/etc") / CONFIG_NAME, Path(CONFIG_NAME))

KNOWN_KEYS = frozenset(
    {
        "mail_server",
        "mail_server_port",
        "mail_server_ssl",
        "mail_server_timeout",
        "auth_user",
        "auth_pass",
        "skip_cert_verify",
        "mail_from",
        "mail_from_name",
        "mail_to",
        "mail_to_name",
        "mail_to_cc",
        "mail_to_bcc",
        "msg_subj",
        "msg_text",
        "log_file",
        "attach_file",
        "max_file_size",
        "copy_to_path",
        "match_name",
        "skip_name",
    }
)


class ConfigError(ValueError):
    """Raised when the configuration cannot be loaded or used."""


def find_config_file(
    config_file: str | Path | None = None,
    search_paths: tuple[Path, ...] = DEFAULT_SEARCH_PATHS,
) -> Path:
    """Locate the configuration file.

    An explicit path may omit the ``.toml`` suffix. Without one, the default
    search paths are tried in order.
    """
    if config_file:
        path = Path(config_file)
        if path.is_file():
            return path
        with_suffix = path.with_name(path.name + CONFIG_SUFFIX)
        if path.suffix != CONFIG_SUFFIX and with_suffix.is_file():
            return with_suffix
        raise ConfigError(f"Config file not found: {path}")

    for candidate in search_paths:
        if candidate.is_file():
            return candidate
    searched = ", ".join(str(candidate) for candidate in search_paths)
    raise ConfigError(f"Config file not found in: {searched}")


def read_sections(path: str | Path) -> dict[str, Any]:
    try:
        with Path(path).open("rb") as handle:
            return tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"Unable to read config file {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Unable to parse config file {path}: {exc}") from exc


def merge_sections(data: dict[str, Any], table: str = DEFAULT_TABLE) -> dict[str, Any]:
    """Return the ``general`` section overlaid with ``table``."""
    merged = dict(_section(data, DEFAULT_TABLE) or {})
    if table == DEFAULT_TABLE:
        return merged

    section = _section(data, table)
    if section is None:
        logger.warning("config section [%s] not found, using [%s]", table, DEFAULT_TABLE)
        return merged
    merged.update(section)
    return merged


def build_config(
    values: dict[str, Any],
    *,
    table: str = DEFAULT_TABLE,
    mail_to: str | None = None,
) -> DispatchConfig:
    unknown = sorted(set(values) - KNOWN_KEYS)
    if unknown:
        logger.debug("ignoring unknown config keys: %s", ", ".join(unknown))

    smtp = SMTPConfig(
        host=_parse_str(values, "mail_server") or DEFAULT_SMTP_HOST,
        port=_parse_int(values, "mail_server_port", default=0, minimum=0, maximum=65535),
        username=_parse_str(values, "auth_user"),
        password=_parse_str(values, "auth_pass"),
        use_ssl=_parse_bool(values, "mail_server_ssl"),
        skip_cert_verify=_parse_bool(values, "skip_cert_verify"),
        timeout_sec=_parse_int(values, "mail_server_timeout", default=30, minimum=1),
    )
    recipient_email = mail_to or _parse_str(values, "mail_to")
    log_file = _parse_str(values, "log_file")

    return DispatchConfig(
        table=table,
        sender=Address(
            email=_parse_str(values, "mail_from"),
            name=_parse_str(values, "mail_from_name") or None,
        ),
        recipient=Address(
            email=recipient_email,
            name=_parse_str(values, "mail_to_name") or None,
        ),
        smtp=smtp,
        cc=_parse_str(values, "mail_to_cc"),
        bcc=_parse_str(values, "mail_to_bcc"),
        template=Template(
            subject=_parse_str(values, "msg_subj", strip=False),
            body_text=_parse_str(values, "msg_text", strip=False),
        ),
        attachment=AttachmentRules(
            attach_file=_parse_str(values, "attach_file"),
            max_file_size=_parse_int(values, "max_file_size", default=0, minimum=0),
            copy_to_path=_parse_str(values, "copy_to_path"),
            match_name=_parse_str(values, "match_name", strip=False),
            skip_name=_parse_str(values, "skip_name", strip=False),
        ),
        log_file=Path(log_file) if log_file else None,
    )


def load_config(
    config_file: str | Path | None = None,
    table: str = DEFAULT_TABLE,
    *,
    mail_to: str | None = None,
) -> DispatchConfig:
    path = find_config_file(config_file)
    values = merge_sections(read_sections(path), table)
    return build_config(values, table=table, mail_to=mail_to)


def _section(data: dict[str, Any], name: str) -> dict[str, Any] | None:
    section = data.get(name)
    if section is None:
        return None
    if not isinstance(section, dict):
        raise ConfigError(f"Config section [{name}] must be a table")
    return section


def _parse_str(values: dict[str, Any], key: str, *, strip: bool = True) -> str:
    value = values.get(key)
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise ConfigError(f"{key} must be a string")
    text = str(value)
    return text.strip() if strip else text


def _parse_int(
    values: dict[str, Any],
    key: str,
    *,
    default: int,
    minimum: int | None = None,
    maximum: int | None = None,
) -> int:
    value = values.get(key, default)
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer")
    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be an integer") from exc

    if minimum is not None and parsed < minimum:
        raise ConfigError(f"{key} must be >= {minimum}")
    if maximum is not None and parsed > maximum:
        raise ConfigError(f"{key} must be <= {maximum}")
    return parsed


def _parse_bool(values: dict[str, Any], key: str) -> bool:
    value = values.get(key, False)
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "y", "on"}:
            return True
        if normalized in {"0", "false", "no", "n", "off", ""}:
            return False
    raise ConfigError(f"{key} must be a boolean")
