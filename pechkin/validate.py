from __future__ import annotations

import ipaddress
import re

from pechkin.config import ConfigError
from pechkin.models import DispatchConfig

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
HOSTNAME_LABEL_RE = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")


class ConfigValidationError(ConfigError):
    """Raised with every failing field when the configuration is invalid."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("Failed to validate: " + "; ".join(self.errors))


def looks_like_email(value: str) -> bool:
    return bool(EMAIL_RE.match(value))


def looks_like_host(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
        return True
    except ValueError:
        pass

    hostname = value[:-1] if value.endswith(".") else value
    if not hostname or len(hostname) > 253:
        return False
    return all(HOSTNAME_LABEL_RE.match(label) for label in hostname.split("."))


def collect_errors(config: DispatchConfig) -> list[str]:
    errors: list[str] = []

    if config.smtp.host and not looks_like_host(config.smtp.host):
        errors.append(f"mail_server: {config.smtp.host} does not validate as host")

    required = (("mail_from", config.sender.email), ("mail_to", config.recipient.email))
    for field_name, value in required:
        if not value:
            errors.append(f"{field_name}: non zero value required")
        elif not looks_like_email(value):
            errors.append(f"{field_name}: {value} does not validate as email")

    optional = (("mail_to_cc", config.cc), ("mail_to_bcc", config.bcc))
    for field_name, value in optional:
        if value and not looks_like_email(value):
            errors.append(f"{field_name}: {value} does not validate as email")

    return errors


def validate_config(config: DispatchConfig) -> DispatchConfig:
    errors = collect_errors(config)
    if errors:
        raise ConfigValidationError(errors)
    return config
