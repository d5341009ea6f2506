from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_SMTP_PORT = 25
DEFAULT_SMTP_HOST = "localhost"


@dataclass(frozen=True)
class Address:
    email: str
    name: str | None = None


@dataclass(frozen=True)
class SMTPConfig:
    host: str = DEFAULT_SMTP_HOST
    port: int = DEFAULT_SMTP_PORT
    username: str = ""
    password: str = field(default="", repr=False)
    use_ssl: bool = False
    skip_cert_verify: bool = False
    timeout_sec: int = 30


@dataclass(frozen=True)
class Template:
    subject: str = ""
    body_text: str = ""


@dataclass(frozen=True)
class AttachmentRules:
    attach_file: str = ""
    max_file_size: int = 0
    copy_to_path: str = ""
    match_name: str = ""
    skip_name: str = ""


@dataclass(frozen=True)
class DispatchConfig:
    table: str
    sender: Address
    recipient: Address
    smtp: SMTPConfig = SMTPConfig()
    cc: str = ""
    bcc: str = ""
    template: Template = Template()
    attachment: AttachmentRules = AttachmentRules()
    log_file: Path | None = None


@dataclass(frozen=True)
class AttachmentCandidate:
    name: str
    path: str
