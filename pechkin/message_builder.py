from __future__ import annotations

import mimetypes
from email.message import EmailMessage
from email.utils import formataddr, formatdate, make_msgid
from pathlib import Path

from pechkin.models import Address, DispatchConfig


def _single_line(value: str) -> str:
    return " ".join(value.splitlines())


def _format_address(address: Address) -> str:
    return formataddr((address.name or "", address.email))


def build_email_message(
    config: DispatchConfig,
    *,
    subject: str,
    body_text: str,
    attachment: str | Path | None = None,
) -> EmailMessage:
    message = EmailMessage()
    message["From"] = _format_address(config.sender)
    message["To"] = _format_address(config.recipient)
    if config.cc:
        message["Cc"] = config.cc
    if config.bcc:
        message["Bcc"] = config.bcc
    if subject:
        message["Subject"] = _single_line(subject)
    message["Date"] = formatdate(localtime=True)
    message["Message-ID"] = make_msgid()

    message.set_content(body_text, subtype="plain", charset="utf-8")

    if attachment is not None:
        path = Path(attachment)
        mime_type, _ = mimetypes.guess_type(path.name)
        if mime_type is None:
            maintype, subtype = "application", "octet-stream"
        else:
            maintype, subtype = mime_type.split("/", 1)

        with path.open("rb") as handle:
            message.add_attachment(
                handle.read(),
                maintype=maintype,
                subtype=subtype,
                filename=_single_line(path.name),
            )

    return message
