from __future__ import annotations

import contextlib
import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Callable

from pechkin.models import DEFAULT_SMTP_PORT, SMTPConfig

logger = logging.getLogger(__name__)


def build_tls_context(smtp_config: SMTPConfig) -> ssl.SSLContext:
    context = ssl.create_default_context()
    if smtp_config.skip_cert_verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


class SMTPClient:
    """Single-shot SMTP transport.

    Every call opens a fresh connection and closes it afterwards:
        SMTPClient(smtp_config).send("to@example.com", message)

    With ``use_ssl`` the connection is SMTPS from the start; otherwise the
    session is upgraded with STARTTLS whenever the server offers it. The TLS
    context always expects the configured host as the server name.
    """

    def __init__(self, smtp_config: SMTPConfig):
        self.smtp_config = smtp_config

    @property
    def port(self) -> int:
        return self.smtp_config.port or DEFAULT_SMTP_PORT

    # -- public API ------------------------------------------------------------

    def test_connection(self) -> None:
        self._with_server(lambda _: None)

    def send(self, recipient_email: str, message: EmailMessage) -> None:
        def _send(server: smtplib.SMTP) -> None:
            refused = server.send_message(message)
            if recipient_email in refused:
                raise smtplib.SMTPRecipientsRefused(refused)

        self._with_server(_send)

    # -- internals -------------------------------------------------------------

    def _connect(self) -> smtplib.SMTP:
        context = build_tls_context(self.smtp_config)
        logger.debug(
            "connecting to %s:%d (ssl=%s)", self.smtp_config.host, self.port, self.smtp_config.use_ssl
        )

        if self.smtp_config.use_ssl:
            server = smtplib.SMTP_SSL(
                self.smtp_config.host,
                self.port,
                timeout=self.smtp_config.timeout_sec,
                context=context,
            )
        else:
            server = smtplib.SMTP(
                self.smtp_config.host,
                self.port,
                timeout=self.smtp_config.timeout_sec,
            )
            server.ehlo_or_helo_if_needed()
            if server.has_extn("starttls"):
                server.starttls(context=context)
                server.ehlo()

        self._login_if_needed(server)
        return server

    def _with_server(self, callback: Callable[[smtplib.SMTP], None]) -> None:
        server = self._connect()
        try:
            callback(server)
        finally:
            with contextlib.suppress(smtplib.SMTPException, OSError):
                server.quit()

    def _login_if_needed(self, server: smtplib.SMTP) -> None:
        if not self.smtp_config.username:
            return
        server.ehlo_or_helo_if_needed()
        if not server.has_extn("auth"):
            logger.debug("server does not offer AUTH, skipping login")
            return
        server.login(self.smtp_config.username, self.smtp_config.password)
