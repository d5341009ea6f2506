from __future__ import annotations

import enum
import logging
import smtplib
import time
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Callable

from pechkin.attachment import copy_to_directory, is_attachable, resolve_candidate
from pechkin.message_builder import build_email_message
from pechkin.models import AttachmentCandidate, DispatchConfig, SMTPConfig
from pechkin.name_filter import FilterAction, check_name
from pechkin.smtp_client import SMTPClient
from pechkin.template import render_template

logger = logging.getLogger(__name__)


class DispatchStatus(enum.Enum):
    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class DispatchResult:
    status: DispatchStatus
    reason: str = ""
    attached: str | None = None
    copied: str | None = None

    @property
    def exit_code(self) -> int:
        return 1 if self.status is DispatchStatus.FAILED else 0


class Dispatcher:
    """Runs one notification: filter, delay, side copy, gate, build, send."""

    def __init__(
        self,
        *,
        client_factory: Callable[[SMTPConfig], SMTPClient] = SMTPClient,
        sleep_func=time.sleep,
    ):
        self.client_factory = client_factory
        self.sleep_func = sleep_func

    def run(self, config: DispatchConfig, attach_name: str = "", sleep_sec: int = 0) -> DispatchResult:
        rules = config.attachment
        candidate = resolve_candidate(attach_name, rules.attach_file)
        if attach_name:
            logger.info("file %s", attach_name)
        else:
            logger.warning("Empty argument!")

        decision = check_name(candidate.name, rules.match_name, rules.skip_name)
        if decision.action is FilterAction.FATAL:
            logger.error(decision.reason)
            return DispatchResult(DispatchStatus.FAILED, decision.reason)
        if decision.action is FilterAction.SKIP:
            return DispatchResult(DispatchStatus.SKIPPED, decision.reason)

        if sleep_sec > 0:
            logger.info("sleep for %d seconds", sleep_sec)
            self.sleep_func(sleep_sec)

        copied = self._side_copy(config, candidate)
        attachment = self._gate(config, candidate)
        message, attachment = self._build_message(config, candidate, attachment)

        try:
            self.client_factory(config.smtp).send(config.recipient.email, message)
        except (smtplib.SMTPException, OSError) as exc:
            reason = f"Failed to send message {exc}"
            logger.error(reason)
            return DispatchResult(DispatchStatus.FAILED, reason, attached=attachment, copied=copied)

        logger.info("mail ok %s", config.recipient.email)
        return DispatchResult(DispatchStatus.SENT, attached=attachment, copied=copied)

    def _side_copy(self, config: DispatchConfig, candidate: AttachmentCandidate) -> str | None:
        directory = config.attachment.copy_to_path
        if not directory or not candidate.path:
            return None

        try:
            target = copy_to_directory(candidate.path, directory)
        except OSError as exc:
            logger.info("copy error %s", exc)
            return None
        logger.info("copy %s to %s", candidate.path, directory)
        return str(target)

    def _gate(self, config: DispatchConfig, candidate: AttachmentCandidate) -> str | None:
        if not candidate.path:
            return None
        if not is_attachable(candidate.path, config.attachment.max_file_size):
            logger.info("file %s not attached", candidate.path)
            return None
        return candidate.path

    def _build_message(
        self,
        config: DispatchConfig,
        candidate: AttachmentCandidate,
        attachment: str | None,
    ) -> tuple[EmailMessage, str | None]:
        template = render_template(config.template, candidate.name)
        if attachment is not None:
            try:
                message = build_email_message(
                    config,
                    subject=template.subject,
                    body_text=template.body_text,
                    attachment=attachment,
                )
            except OSError as exc:
                logger.info("file %s not attached: %s", attachment, exc)
            else:
                logger.info("file %s attached", attachment)
                return message, attachment

        message = build_email_message(config, subject=template.subject, body_text=template.body_text)
        return message, None
