"""Entrega dos e-mails de reengajamento via SMTP."""

from __future__ import annotations

import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import List, Optional

from core.config import settings
from core.reengagement.types import ActivityConfig, EmailContent, RecipientPolicy
from core.telemetry import logger
from database.reengagement.completion_repo import CompletionRepository
from database.repos import UserRepository

from .renderer import TemplateContext, render_template


@dataclass(frozen=True)
class OutgoingEmail:
    to: str
    subject: str
    body: str
    audience: str  # user, manager, thirdparty


class SmtpTransport:
    """Cliente SMTP configurado a partir de ``settings``."""

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        *,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_ssl: Optional[bool] = None,
        timeout: Optional[float] = None,
        sender: Optional[str] = None,
    ):
        self.host = host or settings.SMTP_HOST
        self.port = port or settings.SMTP_PORT
        self.username = username if username is not None else settings.SMTP_USERNAME
        self.password = password if password is not None else settings.SMTP_PASSWORD
        self.use_ssl = settings.SMTP_USE_SSL if use_ssl is None else use_ssl
        self.timeout = timeout or settings.SMTP_TIMEOUT
        self.sender = sender or settings.MAIL_FROM

    def send(self, emails: List[OutgoingEmail]) -> None:
        if not emails:
            return
        smtp_cls = smtplib.SMTP_SSL if self.use_ssl else smtplib.SMTP
        with smtp_cls(self.host, self.port, timeout=self.timeout) as client:
            if not self.use_ssl:
                client.starttls()
            if self.username:
                client.login(self.username, self.password)
            for email in emails:
                message = EmailMessage()
                message["From"] = self.sender
                message["To"] = email.to
                message["Subject"] = email.subject
                message.set_content(email.body)
                client.send_message(message)


def _compose(
    audience: str, address: str, content: EmailContent, context: TemplateContext
) -> OutgoingEmail:
    return OutgoingEmail(
        to=address,
        subject=render_template(content.subject, context),
        body=render_template(content.body, context),
        audience=audience,
    )


class ReengagementMailer:
    """Resolve destinatários e despacha as mensagens de uma atividade."""

    def __init__(self, transport: Optional[SmtpTransport] = None):
        self.transport = transport or SmtpTransport()

    def is_suppressed(self, activity: ActivityConfig, user_id: int) -> bool:
        if not activity.suppress_target_module_id:
            return False
        target = CompletionRepository.get_sync(
            activity.suppress_target_module_id, user_id
        )
        return bool(target and target.is_complete)

    def build_messages(self, activity: ActivityConfig, user) -> List[OutgoingEmail]:
        context = TemplateContext.build(activity, user)
        emails: List[OutgoingEmail] = []

        if activity.recipient_policy in (RecipientPolicy.USER, RecipientPolicy.BOTH):
            if user.email:
                emails.append(_compose("user", user.email, activity.user_email, context))

        if activity.recipient_policy in (
            RecipientPolicy.MANAGER,
            RecipientPolicy.BOTH,
        ):
            for manager in UserRepository.list_managers_sync(user.id):
                if manager.email:
                    emails.append(
                        _compose("manager", manager.email, activity.manager_email, context)
                    )

        for address in activity.third_party_addresses:
            emails.append(
                _compose("thirdparty", address, activity.third_party_email, context)
            )
        return emails

    def deliver(self, activity: ActivityConfig, user_id: int) -> int:
        """Envia os e-mails e retorna quantos foram despachados."""

        user = UserRepository.get_user_sync(user_id)
        if not user:
            logger.warning(
                "Reengagement email skipped: user not found",
                extra={"activity_id": activity.id, "user_id": user_id},
            )
            return 0

        if self.is_suppressed(activity, user_id):
            logger.info(
                "Reengagement email suppressed: target activity complete",
                extra={
                    "activity_id": activity.id,
                    "user_id": user_id,
                    "target": activity.suppress_target_module_id,
                },
            )
            return 0

        emails = self.build_messages(activity, user)
        self.transport.send(emails)
        logger.info(
            "Reengagement emails delivered",
            extra={
                "activity_id": activity.id,
                "user_id": user_id,
                "recipients": len(emails),
            },
        )
        return len(emails)


__all__ = ["OutgoingEmail", "ReengagementMailer", "SmtpTransport"]
