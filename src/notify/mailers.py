from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr

import requests

from src.domain.errors import PermanentDeliveryError, TransientDeliveryError
from src.ports.mailer import MailerPort, OutboundEmail
from src.utils.settings import MailSettings

logger = logging.getLogger(__name__)

# Statuses worth retrying: throttling and provider-side failures.
_RETRYABLE_STATUS = {408, 425, 429}


class MailerSendMailer:
    """
    Hosted-template delivery through the MailerSend email API.
    The provider renders the template; we only send ids and substitution data.
    """

    def __init__(self, api_url: str, api_key: str, timeout_seconds: float = 5.0, session: requests.Session | None = None):
        self.api_url = api_url
        self.timeout_seconds = float(timeout_seconds)
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "X-Requested-With": "XMLHttpRequest",
            }
        )

    @staticmethod
    def build_request(message: OutboundEmail) -> dict:
        return {
            "from": {"email": message.sender_email, "name": message.sender_name},
            "to": [{"email": message.recipient_email, "name": message.recipient_name}],
            "subject": message.subject,
            "template_id": message.template_id,
            "personalization": [{"email": message.recipient_email, "data": dict(message.variables)}],
        }

    def send(self, message: OutboundEmail) -> None:
        if not message.template_id:
            raise PermanentDeliveryError(f"no template configured for {message.subject!r}")
        try:
            resp = self.session.post(self.api_url, json=self.build_request(message), timeout=self.timeout_seconds)
        except (requests.Timeout, requests.ConnectionError) as e:
            raise TransientDeliveryError(f"MailerSend unreachable: {type(e).__name__}: {e}") from e

        if resp.status_code in _RETRYABLE_STATUS or resp.status_code >= 500:
            raise TransientDeliveryError(f"MailerSend returned {resp.status_code}: {resp.text[:200]}")
        if resp.status_code >= 400:
            raise PermanentDeliveryError(f"MailerSend rejected message ({resp.status_code}): {resp.text[:200]}")

        logger.info(
            "MailerSend accepted %r for %s (message id %s)",
            message.subject,
            message.recipient_email,
            resp.headers.get("X-Message-Id", "-"),
        )


class SmtpMailer:
    """Direct delivery of the locally rendered HTML/text email over SMTP."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        timeout_seconds: float = 5.0,
        smtp_factory=smtplib.SMTP,
    ):
        self.host = host
        self.port = int(port)
        self.username = username
        self.password = password
        self.use_tls = bool(use_tls)
        self.timeout_seconds = float(timeout_seconds)
        self._smtp_factory = smtp_factory

    @staticmethod
    def build_message(message: OutboundEmail) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = formataddr((message.sender_name, message.sender_email))
        msg["To"] = formataddr((message.recipient_name, message.recipient_email))
        msg["Subject"] = message.subject
        msg.set_content(message.text or message.subject)
        if message.html:
            msg.add_alternative(message.html, subtype="html")
        return msg

    def send(self, message: OutboundEmail) -> None:
        msg = self.build_message(message)
        try:
            with self._smtp_factory(self.host, self.port, timeout=self.timeout_seconds) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password)
                smtp.send_message(msg)
        except smtplib.SMTPAuthenticationError as e:
            raise PermanentDeliveryError(f"SMTP authentication failed: {e}") from e
        except smtplib.SMTPRecipientsRefused as e:
            codes = [code for code, _ in e.recipients.values()]
            if codes and all(code >= 500 for code in codes):
                raise PermanentDeliveryError(f"SMTP refused recipient {message.recipient_email}: {e.recipients}") from e
            raise TransientDeliveryError(f"SMTP deferred recipient {message.recipient_email}: {e.recipients}") from e
        except smtplib.SMTPConnectError as e:
            raise TransientDeliveryError(f"SMTP connect to {self.host}:{self.port} failed: {e}") from e
        except smtplib.SMTPResponseException as e:
            if e.smtp_code >= 500:
                raise PermanentDeliveryError(f"SMTP rejected message ({e.smtp_code}): {e.smtp_error!r}") from e
            raise TransientDeliveryError(f"SMTP deferred message ({e.smtp_code}): {e.smtp_error!r}") from e
        except OSError as e:
            # Covers SMTPServerDisconnected, socket timeouts and refused connections.
            raise TransientDeliveryError(f"SMTP transport error: {type(e).__name__}: {e}") from e

        logger.info("SMTP relay %s accepted %r for %s", self.host, message.subject, message.recipient_email)


def build_mailer(mail: MailSettings) -> MailerPort:
    """Pick the outbound channel from configuration (mailersend | smtp)."""
    if mail.provider == "mailersend":
        return MailerSendMailer(
            api_url=mail.mailersend.api_url,
            api_key=mail.mailersend.api_key,
            timeout_seconds=mail.timeout_seconds,
        )
    if mail.provider == "smtp":
        return SmtpMailer(
            host=mail.smtp.host,
            port=mail.smtp.port,
            username=mail.smtp.username,
            password=mail.smtp.password,
            use_tls=mail.smtp.use_tls,
            timeout_seconds=mail.timeout_seconds,
        )
    raise ValueError(f"Unsupported mail provider: {mail.provider!r}")
