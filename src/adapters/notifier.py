"""
Channel notifier - Implements Notifier protocol over optional senders.

Each channel is independent: an unconfigured channel is disabled (logged,
reported as not delivered) without affecting the other.
"""

import logging

from src.adapters.sms.twilio import TwilioSmsSender
from src.adapters.smtp.mailer import SmtpEmailSender

logger = logging.getLogger(__name__)


class ChannelNotifier:
    """
    Implements Notifier protocol by routing to an SMTP and a Twilio sender.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        email_sender: SmtpEmailSender | None = None,
        sms_sender: TwilioSmsSender | None = None,
    ) -> None:
        self._email_sender = email_sender
        self._sms_sender = sms_sender

    @property
    def email_enabled(self) -> bool:
        return self._email_sender is not None

    @property
    def sms_enabled(self) -> bool:
        return self._sms_sender is not None

    def send_email(self, to: str, subject: str, body: str, html: str | None = None) -> bool:
        if self._email_sender is None:
            logger.info("[No SMTP] Email channel not configured; email to %s not sent", to)
            return False
        return self._email_sender.send(to, subject, body, html=html)

    def send_sms(self, to: str, body: str) -> bool:
        if self._sms_sender is None:
            logger.info("[No Twilio] SMS channel not configured; SMS to %s not sent", to)
            return False
        return self._sms_sender.send(to, body)
