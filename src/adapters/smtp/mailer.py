"""
SMTP email sender - delivers plain-text mail, with an optional
HTML alternative, over implicit TLS.

One short-lived connection per message; senders are called from the
notification executor, never on the request path.
"""

import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    """Sends email through an authenticated SMTP_SSL server (Gmail by default)."""

    def __init__(
        self,
        user: str,
        password: str,
        from_name: str = "Help Desk",
        host: str = "smtp.gmail.com",
        port: int = 465,
        timeout: float = 10.0,
    ) -> None:
        self._user = user
        self._password = password
        self._from_name = from_name
        self._host = host
        self._port = port
        self._timeout = timeout

    @property
    def sender_address(self) -> str:
        return self._user

    def send(self, to: str, subject: str, body: str, html: str | None = None) -> bool:
        """
        Send one message; with html it goes out as multipart/alternative.

        Returns:
            True if the server accepted the message, False on any SMTP or
            connection failure (logged)
        """
        message = EmailMessage()
        message["From"] = formataddr((self._from_name, self._user))
        message["To"] = to.strip()
        message["Subject"] = subject
        message.set_content(body)
        if html:
            message.add_alternative(html, subtype="html")

        try:
            with smtplib.SMTP_SSL(self._host, self._port, timeout=self._timeout) as server:
                server.login(self._user, self._password)
                server.send_message(message)
        except smtplib.SMTPAuthenticationError:
            logger.error("SMTP authentication failed for %s", self._user)
            return False
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("SMTP send to %s failed: %s", to, exc)
            return False
        return True
