"""
Console notifier adapter - Implements Notifier protocol.

This module provides a console-based implementation of the domain's
notifier port, logging verification messages to stdout for local
development when no SMTP or SMS provider is configured.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleNotifier:
    """
    Implements Notifier protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - prints the full message, including the
    verification link and OTP, so accounts can be verified by hand.
    """

    def send_email(self, to: str, subject: str, body: str, html: str | None = None) -> bool:
        """
        Log the email at INFO level (simulates email delivery).

        Args:
            to: Recipient email address
            subject: Email subject line
            body: Plain-text body (contains link and OTP)
            html: HTML alternative; not logged, the plain body carries the same content

        Returns:
            Always True
        """
        logger.info("[VERIFICATION] Email: %s Subject: %s\n%s", to, subject, body)
        return True

    def send_sms(self, to: str, body: str) -> bool:
        """Log the SMS at INFO level (simulates SMS delivery)."""
        logger.info("[VERIFICATION] SMS: %s Body: %s", to, body)
        return True
