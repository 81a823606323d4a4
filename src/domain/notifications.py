"""
Verification notification dispatch - fire-and-forget delivery.

Each channel (email, SMS) is submitted to the executor as its own task so a
slow or failing channel never delays the other or the caller. Outcomes only
reach the log.
"""

import html
import logging
from collections.abc import Callable
from concurrent.futures import Executor
from dataclasses import dataclass
from datetime import timedelta

from .ports import Account, Notifier

logger = logging.getLogger(__name__)

EMAIL_SUBJECT = "Verify your email - Help Desk (OTP inside)"


def describe_window(window: timedelta) -> str:
    """Render a validity window in human units ("10 minutes", "1 hour")."""
    seconds = int(window.total_seconds())
    for unit, size in (("day", 86400), ("hour", 3600), ("minute", 60)):
        if seconds >= size and seconds % size == 0:
            count = seconds // size
            return f"{count} {unit}" + ("s" if count != 1 else "")
    return f"{seconds} second" + ("s" if seconds != 1 else "")


def render_verification_email(name: str, verification_url: str, otp: str, window: str) -> str:
    return (
        f"Hi {name},\n\n"
        "Welcome to Help Desk! Verify your email using either option:\n"
        f"1. Click this link: {verification_url}\n"
        f"2. Or use this OTP: {otp} (valid {window})\n\n"
        "If you didn't create an account, ignore this email."
    )


def render_verification_email_html(name: str, verification_url: str, otp: str, window: str) -> str:
    """HTML alternative of the verification email with a link button."""
    name = html.escape(name)
    url = html.escape(verification_url, quote=True)
    return (
        '<div style="font-family: sans-serif; max-width: 480px;">'
        '<h2 style="color: #334155;">Verify your email</h2>'
        f"<p>Hi {name},</p>"
        "<p>Thanks for signing up. Verify using either option below:</p>"
        f'<p><a href="{url}" style="display: inline-block; background: #4f46e5; '
        "color: white; padding: 10px 20px; text-decoration: none; border-radius: 8px;\">"
        "Verify with link</a></p>"
        f'<p style="color: #334155; font-size: 16px;">Or use this OTP: <strong>{otp}</strong></p>'
        f'<p style="color: #64748b; font-size: 12px;">OTP is valid for {window}.</p>'
        '<p style="color: #64748b; font-size: 12px;">'
        "If you didn't create an account, ignore this email.</p>"
        "</div>"
    )


def render_verification_sms(otp: str, window: str) -> str:
    return f"Your Help Desk verification code is {otp}. Valid for {window}."


@dataclass
class NotificationDispatcher:
    """
    Submits verification messages to the notifier on a background executor.

    The executor is owned by the application lifespan; this class never
    waits on the futures it creates.
    """

    notifier: Notifier
    executor: Executor
    otp_ttl: timedelta

    def send_verification(self, account: Account, verification_url: str, otp: str) -> None:
        """
        Queue the verification email and, if a phone is on file, the SMS.

        Args:
            account: Recipient account (email, name, phone are read)
            verification_url: Link embedding the account's verification token
            otp: The code to deliver
        """
        window = describe_window(self.otp_ttl)
        body = render_verification_email(account.name, verification_url, otp, window)
        html_body = render_verification_email_html(account.name, verification_url, otp, window)
        self._submit(
            "email",
            account.email,
            self.notifier.send_email,
            account.email,
            EMAIL_SUBJECT,
            body,
            html=html_body,
        )

        if account.phone:
            sms = render_verification_sms(otp, window)
            self._submit("sms", account.phone, self.notifier.send_sms, account.phone, sms)

    def _submit(
        self, channel: str, recipient: str, send: Callable[..., bool], *args: str, **kwargs: str
    ) -> None:
        self.executor.submit(_deliver, channel, recipient, send, *args, **kwargs)


def _deliver(
    channel: str, recipient: str, send: Callable[..., bool], *args: str, **kwargs: str
) -> bool:
    """Run one delivery attempt; log the outcome and never raise."""
    try:
        delivered = send(*args, **kwargs)
    except Exception:
        logger.exception("Verification %s to %s failed", channel, recipient)
        return False

    if delivered:
        logger.info("Verification %s sent to %s", channel, recipient)
    else:
        logger.warning("Verification %s to %s not delivered", channel, recipient)
    return delivered
