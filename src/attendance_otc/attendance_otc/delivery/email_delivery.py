from __future__ import annotations

import html
import logging
import smtplib
from dataclasses import dataclass
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from ..core.exceptions import DeliveryFailedError
from .base import CodeDelivery

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MailSettings:
    server: str
    port: int
    username: str
    password: str
    use_ssl: bool = True
    sender_name: str = "Attendance"
    timeout: int = 15

    def missing(self) -> list[str]:
        out = []
        if not self.server:
            out.append("MAIL_SERVER")
        if not self.username:
            out.append("MAIL_USERNAME")
        if not self.password:
            out.append("MAIL_PASSWORD")
        return out


def build_code_message(*, sender: str, address: str, code: str, member_name: str, expiry_minutes: int) -> MIMEMultipart:
    msg = MIMEMultipart("alternative")
    msg["Subject"] = "Your attendance code"
    msg["From"] = sender
    msg["To"] = address

    safe_name = html.escape(member_name)

    text_body = (
        f"Hello {member_name},\n\n"
        f"Your attendance code is {code}.\n"
        f"It is valid for {expiry_minutes} minutes. Do not share it with anyone.\n"
    )
    html_body = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            body {{ font-family: Arial, sans-serif; background-color: #f4f4f4; margin: 0; padding: 20px; }}
            .container {{ max-width: 600px; margin: 0 auto; background-color: #fff; border-radius: 10px; overflow: hidden; }}
            .header {{ background: #4b5bd6; color: #fff; padding: 24px; text-align: center; }}
            .content {{ padding: 32px; text-align: center; }}
            .code {{ font-size: 36px; font-weight: bold; letter-spacing: 8px; color: #4b5bd6; margin: 24px 0; }}
            .warning {{ color: #dc3545; font-size: 14px; }}
            .footer {{ background-color: #f8f9fa; padding: 16px; text-align: center; font-size: 12px; color: #6c757d; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header"><h1>Attendance</h1></div>
            <div class="content">
                <h2>Hello, {safe_name}!</h2>
                <p>Your code for marking attendance is:</p>
                <div class="code">{code}</div>
                <p>This code is valid for {expiry_minutes} minutes.</p>
                <p class="warning">Do not share this code with anyone.</p>
            </div>
            <div class="footer">
                <p>This is an automated email. Please do not reply.</p>
                <p>&copy; {datetime.now().year} Attendance</p>
            </div>
        </div>
    </body>
    </html>
    """
    msg.attach(MIMEText(text_body, "plain"))
    msg.attach(MIMEText(html_body, "html"))
    return msg


class EmailCodeDelivery(CodeDelivery):
    """Sends codes over SMTP; every failure surfaces as DeliveryFailedError."""

    def __init__(self, settings: MailSettings):
        self._settings = settings

    def deliver(self, address: str, code: str, member_name: str, expiry_minutes: int) -> None:
        s = self._settings
        missing = s.missing()
        if missing:
            raise DeliveryFailedError(f"SMTP settings missing: {', '.join(missing)}")

        msg = build_code_message(
            sender=f"{s.sender_name} <{s.username}>",
            address=address,
            code=code,
            member_name=member_name,
            expiry_minutes=expiry_minutes,
        )

        try:
            if s.use_ssl:
                with smtplib.SMTP_SSL(s.server, s.port, timeout=s.timeout) as server:
                    server.login(s.username, s.password)
                    server.send_message(msg)
            else:
                with smtplib.SMTP(s.server, s.port, timeout=s.timeout) as server:
                    server.starttls()
                    server.login(s.username, s.password)
                    server.send_message(msg)
        except smtplib.SMTPAuthenticationError as exc:
            logger.error("SMTP authentication failed: %s", exc)
            raise DeliveryFailedError("Failed to send email: SMTP authentication failed") from exc
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Sending code email to %s failed: %s", address, exc)
            raise DeliveryFailedError("Failed to send email") from exc

        logger.info("Code email sent to %s", address)
