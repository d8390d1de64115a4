"""
SMTP email sender adapter - Implements EmailSender protocol.

Delivers plain-text messages through an SMTP relay with STARTTLS
and login (e.g. Gmail with an app password).
"""

import logging
import smtplib
from email.mime.text import MIMEText

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    """
    Implements EmailSender protocol via smtplib.

    Uses structural subtyping - no explicit inheritance from Protocol.
    A new connection is opened per message.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        sender: str | None = None,
        use_tls: bool = True,
        timeout: float = 15.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or username
        self.use_tls = use_tls
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return all([self.host, self.port, self.username, self.password, self.sender])

    def send(self, to: str, subject: str, body: str) -> bool:
        """
        Send the message.

        Returns:
            True if the relay accepted the message, False otherwise
        """
        if not self.enabled:
            logger.error("Email configuration is missing, cannot send to %s", to)
            return False

        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                server.login(self.username, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s: %s", to, e)
            return False

        logger.info("Email sent to %s: %s", to, subject)
        return True
