"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging outgoing messages for development use.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For development purposes - OTP codes show up in the server log.
    """

    def send(self, to: str, subject: str, body: str) -> bool:
        """
        Log the message to console (simulates email delivery).

        The message is logged at INFO level so codes are visible in the server output.

        Args:
            to: Recipient email address
            subject: Subject line
            body: Plain-text body

        Returns:
            Always True
        """
        logger.info("[EMAIL] To: %s Subject: %s\n%s", to, subject, body)
        return True
