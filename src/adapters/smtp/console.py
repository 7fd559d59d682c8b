"""
Console mailer adapter - Implements ActivationMailer protocol.

This module provides a console-based implementation of the domain's
mailer port, logging activation tokens for development purposes.
"""

import logging

from src.domain.ports import DeliveryResult

logger = logging.getLogger(__name__)


class ConsoleActivationMailer:
    """
    Implements ActivationMailer protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - never fails.
    """

    def __init__(self, activation_url: str = "http://localhost:8080/#/login?token=") -> None:
        self._activation_url = activation_url

    def send_account_activation(self, email: str, token: str) -> DeliveryResult:
        """
        Log the activation link (simulates email delivery).

        The token is logged at INFO level to be visible in container logs.

        Args:
            email: Recipient email address
            token: Activation token
        """
        logger.info(
            "[ACTIVATION] Email: %s Token: %s Link: %s%s",
            email,
            token,
            self._activation_url,
            token,
        )
        return DeliveryResult.SENT
