"""
SMTP mailer adapter - Implements ActivationMailer protocol.

Sends the activation email through an SMTP server with smtplib.
Every connection is opened with a bounded timeout so a stalled server
cannot hold a registration (and its rollback) indefinitely.
"""

import logging
import smtplib
from email.message import EmailMessage

from src.domain.ports import DeliveryResult

logger = logging.getLogger(__name__)

SUBJECT = "Account Activation"

_HTML_TEMPLATE = """\
<div>
  <b>Please click below link to activate your account</b>
</div>
<div>
  <a href="{link}">Activate</a>
</div>
"""


class SmtpActivationMailer:
    """
    Implements ActivationMailer protocol via SMTP.

    Transport rejections, timeouts and connection errors are reported
    as DeliveryResult.FAILED.
    """

    def __init__(
        self,
        host: str,
        port: int,
        mail_from: str,
        activation_url: str,
        timeout: float = 10.0,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = False,
    ) -> None:
        if timeout <= 0:
            raise ValueError("SMTP timeout must be positive")
        self._host = host
        self._port = port
        self._mail_from = mail_from
        self._activation_url = activation_url
        self._timeout = timeout
        self._username = username
        self._password = password
        self._use_tls = use_tls

    def build_message(self, email: str, token: str) -> EmailMessage:
        """Compose the activation email for a recipient."""
        link = f"{self._activation_url}{token}"
        message = EmailMessage()
        message["From"] = self._mail_from
        message["To"] = email
        message["Subject"] = SUBJECT
        message.set_content(f"Please open the link below to activate your account\n{link}\n")
        message.add_alternative(_HTML_TEMPLATE.format(link=link), subtype="html")
        return message

    def send_account_activation(self, email: str, token: str) -> DeliveryResult:
        """
        Deliver the activation email.

        Args:
            email: Recipient email address
            token: Activation token embedded in the link
        """
        message = self.build_message(email, token)
        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
                if self._use_tls:
                    server.starttls()
                if self._username:
                    server.login(self._username, self._password or "")
                refused = server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("Activation email to %s failed: %s", email, e)
            return DeliveryResult.FAILED

        if refused:
            logger.warning("Activation email to %s refused: %s", email, refused)
            return DeliveryResult.FAILED

        logger.info("Activation email sent to %s", email)
        return DeliveryResult.SENT
