"""
Email alerts through the Resend HTTP API
"""

from typing import Optional
import logging

import requests

from classwatch_config import EmailSettings
from classwatch_errors import NotificationTransportError

logger = logging.getLogger(__name__)

RESEND_ENDPOINT = 'https://api.resend.com/emails'
EMAIL_SUBJECT = 'ClassWatch Alert'


class EmailNotifier:
    def __init__(self, settings: EmailSettings, api_key: Optional[str] = None, timeout: int = 10):
        self.settings = settings
        self.timeout = timeout

        if not settings.enabled:
            logger.info("Email notifications disabled in config")
            self.enabled = False
        elif not api_key:
            logger.warning("RESEND_API_KEY not found. Skipping email notifications.")
            self.enabled = False
        else:
            self.enabled = True
            self.headers = {
                'Authorization': f'Bearer {api_key}',
                'Content-Type': 'application/json'
            }

    def _send(self, message: str):
        payload = {
            'from': self.settings.sender,
            'to': self.settings.recipient,
            'subject': EMAIL_SUBJECT,
            'text': message,
        }
        try:
            response = requests.post(RESEND_ENDPOINT, headers=self.headers, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise NotificationTransportError(f"Email request failed: {e}") from e
        if response.status_code >= 400:
            raise NotificationTransportError(f"Email rejected: {response.status_code} - {response.text}")

    def notify(self, message: str) -> bool:
        """Send ``message`` once; failures are logged and never raised"""
        if not self.enabled:
            logger.debug(f"Notification skipped (disabled): {message}")
            return False
        logger.info("Sending email...")
        try:
            self._send(message)
        except NotificationTransportError as e:
            logger.error(f"Failed to send email: {e}")
            return False
        logger.info("📧 Email sent")
        return True
