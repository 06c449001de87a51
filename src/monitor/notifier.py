"""
Notification channel for change reports.

Reports are mailed through the Mailgun HTTP API, one message per recipient.
"""

import asyncio
from abc import ABC, abstractmethod

import httpx
import structlog

from .config import MailgunSettings

logger = structlog.get_logger(__name__)


class NotifierError(Exception):
    """Raised when a report could not be delivered to any recipient."""

    pass


class Notifier(ABC):
    """Abstract interface for report delivery."""

    @abstractmethod
    async def send(self, subject: str, text: str, html: str) -> list[str]:
        """
        Deliver a report.

        Args:
            subject: Subject line
            text: Plain-text body
            html: HTML body

        Returns:
            Provider message identifiers for the delivered messages

        Raises:
            NotifierError: If nothing could be delivered
        """
        pass


class MailgunNotifier(Notifier):
    """
    Sends reports through Mailgun.

    Transient failures (transport errors, 429 and 5xx responses) are retried.
    A recipient that keeps failing is skipped so the others still get the
    report. Sends are serialized; reports are never interleaved.
    """

    def __init__(
        self,
        settings: MailgunSettings,
        recipients: list[str],
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the notifier.

        Args:
            settings: Validated Mailgun settings
            recipients: Addresses that receive every report
            transport: Optional httpx transport, used to stub the API in tests
        """
        self.settings = settings
        self.recipients = list(recipients)
        self.transport = transport
        self.logger = logger.bind(component="notifier", domain=settings.domain)
        self._lock = asyncio.Lock()

    @property
    def endpoint(self) -> str:
        return f"{self.settings.base_url.rstrip('/')}/{self.settings.domain}/messages"

    async def send(self, subject: str, text: str, html: str) -> list[str]:
        if not self.recipients:
            self.logger.warning("No recipients configured, report not sent")
            return []

        message_ids: list[str] = []
        failures: list[str] = []

        async with self._lock:
            async with httpx.AsyncClient(
                auth=("api", self.settings.private_key or ""),
                timeout=self.settings.timeout,
                transport=self.transport,
            ) as client:
                for address in self.recipients:
                    data = {
                        "from": self.settings.sender,
                        "to": address,
                        "subject": subject,
                        "text": text,
                        "html": html,
                    }
                    try:
                        message_id = await self._post(client, data)
                    except NotifierError as e:
                        self.logger.error("Delivery failed", recipient=address, error=str(e))
                        failures.append(address)
                        continue

                    self.logger.info("Report sent", recipient=address, message_id=message_id)
                    message_ids.append(message_id)

        if failures and not message_ids:
            raise NotifierError(f"Could not deliver report to: {', '.join(failures)}")

        return message_ids

    async def _post(self, client: httpx.AsyncClient, data: dict[str, str | None]) -> str:
        """
        Post one message, retrying transient failures.

        Returns:
            The Mailgun message id

        Raises:
            NotifierError: On a permanent failure or when retries are exhausted
        """
        last_error = ""

        for attempt in range(self.settings.retry_attempts + 1):
            if attempt:
                await asyncio.sleep(self.settings.retry_delay)

            try:
                response = await client.post(self.endpoint, data=data)
            except httpx.TransportError as e:
                last_error = f"HTTP error: {str(e)}"
                self.logger.warning("Transient delivery error", attempt=attempt + 1, error=last_error)
                continue

            if response.status_code == 429 or response.status_code >= 500:
                last_error = f"Mailgun returned {response.status_code}"
                self.logger.warning("Transient delivery error", attempt=attempt + 1, error=last_error)
                continue

            if response.status_code >= 400:
                raise NotifierError(
                    f"Mailgun rejected message ({response.status_code}): {response.text}"
                )

            try:
                payload = response.json()
            except ValueError:
                payload = {}
            self.logger.debug("Message from server", message=payload.get("message"))
            return str(payload.get("id", ""))

        raise NotifierError(last_error)
