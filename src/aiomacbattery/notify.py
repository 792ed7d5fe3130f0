"""Delivery of battery reports and failure notices."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from .exceptions import NotificationError

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Attachment:
    """A file attached to a report."""

    filename: str
    content: bytes
    mime_type: str


class AbstractNotifier(ABC):
    """Abstract class to deliver reports.

    Implementations raise NotificationError if the delivery failed.
    """

    @abstractmethod
    async def async_send_report(
        self,
        recipients: Sequence[str],
        subject: str,
        html: str,
        attachments: Sequence[Attachment] = (),
    ) -> None:
        """Deliver a report to the recipients."""

    @abstractmethod
    async def async_send_failure(
        self, recipients: Sequence[str], message: str
    ) -> None:
        """Tell the recipients that the report could not be built."""


class LogNotifier(AbstractNotifier):
    """Notifier that only logs what would be delivered."""

    def __init__(self) -> None:
        """Initialize the notifier."""
        self.reports: list[tuple[tuple[str, ...], str]] = []
        self.failures: list[tuple[tuple[str, ...], str]] = []

    async def async_send_report(
        self,
        recipients: Sequence[str],
        subject: str,
        html: str,
        attachments: Sequence[Attachment] = (),
    ) -> None:
        """Log the report."""
        if not recipients:
            msg = "No recipients for the report"
            raise NotificationError(msg)
        _LOGGER.info(
            "Report '%s' for %s (%s characters, attachments: %s)",
            subject,
            ", ".join(recipients),
            len(html),
            ", ".join(a.filename for a in attachments) or "none",
        )
        self.reports.append((tuple(recipients), subject))

    async def async_send_failure(
        self, recipients: Sequence[str], message: str
    ) -> None:
        """Log the failure notice."""
        if not recipients:
            msg = "No recipients for the failure notice"
            raise NotificationError(msg)
        _LOGGER.error("Report failed, notifying %s: %s", ", ".join(recipients), message)
        self.failures.append((tuple(recipients), message))
