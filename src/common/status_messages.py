import datetime
from enum import StrEnum
import logging
from pydantic import BaseModel, Field
from typing import Final


logger = logging.getLogger(__name__)


class SeverityLabel(StrEnum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


SEVERITY_LABEL_TO_INT: Final[dict[SeverityLabel, int]] = {
    SeverityLabel.DEBUG: logging.DEBUG,
    SeverityLabel.INFO: logging.INFO,
    SeverityLabel.WARNING: logging.WARNING,
    SeverityLabel.ERROR: logging.ERROR,
    SeverityLabel.CRITICAL: logging.CRITICAL}


class StatusMessage(BaseModel):
    source_label: str = Field()
    severity: SeverityLabel = Field()
    message: str
    timestamp_utc_iso8601: str

    def __str__(self) -> str:
        return f"[{self.source_label}] {self.message}"


class StatusMessageSource:
    """
    Sink for status messages emitted during a run.
    Messages are forwarded to the standard logger (optionally) and retained
    in one outbox per subscriber until they are popped.
    """

    _source_label: str
    _status_message_outboxes: dict[str, list[StatusMessage]]
    _send_to_logger: bool

    def __init__(
        self,
        source_label: str,
        send_to_logger: bool = True
    ):
        self._status_message_outboxes = dict()
        self._source_label = source_label
        self._send_to_logger = send_to_logger

    def add_status_subscriber(
        self,
        subscriber_label: str
    ) -> None:
        if subscriber_label in self._status_message_outboxes:
            self.enqueue_status_message(
                severity=SeverityLabel.ERROR,
                message=f"{subscriber_label} is already in status message outboxes.")
            return
        self._status_message_outboxes[subscriber_label] = list()
        self.enqueue_status_message(
            severity=SeverityLabel.DEBUG,
            message=f"{subscriber_label} is now listening for status messages.")

    def enqueue_status_message(
        self,
        severity: SeverityLabel,
        message: str,
        source_label: str | None = None,
        timestamp_utc_iso8601: datetime.datetime | str | None = None
    ) -> StatusMessage:
        if not source_label:
            source_label = self._source_label
        if not timestamp_utc_iso8601:
            timestamp_utc_iso8601 = datetime.datetime.now(tz=datetime.timezone.utc).isoformat()
        elif isinstance(timestamp_utc_iso8601, datetime.datetime):
            timestamp_utc_iso8601 = timestamp_utc_iso8601.isoformat()
        status_message: StatusMessage = StatusMessage(
            source_label=source_label,
            severity=severity,
            message=message,
            timestamp_utc_iso8601=timestamp_utc_iso8601)
        if self._send_to_logger:
            logger.log(SEVERITY_LABEL_TO_INT[SeverityLabel(severity)], str(status_message))
        for outbox in self._status_message_outboxes.values():
            outbox.append(status_message)
        return status_message

    def pop_new_status_messages(
        self,
        subscriber_label: str
    ) -> list[StatusMessage]:
        if subscriber_label not in self._status_message_outboxes:
            raise RuntimeError(
                f"subscriber_label {subscriber_label} not found - cannot retrieve status messages.")
        status_messages: list[StatusMessage] = list(self._status_message_outboxes[subscriber_label])
        self._status_message_outboxes[subscriber_label].clear()
        return status_messages
