"""Domain models and entities."""

from spamtrace.domain.entities.geo_info import GeoInfo, GeoOutcome
from spamtrace.domain.entities.message_record import MessageRecord
from spamtrace.domain.errors import (
    FlagUpdateError,
    FolderOrSearchError,
    InputValidationError,
    MailboxConnectionError,
    MessageFetchError,
    ScanError,
)
from spamtrace.domain.models import ScanRequest, ScanResult

__all__ = [
    "GeoInfo",
    "GeoOutcome",
    "MessageRecord",
    "ScanRequest",
    "ScanResult",
    "ScanError",
    "InputValidationError",
    "MailboxConnectionError",
    "FolderOrSearchError",
    "MessageFetchError",
    "FlagUpdateError",
]
