"""Request and result models for a single scan run."""

from __future__ import annotations

from dataclasses import dataclass, field

from spamtrace.domain.entities.message_record import MessageRecord
from spamtrace.domain.errors import InputValidationError

DEFAULT_MAX_EMAILS = 50
NO_UNREAD_SUMMARY = "No unread emails."


@dataclass(frozen=True)
class ScanRequest:
    """What to scan and how much of it.

    The credential is excluded from repr so it never leaks into logs or tracebacks.
    """

    account: str
    credential: str = field(repr=False)
    limit: int = DEFAULT_MAX_EMAILS

    def __post_init__(self) -> None:
        if not (self.account or "").strip() or not (self.credential or "").strip():
            raise InputValidationError("Email and app password are required.")
        if isinstance(self.limit, bool) or not isinstance(self.limit, int) or self.limit <= 0:
            raise InputValidationError("max_emails must be a positive integer.")


@dataclass(frozen=True)
class ScanResult:
    records: tuple[MessageRecord, ...]
    summary: str

    @classmethod
    def empty(cls) -> ScanResult:
        return cls(records=(), summary=NO_UNREAD_SUMMARY)

    @classmethod
    def processed(cls, records: list[MessageRecord]) -> ScanResult:
        return cls(records=tuple(records), summary=f"Processed {len(records)} email(s).")
