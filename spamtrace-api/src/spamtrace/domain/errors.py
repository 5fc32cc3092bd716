"""Failure taxonomy for a spam scan run.

Every error surfaced to a caller carries a short `category` plus a
human-readable detail string. Credentials never appear in either.
"""

from __future__ import annotations


class ScanError(Exception):
    category = "internal"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class InputValidationError(ScanError):
    """Missing account/credential or a non-positive limit. Raised before any I/O."""

    category = "invalid_input"


class MailboxConnectionError(ScanError):
    """Authentication or transport failure while talking to the mail server."""

    category = "connection"


class FolderOrSearchError(ScanError):
    category = "folder_or_search"


class MessageFetchError(ScanError):
    category = "fetch"


class FlagUpdateError(ScanError):
    """Marking messages as read failed. Logged by the scanner, never surfaced."""

    category = "flag_update"
