"""Scan unread spam, trace each sender IP and mark the batch as read."""

from __future__ import annotations

from typing import Callable, Optional

from loguru import logger

from spamtrace.application.ports.geo_resolver import GeoResolver
from spamtrace.application.ports.mail_source import FetchedMessage, SpamMailSource
from spamtrace.domain.entities.message_record import MessageRecord
from spamtrace.domain.errors import MessageFetchError, ScanError
from spamtrace.domain.models import ScanRequest, ScanResult
from spamtrace.infrastructure.email.providers.gmail_imap.mapper import rfc822_to_headers
from spamtrace.infrastructure.email.received import extract_sender_ip


def select_most_recent(uids: list[int], limit: int) -> list[int]:
    """UIDs grow with arrival order, so the highest `limit` UIDs are the newest."""
    ordered = sorted(set(uids))
    return ordered[-limit:] if limit < len(ordered) else ordered


class ScanSpamUseCase:
    """Run one scan over the spam folder.

    Flow:
    1. Connect and authenticate
    2. Open the spam folder read-write
    3. Search unread UIDs (empty -> done, nothing else touched)
    4. Fetch the newest `limit` messages
    5. Per message: parse headers, extract sender IP, resolve geo info
    6. Mark every selected UID as read in one request
    7. Disconnect

    The connection is always closed once it was opened, whatever fails.
    """

    def __init__(
        self,
        source: SpamMailSource,
        resolver_factory: Callable[[], GeoResolver],
        folder: str = "[Gmail]/Spam",
    ) -> None:
        """Initialize the scan use case.

        Args:
            source: Mail source adapter (IMAP)
            resolver_factory: Builds a fresh resolver per run so the address
                              cache and pacing state never outlive the run
            folder: Folder to scan
        """
        self.source = source
        self.resolver_factory = resolver_factory
        self.folder = folder

    def run(self, request: ScanRequest) -> ScanResult:
        logger.info(f"Starting spam scan for {request.account} (limit={request.limit})")
        self.source.connect(request.account, request.credential)

        try:
            self.source.open_folder(self.folder)
            unseen = self.source.search_unseen()
            logger.info(f"Found {len(unseen)} unread emails in {self.folder}")

            if not unseen:
                return ScanResult.empty()

            selected = select_most_recent(unseen, request.limit)
            records = self._process(selected)
            self._mark_seen(selected)
        finally:
            self.source.disconnect()

        result = ScanResult.processed(records)
        logger.info(result.summary)
        return result

    def _process(self, uids: list[int]) -> list[MessageRecord]:
        resolver = self.resolver_factory()
        try:
            # Each message is its own unit of work; collect once all have completed.
            outcomes = [self._build_record(msg, resolver) for msg in self._fetch(uids)]
        finally:
            resolver.close()
        return [record for record in outcomes if record is not None]

    def _fetch(self, uids: list[int]):
        try:
            yield from self.source.fetch(uids)
        except ScanError:
            raise
        except Exception as e:
            raise MessageFetchError(str(e)) from e

    def _build_record(self, msg: FetchedMessage, resolver: GeoResolver) -> Optional[MessageRecord]:
        try:
            headers = rfc822_to_headers(msg.rfc822_bytes)
            sender_ip = extract_sender_ip(msg.rfc822_bytes)
        except Exception as e:
            logger.error(f"Message parse error for UID {msg.uid}: {e}")
            return None

        geo = resolver.resolve(sender_ip) if sender_ip else None
        if sender_ip is None:
            logger.debug(f"No sender IP in Received headers for UID {msg.uid}")

        return MessageRecord(
            uid=msg.uid,
            subject=headers.subject,
            sender=headers.sender,
            sent_at=headers.sent_at,
            sender_ip=sender_ip,
            geo=geo,
        )

    def _mark_seen(self, uids: list[int]) -> None:
        try:
            self.source.mark_seen(uids)
        except Exception as e:
            logger.error(f"Mark read error for {len(uids)} emails: {e}")
