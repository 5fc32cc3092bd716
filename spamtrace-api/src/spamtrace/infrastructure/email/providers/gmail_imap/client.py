from __future__ import annotations
import imaplib
import re
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Optional

from loguru import logger

from spamtrace.application.ports.mail_source import FetchedMessage, SpamMailSource
from spamtrace.domain.errors import (
    FlagUpdateError,
    FolderOrSearchError,
    MailboxConnectionError,
    MessageFetchError,
)
from spamtrace.infrastructure.email.providers.gmail_imap.auth import (
    GMAIL_IMAP_HOST,
    GMAIL_IMAP_PORT,
    GmailImapAuthenticator,
    GmailImapCredentials,
)

SEEN_FLAG = "\\Seen"
# BODY.PEEK keeps \Seen untouched until the explicit flag step
FETCH_ITEMS = "(UID BODY.PEEK[])"

FETCH_SEQ = re.compile(rb"^\s*(\d+)\s+\(")
UID_ATTR = re.compile(rb"\bUID\s+(\d+)", re.IGNORECASE)


@dataclass
class GmailImapConfig:
    host: str = GMAIL_IMAP_HOST
    port: int = GMAIL_IMAP_PORT
    timeout: Optional[float] = 30.0


@dataclass
class _PendingFetch:
    """Parts of one FETCH response seen so far. Complete once UID and literal are both in."""
    uid: Optional[int] = None
    raw: Optional[bytes] = None
    emitted: bool = False

    @property
    def complete(self) -> bool:
        return self.uid is not None and self.raw is not None


def quote_mailbox_name(folder: str) -> str:
    escaped = folder.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _decode(data: object) -> str:
    if isinstance(data, (list, tuple)):
        return " ".join(_decode(x) for x in data if x)
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return str(data or "")


def iter_fetch_response(fetch_data: Iterable[object]) -> Iterator[FetchedMessage]:
    """
    Re-assemble imaplib FETCH data into complete messages.

    imaplib hands back a flat list where each literal arrives as a
    (prefix, bytes) tuple and any attributes sent after the literal arrive
    as a separate bytes item, e.g.

        [(b'7 (UID 42 BODY[] {512}', b'...'), b')']
        [(b'7 (BODY[] {512}', b'...'), b' UID 42)']

    Messages are yielded in the order they become complete.
    """
    pending: dict[int, _PendingFetch] = {}
    current: Optional[int] = None

    for item in fetch_data:
        if isinstance(item, tuple) and len(item) >= 2:
            prefix, literal = item[0], item[1]
            seq_match = FETCH_SEQ.match(prefix or b"")
            if seq_match:
                current = int(seq_match.group(1))
            if current is None:
                continue
            state = pending.setdefault(current, _PendingFetch())
            state.raw = literal if isinstance(literal, bytes) else bytes(literal or b"")
            attrs = prefix
        elif isinstance(item, bytes):
            seq_match = FETCH_SEQ.match(item)
            if seq_match:
                current = int(seq_match.group(1))
            if current is None:
                continue
            state = pending.setdefault(current, _PendingFetch())
            attrs = item
        else:
            continue

        uid_match = UID_ATTR.search(attrs or b"")
        if uid_match:
            state.uid = int(uid_match.group(1))

        if state.complete and not state.emitted:
            state.emitted = True
            yield FetchedMessage(uid=state.uid, rfc822_bytes=state.raw)

    incomplete = [seq for seq, state in pending.items() if not state.emitted and state.raw is not None]
    if incomplete:
        logger.warning(f"Dropped {len(incomplete)} FETCH responses without a UID: seq={incomplete}")


class GmailImapSpamSource(SpamMailSource):
    def __init__(
        self,
        cfg: Optional[GmailImapConfig] = None,
        authenticator_factory: Optional[
            Callable[[GmailImapCredentials, GmailImapConfig], GmailImapAuthenticator]
        ] = None,
    ) -> None:
        self.cfg = cfg or GmailImapConfig()
        self._authenticator_factory = authenticator_factory or (
            lambda creds, cfg: GmailImapAuthenticator(creds, host=cfg.host, port=cfg.port, timeout=cfg.timeout)
        )
        self._conn: Optional[imaplib.IMAP4_SSL] = None

    def _connection(self) -> imaplib.IMAP4_SSL:
        if self._conn is None:
            raise MailboxConnectionError("Not connected")
        return self._conn

    def connect(self, account: str, credential: str) -> None:
        creds = GmailImapCredentials(email=account, app_password=credential)
        try:
            self._conn = self._authenticator_factory(creds, self.cfg).login()
        except (imaplib.IMAP4.error, OSError) as e:
            logger.warning(f"IMAP login failed for {account} at {self.cfg.host}:{self.cfg.port}: {_decode(e.args)}")
            raise MailboxConnectionError(_decode(e.args) or type(e).__name__) from e
        logger.info(f"Connected to {self.cfg.host} as {account}")

    def disconnect(self) -> None:
        if self._conn:
            try:
                self._conn.logout()
            except Exception as e:
                logger.debug(f"IMAP logout failed: {e}")
            self._conn = None

    def open_folder(self, folder: str) -> None:
        conn = self._connection()
        try:
            typ, data = conn.select(quote_mailbox_name(folder), readonly=False)
        except (imaplib.IMAP4.error, OSError) as e:
            raise FolderOrSearchError(f"Failed to open {folder}: {_decode(e.args)}") from e
        if typ != "OK":
            raise FolderOrSearchError(f"Failed to open {folder}: {_decode(data)}")

    def search_unseen(self) -> list[int]:
        conn = self._connection()
        try:
            typ, uids_data = conn.uid("SEARCH", None, "UNSEEN")
        except (imaplib.IMAP4.error, OSError) as e:
            raise FolderOrSearchError(f"Search failed: {_decode(e.args)}") from e
        if typ != "OK":
            raise FolderOrSearchError(f"Search failed: {_decode(uids_data)}")

        uids: list[int] = []
        if uids_data and uids_data[0]:
            uids = [int(x) for x in uids_data[0].split()]
        return uids

    def fetch(self, uids: Iterable[int]) -> Iterator[FetchedMessage]:
        conn = self._connection()
        uid_set = ",".join(str(uid) for uid in uids)
        if not uid_set:
            return iter(())

        try:
            typ, msg_data = conn.uid("FETCH", uid_set, FETCH_ITEMS)
        except (imaplib.IMAP4.error, OSError) as e:
            raise MessageFetchError(_decode(e.args) or type(e).__name__) from e
        if typ != "OK":
            raise MessageFetchError(_decode(msg_data) or "FETCH failed")

        return iter_fetch_response(msg_data or [])

    def mark_seen(self, uids: Iterable[int]) -> None:
        conn = self._connection()
        uids = list(uids)
        uid_set = ",".join(str(uid) for uid in uids)
        if not uid_set:
            return

        try:
            typ, data = conn.uid("STORE", uid_set, "+FLAGS", f"({SEEN_FLAG})")
        except (imaplib.IMAP4.error, OSError) as e:
            raise FlagUpdateError(_decode(e.args) or type(e).__name__) from e
        if typ != "OK":
            raise FlagUpdateError(_decode(data) or "STORE failed")
        logger.info(f"Marked {len(uids)} emails as read")
