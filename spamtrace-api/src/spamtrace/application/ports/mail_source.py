"""Port for the mailbox a scan reads from and flags."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Iterator


@dataclass(frozen=True)
class FetchedMessage:
    # Only yielded once both the UID attribute and the full RFC822 literal arrived
    uid: int
    rfc822_bytes: bytes


class SpamMailSource:
    """Capability interface over a mail-retrieval protocol client."""

    def connect(self, account: str, credential: str) -> None:
        raise NotImplementedError

    def open_folder(self, folder: str) -> None:
        raise NotImplementedError

    def search_unseen(self) -> list[int]:
        raise NotImplementedError

    def fetch(self, uids: Iterable[int]) -> Iterator[FetchedMessage]:
        raise NotImplementedError

    def mark_seen(self, uids: Iterable[int]) -> None:
        raise NotImplementedError

    def disconnect(self) -> None:
        raise NotImplementedError
