from __future__ import annotations

from typing import Iterable, Iterator

from spamtrace.application.ports.mail_source import FetchedMessage, SpamMailSource
from spamtrace.domain.entities.geo_info import GeoInfo


def make_raw_email(
    subject: str | None = "You won a prize",
    sender: str | None = "Prize Desk <prize@bad.test>",
    date: str | None = "Mon, 01 Jan 2024 10:00:00 +0000",
    received: Iterable[str] = ("from mx.bad.test (mx.bad.test [203.0.113.9]) by mx.google.com",),
    body: str = "Claim now.",
) -> bytes:
    lines = [f"Received: {line}" for line in received]
    if subject is not None:
        lines.append(f"Subject: {subject}")
    if sender is not None:
        lines.append(f"From: {sender}")
    if date is not None:
        lines.append(f"Date: {date}")
    lines.append("To: victim@example.test")
    lines.append("")
    lines.append(body)
    return "\r\n".join(lines).encode("utf-8")


class FakeMailSource(SpamMailSource):
    """In-memory SpamMailSource recording every call made against it."""

    def __init__(
        self,
        messages: dict[int, bytes] | None = None,
        unseen: list[int] | None = None,
        completion_order: list[int] | None = None,
    ) -> None:
        self.messages = messages or {}
        self.unseen = list(self.messages) if unseen is None else unseen
        self.completion_order = completion_order
        self.calls: list[tuple] = []
        self.fail_on: dict[str, Exception] = {}

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise self.fail_on[name]

    def called(self, name: str) -> bool:
        return any(call[0] == name for call in self.calls)

    def connect(self, account: str, credential: str) -> None:
        self._record("connect", account)

    def open_folder(self, folder: str) -> None:
        self._record("open_folder", folder)

    def search_unseen(self) -> list[int]:
        self._record("search_unseen")
        return list(self.unseen)

    def fetch(self, uids: Iterable[int]) -> Iterator[FetchedMessage]:
        uids = list(uids)
        self._record("fetch", uids)
        order = [u for u in (self.completion_order or uids) if u in uids]
        for uid in order:
            yield FetchedMessage(uid=uid, rfc822_bytes=self.messages[uid])

    def mark_seen(self, uids: Iterable[int]) -> None:
        self._record("mark_seen", list(uids))

    def disconnect(self) -> None:
        self.calls.append(("disconnect",))


class FakeResolver:
    def __init__(self) -> None:
        self.resolved: list[str] = []
        self.closed = False

    def resolve(self, address: str) -> GeoInfo:
        self.resolved.append(address)
        return GeoInfo.from_payload({"status": "success", "country": "Testland", "query": address})

    def close(self) -> None:
        self.closed = True


