from __future__ import annotations

import pytest

from helpers import FakeMailSource, make_raw_email
from spamtrace.application.use_cases import scan_spam
from spamtrace.application.use_cases.scan_spam import ScanSpamUseCase, select_most_recent
from spamtrace.domain.errors import (
    FlagUpdateError,
    FolderOrSearchError,
    MailboxConnectionError,
)
from spamtrace.domain.errors import MessageFetchError
from spamtrace.domain.models import NO_UNREAD_SUMMARY, ScanRequest

REQUEST = ScanRequest(account="victim@example.test", credential="app-password", limit=50)


def names(source: FakeMailSource) -> list[str]:
    return [call[0] for call in source.calls]


def test_select_most_recent_picks_highest_uids() -> None:
    assert select_most_recent([5, 1, 9, 3, 7], 2) == [7, 9]
    assert select_most_recent([2, 1], 10) == [1, 2]


def test_no_unread_messages_short_circuits(resolver_factory, fake_resolver) -> None:
    source = FakeMailSource(unseen=[])
    use_case = ScanSpamUseCase(source, resolver_factory)

    result = use_case.run(REQUEST)

    assert result.records == ()
    assert result.summary == NO_UNREAD_SUMMARY
    assert names(source) == ["connect", "open_folder", "search_unseen", "disconnect"]
    assert fake_resolver.resolved == []


def test_full_run_builds_records_and_marks_read(resolver_factory, fake_resolver) -> None:
    source = FakeMailSource({
        21: make_raw_email(subject="Cheap pills", received=("from a.test ([198.51.100.1])",)),
        22: make_raw_email(subject=None, sender=None, date=None, received=("from b.test by mx.test",)),
    })
    use_case = ScanSpamUseCase(source, resolver_factory, folder="[Gmail]/Spam")

    result = use_case.run(REQUEST)

    assert result.summary == "Processed 2 email(s)."
    by_uid = {record.uid: record for record in result.records}
    assert by_uid[21].subject == "Cheap pills"
    assert by_uid[21].sender == "Prize Desk <prize@bad.test>"
    assert by_uid[21].sent_at == "2024-01-01T10:00:00+00:00"
    assert by_uid[21].sender_ip == "198.51.100.1"
    assert by_uid[21].geo.country == "Testland"
    assert by_uid[22].subject == "(no subject)"
    assert by_uid[22].sender == ""
    assert by_uid[22].sent_at == ""
    assert by_uid[22].sender_ip is None
    assert by_uid[22].geo is None
    assert fake_resolver.resolved == ["198.51.100.1"]
    assert fake_resolver.closed is True
    assert ("open_folder", "[Gmail]/Spam") in source.calls
    assert ("mark_seen", [21, 22]) in source.calls
    assert names(source)[-2:] == ["mark_seen", "disconnect"]


def test_limit_selects_most_recent_unread(resolver_factory) -> None:
    source = FakeMailSource({uid: make_raw_email() for uid in (3, 8, 1, 12, 5)})
    use_case = ScanSpamUseCase(source, resolver_factory)

    result = use_case.run(ScanRequest(account="a@b.test", credential="pw", limit=2))

    assert sorted(r.uid for r in result.records) == [8, 12]
    assert ("fetch", [8, 12]) in source.calls
    assert ("mark_seen", [8, 12]) in source.calls


def test_records_follow_completion_order(resolver_factory) -> None:
    source = FakeMailSource({uid: make_raw_email() for uid in (1, 2, 3)}, completion_order=[2, 3, 1])

    result = ScanSpamUseCase(source, resolver_factory).run(REQUEST)

    assert [r.uid for r in result.records] == [2, 3, 1]


def test_parse_failure_drops_only_that_message(monkeypatch, resolver_factory) -> None:
    real = scan_spam.rfc822_to_headers

    def flaky(raw: bytes):
        if b"BROKEN" in raw:
            raise ValueError("bad MIME")
        return real(raw)

    monkeypatch.setattr(scan_spam, "rfc822_to_headers", flaky)
    source = FakeMailSource({1: make_raw_email(body="BROKEN"), 2: make_raw_email()})

    result = ScanSpamUseCase(source, resolver_factory).run(REQUEST)

    assert [r.uid for r in result.records] == [2]
    assert result.summary == "Processed 1 email(s)."
    assert ("mark_seen", [1, 2]) in source.calls


def test_flag_failure_keeps_results(resolver_factory) -> None:
    source = FakeMailSource({1: make_raw_email()})
    source.fail_on["mark_seen"] = FlagUpdateError("STORE failed")

    result = ScanSpamUseCase(source, resolver_factory).run(REQUEST)

    assert len(result.records) == 1
    assert names(source)[-1] == "disconnect"


def test_connection_failure_propagates(resolver_factory) -> None:
    source = FakeMailSource({1: make_raw_email()})
    source.fail_on["connect"] = MailboxConnectionError("Invalid credentials")

    with pytest.raises(MailboxConnectionError):
        ScanSpamUseCase(source, resolver_factory).run(REQUEST)

    assert names(source) == ["connect"]


@pytest.mark.parametrize("step", ["open_folder", "search_unseen"])
def test_folder_and_search_failures_disconnect(step: str, resolver_factory) -> None:
    source = FakeMailSource({1: make_raw_email()})
    source.fail_on[step] = FolderOrSearchError(f"{step} failed")

    with pytest.raises(FolderOrSearchError):
        ScanSpamUseCase(source, resolver_factory).run(REQUEST)

    assert names(source)[-1] == "disconnect"
    assert not source.called("fetch")


def test_fetch_transport_error_is_wrapped_and_disconnects(resolver_factory) -> None:
    source = FakeMailSource({1: make_raw_email()})
    source.fail_on["fetch"] = OSError("connection reset")

    with pytest.raises(MessageFetchError, match="connection reset"):
        ScanSpamUseCase(source, resolver_factory).run(REQUEST)

    assert not source.called("mark_seen")
    assert names(source)[-1] == "disconnect"


def test_each_run_gets_a_fresh_resolver() -> None:
    built = []

    def factory():
        from helpers import FakeResolver

        resolver = FakeResolver()
        built.append(resolver)
        return resolver

    source = FakeMailSource({1: make_raw_email()})
    use_case = ScanSpamUseCase(source, factory)

    use_case.run(REQUEST)
    source.unseen = [1]
    use_case.run(REQUEST)

    assert len(built) == 2
    assert built[0] is not built[1]
