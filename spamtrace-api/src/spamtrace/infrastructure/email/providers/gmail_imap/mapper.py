from __future__ import annotations
from dataclasses import dataclass
from email import policy
from email.parser import BytesParser

NO_SUBJECT = "(no subject)"


@dataclass(frozen=True)
class MessageHeaders:
    subject: str
    sender: str
    sent_at: str


def rfc822_to_headers(rfc822_bytes: bytes) -> MessageHeaders:
    em = BytesParser(policy=policy.default).parsebytes(rfc822_bytes, headersonly=True)

    subject = str(em.get("Subject") or "").strip() or NO_SUBJECT
    sender = str(em.get("From") or "").strip()

    # Date parsing can be messy; leave it blank if absent/unparseable
    dt = em.get("Date")
    try:
        sent_at = dt.datetime.isoformat() if dt and dt.datetime else ""
    except (AttributeError, TypeError, ValueError):
        sent_at = ""

    return MessageHeaders(subject=subject, sender=sender, sent_at=sent_at)
