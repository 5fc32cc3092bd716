from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional

from spamtrace.domain.entities.geo_info import GeoInfo


@dataclass(frozen=True)
class MessageRecord:
    uid: int
    subject: str
    sender: str
    sent_at: str  # ISO-8601, "" when the Date header is missing or unparseable
    sender_ip: Optional[str] = None
    geo: Optional[GeoInfo] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "uid": self.uid,
            "subject": self.subject,
            "sender": self.sender,
            "date": self.sent_at,
            "sender_ip": self.sender_ip,
            "ip_info": self.geo.to_dict() if self.geo else None,
        }
