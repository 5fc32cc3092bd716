from __future__ import annotations
import re
from typing import Optional, Union

RECEIVED_LINE = re.compile(r"^Received:\s", re.IGNORECASE)
BRACKETED_IPV4 = re.compile(r"\[(\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})\]")
LINE_BREAK = re.compile(r"\r?\n")


def extract_sender_ip(raw: Union[str, bytes]) -> Optional[str]:
    """
    Return the last bracketed IPv4 found on any Received: line, or None.

    Relays prepend their Received header, so the hop nearest the originator
    sits lowest in the block. Example:
        Received: from weforum.pro (virl-dev-innovate.cisco.com. [185.174.29.12])
    Only the physical line that starts with "Received:" is inspected;
    folded continuation lines are not. Lines break on LF or CRLF only,
    never on the other separators str.splitlines() honours.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")

    last_ip: Optional[str] = None
    for line in LINE_BREAK.split(raw):
        if not RECEIVED_LINE.match(line):
            continue
        for match in BRACKETED_IPV4.finditer(line):
            last_ip = match.group(1)
    return last_ip
