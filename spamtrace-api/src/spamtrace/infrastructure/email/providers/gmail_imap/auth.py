from __future__ import annotations
from dataclasses import dataclass, field
import imaplib

GMAIL_IMAP_HOST = "imap.gmail.com"
GMAIL_IMAP_PORT = 993


@dataclass(frozen=True)
class GmailImapCredentials:
    """
    Represents credentials for a single mailbox. Gmail needs an app password
    when 2-step verification is on.
    """
    email: str
    app_password: str = field(repr=False)


class GmailImapAuthenticator:
    """
    Responsible ONLY for establishing an authenticated IMAP connection.
    No folder logic, no fetching, no parsing.
    """

    def __init__(
        self,
        creds: GmailImapCredentials,
        host: str = GMAIL_IMAP_HOST,
        port: int = GMAIL_IMAP_PORT,
        timeout: float | None = None,
    ) -> None:
        self.creds = creds
        self.host = host
        self.port = port
        self.timeout = timeout

    def login(self) -> imaplib.IMAP4_SSL:
        """
        Returns an authenticated IMAP4_SSL connection (implicit TLS on 993).
        The socket is closed again if the server rejects the login.
        """
        conn = imaplib.IMAP4_SSL(host=self.host, port=self.port, timeout=self.timeout)
        try:
            conn.login(self.creds.email, self.creds.app_password)
        except Exception:
            conn.shutdown()
            raise
        return conn
