"""One-shot spam scan from the command line."""

from __future__ import annotations

import argparse
import json

from loguru import logger

from spamtrace.api.routes import get_scan_use_case
from spamtrace.domain.errors import InputValidationError, ScanError
from spamtrace.domain.models import ScanRequest
from spamtrace.infrastructure import configure_logging, get_settings


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Trace sender IPs of unread spam")
    parser.add_argument("--limit", type=int, default=settings.default_max_emails, help="Newest N unread emails to scan")
    parser.add_argument("--folder", default=None, help=f"Folder to scan (default: {settings.spam_folder})")
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)

    password = settings.spamtrace_app_password.get_secret_value() if settings.spamtrace_app_password else ""
    try:
        request = ScanRequest(account=settings.spamtrace_email or "", credential=password, limit=args.limit)
    except InputValidationError as e:
        logger.error(f"{e.detail} Set SPAMTRACE_EMAIL and SPAMTRACE_APP_PASSWORD.")
        return 2

    use_case = get_scan_use_case()
    if args.folder:
        use_case.folder = args.folder

    try:
        result = use_case.run(request)
    except ScanError as e:
        logger.error(f"Scan failed ({e.category}): {e.detail}")
        return 1

    print(json.dumps(
        {"message": result.summary, "emails": [r.to_dict() for r in result.records]},
        indent=2,
        ensure_ascii=False,
    ))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
