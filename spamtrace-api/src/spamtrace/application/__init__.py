"""Application layer - ports and the scan use case."""

from spamtrace.application.use_cases.scan_spam import ScanSpamUseCase

__all__ = ["ScanSpamUseCase"]
