"""Error taxonomy for a synthesis run.

Only ``InputError`` aborts a run. The others mark a degraded path: the caller
logs them and falls back to deterministic heuristics.
"""

from __future__ import annotations


class CorroborateError(Exception):
    """Base class for all errors raised by this package."""


class InputError(CorroborateError, ValueError):
    """The query or source list is missing or malformed."""


class ExtractionDegraded(CorroborateError):
    """A single source's text could not be analyzed."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class EnrichmentUnavailable(CorroborateError):
    """An optional LLM call failed, timed out, or returned unusable output."""


class CitationValidationWarning(UserWarning):
    """A citation record is missing fields required by its style."""

    def __init__(self, record_id: str, issues: list) -> None:
        messages = "; ".join(issue.value for issue in issues)
        super().__init__(f"Citation {record_id}: {messages}")
        self.record_id = record_id
        self.issues = list(issues)
