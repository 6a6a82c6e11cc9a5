# src/jobboard/errors.py
"""
Errors that are allowed to reach the caller.

Everything upstream (providers, curated store) degrades to fewer results
instead of raising, so this list is intentionally short.
"""

from __future__ import annotations


class JobBoardError(Exception):
    """Base class for errors surfaced by the search service."""


class RateLimitExceeded(JobBoardError):
    """Too many requests from one client inside the sliding window."""

    def __init__(self, client_id: str, retry_after: int):
        super().__init__(f"rate limit exceeded; retry in {retry_after}s")
        self.client_id = client_id
        self.retry_after = retry_after


class SearchFailed(JobBoardError):
    """
    Unexpected fault in the merge/rank pipeline. The message is generic on
    purpose; the original exception is chained for the logs only.
    """

    def __init__(self, message: str = "Search failed"):
        super().__init__(message)
