from __future__ import annotations
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    MISSING_INPUT = "missing_input"
    UPSTREAM_LOOKUP_FAILURE = "upstream_lookup_failure"
    PROVIDER_FAILURE = "provider_failure"
    ALL_SUGGESTIONS_BLOCKED = "all_suggestions_blocked"


RETRY_MESSAGE = "All suggestions came out too generic. Please try again."
FAILURE_MESSAGE = "Something went wrong while generating suggestions."


class SuggestionError(Exception):
    """Base class for every failure the suggestion pipeline can surface.

    Callers branch on `kind` (or the subclass) instead of matching message text.
    `user_message` is safe to show to end users; `str(exc)` carries the detail.
    """

    kind: ErrorKind
    retryable: bool = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def user_message(self) -> str:
        return RETRY_MESSAGE if self.retryable else FAILURE_MESSAGE


class MissingInput(SuggestionError):
    kind = ErrorKind.MISSING_INPUT


class UpstreamLookupFailure(SuggestionError):
    kind = ErrorKind.UPSTREAM_LOOKUP_FAILURE


class ProviderFailure(SuggestionError):
    kind = ErrorKind.PROVIDER_FAILURE

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AllSuggestionsBlocked(SuggestionError):
    kind = ErrorKind.ALL_SUGGESTIONS_BLOCKED
    retryable = True

    def __init__(self, message: str, blocked: int = 0):
        super().__init__(message)
        self.blocked = blocked
