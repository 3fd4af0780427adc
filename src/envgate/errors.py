"""Exceptions raised when a validation run fails."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .validation.framework import Verdict


class EnvValidationError(Exception):
    """Base class for failed validation runs."""

    def __init__(self, message: str, verdict: "Verdict | None" = None):
        super().__init__(message)
        self.verdict = verdict


class ContentViolationError(EnvValidationError):
    """A policy rejected the value of a key."""

    def __init__(self, key: str, policy: str, reason: str, verdict: "Verdict | None" = None):
        super().__init__(reason, verdict)
        self.key = key
        self.policy = policy
        self.reason = reason


class MissingKeysError(EnvValidationError):
    """One or more required keys never appeared in the file."""

    def __init__(self, missing_keys: list[str], verdict: "Verdict | None" = None):
        super().__init__(f"missing required keys: [{' '.join(missing_keys)}]", verdict)
        self.missing_keys = list(missing_keys)
