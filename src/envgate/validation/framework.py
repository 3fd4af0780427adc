"""Core validation engine for envgate.

A run walks the entries of one .env mapping once. Every entry marks the
required-key ledger and is dispatched through the policy registry in order.
The first rejected value ends the run; missing required keys are only
reported, all together, when every value passed.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..errors import ContentViolationError, MissingKeysError
from ..loader import load_env_file, load_raw_lines

logger = logging.getLogger(__name__)


class OutcomeKind(str, Enum):
    """What a policy decided about one entry."""
    NOT_APPLICABLE = "not_applicable"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Outcome:
    """Result of offering one key/value pair to one policy."""
    kind: OutcomeKind
    reason: str | None = None

    @classmethod
    def not_applicable(cls) -> "Outcome":
        return cls(OutcomeKind.NOT_APPLICABLE)

    @classmethod
    def accepted(cls) -> "Outcome":
        return cls(OutcomeKind.ACCEPTED)

    @classmethod
    def rejected(cls, reason: str) -> "Outcome":
        return cls(OutcomeKind.REJECTED, reason)

    @property
    def applies(self) -> bool:
        return self.kind != OutcomeKind.NOT_APPLICABLE


class ValidationPolicy(ABC):
    """Base class for validation policies.

    A policy owns one or more keys and must answer ``not_applicable`` for any
    other key. Checks must be deterministic and must not look at other keys.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Policy name for identification."""
        pass

    @abstractmethod
    def applies_and_check(self, key: str, value: str) -> Outcome:
        """Decide whether this policy owns ``key`` and, if so, judge ``value``."""
        pass


class VerdictStatus(str, Enum):
    """Final status of a validation run."""
    PASS = "pass"
    FAIL = "fail"


@dataclass(frozen=True)
class ContentViolation:
    """The first rejected value of a run."""
    key: str
    policy: str
    reason: str

    def __str__(self) -> str:
        return f"{self.policy}: {self.reason}"


@dataclass
class Verdict:
    """Outcome of one validation run."""
    status: VerdictStatus
    violation: ContentViolation | None = None
    missing_keys: list[str] = field(default_factory=list)
    counters: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == VerdictStatus.PASS

    @property
    def exit_code(self) -> int:
        """Exit code for CI: 0 = pass, 1 = fail."""
        return 0 if self.ok else 1

    @property
    def message(self) -> str:
        if self.violation:
            return self.violation.reason
        if self.missing_keys:
            return f"missing required keys: [{' '.join(self.missing_keys)}]"
        return ".env file is valid"

    def __str__(self) -> str:
        return f"[{self.status.value.upper()}] {self.message}"

    def raise_for_status(self) -> None:
        """Raise the matching EnvValidationError if the run failed."""
        if self.violation:
            raise ContentViolationError(
                self.violation.key, self.violation.policy, self.violation.reason, verdict=self
            )
        if self.missing_keys:
            raise MissingKeysError(self.missing_keys, verdict=self)

    def increment_counter(self, name: str, value: int = 1) -> None:
        """Increment a counter."""
        self.counters[name] = self.counters.get(name, 0) + value

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "status": self.status.value,
            "exit_code": self.exit_code,
            "message": self.message,
            "counters": self.counters,
            "violation": {
                "key": self.violation.key,
                "policy": self.violation.policy,
                "reason": self.violation.reason,
            } if self.violation else None,
            "missing_keys": list(self.missing_keys),
        }


class RequiredKeyLedger:
    """Tracks which required keys were seen during one run."""

    def __init__(self, required_names: Iterable[str]):
        self._seen: dict[str, bool] = {name: False for name in required_names}

    def is_required(self, key: str) -> bool:
        return key in self._seen

    def mark_seen(self, key: str) -> bool:
        """Mark ``key`` as seen. Returns False for keys that are not required."""
        if key not in self._seen:
            return False
        self._seen[key] = True
        return True

    def unsatisfied(self) -> list[str]:
        return sorted(name for name, seen in self._seen.items() if not seen)

    def __len__(self) -> int:
        return len(self._seen)


class PolicyRegistry:
    """Ordered policies consulted for every entry.

    Several policies may claim the same key; all of them run in registry
    order and the first rejection wins.
    """

    def __init__(self, policies: Iterable[ValidationPolicy] = ()):
        self._policies: list[ValidationPolicy] = list(policies)

    @classmethod
    def build(
        cls,
        built_ins: Iterable[ValidationPolicy],
        caller_supplied: Iterable[ValidationPolicy] | None = None,
    ) -> "PolicyRegistry":
        """Built-ins first, then caller policies in the order provided."""
        return cls([*built_ins, *(caller_supplied or [])])

    @property
    def names(self) -> list[str]:
        return [policy.name for policy in self._policies]

    def __iter__(self) -> Iterator[ValidationPolicy]:
        return iter(self._policies)

    def __len__(self) -> int:
        return len(self._policies)


class EnvValidator:
    """Validates .env entries against required keys and policies."""

    def __init__(
        self,
        required_keys: Iterable[str] = (),
        *,
        require_quotes: bool = False,
        verbose: bool = False,
        logger: logging.Logger | None = None,
        extra_policies: Iterable[ValidationPolicy] | None = None,
    ):
        from .policies import default_policies

        self.required_keys = list(dict.fromkeys(required_keys))
        self.require_quotes = require_quotes
        self.verbose = verbose
        self.logger = logger or logging.getLogger(__name__)
        self.extra_policies = list(extra_policies or [])
        self.built_ins = default_policies()
        self.registry = PolicyRegistry.build(self.built_ins, self.extra_policies)

    @classmethod
    def from_config(cls, config, logger: logging.Logger | None = None) -> "EnvValidator":
        """Create a validator from a loaded ValidatorConfig."""
        from .policies import build_policy

        return cls(
            config.required_keys,
            require_quotes=config.require_quotes,
            verbose=config.verbose,
            logger=logger,
            extra_policies=[build_policy(spec) for spec in config.policies],
        )

    def _trace(self, message: str) -> None:
        if self.verbose:
            self.logger.info(message)

    def _log_configuration(self, registry: PolicyRegistry) -> None:
        self._trace("Validator configuration:")
        self._trace(f"  RequireQuotes: {self.require_quotes}")
        self._trace(f"  Verbose: {self.verbose}")
        self._trace(f"  Required keys: {len(self.required_keys)}")
        self._trace(f"  Number of policies: {len(registry)}")

    def run(self, entries: Mapping[str, str], registry: PolicyRegistry | None = None) -> Verdict:
        """Validate one mapping of entries.

        Entries are visited in mapping order; for a plain dict that is the
        order the loader produced them in.

        Args:
            entries: Key/value pairs produced by the loader
            registry: Policies to consult (default: this validator's registry)

        Returns:
            Verdict for this run
        """
        registry = registry if registry is not None else self.registry
        ledger = RequiredKeyLedger(self.required_keys)
        verdict = Verdict(status=VerdictStatus.PASS)

        self._log_configuration(registry)

        for key, value in entries.items():
            self._trace(f"Processing key: {key}")
            verdict.increment_counter("keys_processed")

            if ledger.mark_seen(key):
                verdict.increment_counter("required_seen")
                self._trace(f"  {key} is a required variable.")
            else:
                self._trace(f"  {key} is an optional variable.")

            for policy in registry:
                outcome = policy.applies_and_check(key, value)
                if outcome.kind == OutcomeKind.REJECTED:
                    reason = outcome.reason or f"value for key {key!r} was rejected"
                    if self.verbose:
                        self.logger.error(f"Validation error for key {key} by {policy.name}: {reason}")
                    else:
                        self.logger.error(f"Validation error for key {key}: {reason}")
                    verdict.status = VerdictStatus.FAIL
                    verdict.violation = ContentViolation(key, policy.name, reason)
                    return verdict
                if outcome.kind == OutcomeKind.ACCEPTED:
                    verdict.increment_counter("keys_validated")
                    self._trace(f"  [Validated by: {policy.name}]")

        missing_keys = ledger.unsatisfied()
        if missing_keys:
            verdict.status = VerdictStatus.FAIL
            verdict.missing_keys = missing_keys
            self.logger.error(verdict.message)
            return verdict

        self.logger.info(".env file is valid.")
        return verdict

    def validate_file(self, file_path: str | Path) -> Verdict:
        """Load a .env file and validate it.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        from .policies import QuotedValuePolicy

        self.logger.info(f"Starting validation for file: {file_path}")
        entries = load_env_file(file_path)

        registry = self.registry
        if self.require_quotes:
            quoting = QuotedValuePolicy(load_raw_lines(file_path))
            registry = PolicyRegistry.build([*self.built_ins, quoting], self.extra_policies)

        return self.run(entries, registry)

    def validate_dotenv(self, file_path: str | Path) -> None:
        """Validate a .env file, raising EnvValidationError on failure."""
        self.validate_file(file_path).raise_for_status()
