"""Validation engine for .env entries.

Policies decide about individual values, the ledger tracks required keys,
and the validator combines both into a single pass over a .env mapping.
"""

from .framework import (
    ContentViolation,
    EnvValidator,
    Outcome,
    OutcomeKind,
    PolicyRegistry,
    RequiredKeyLedger,
    ValidationPolicy,
    Verdict,
    VerdictStatus,
)
from .policies import (
    BooleanPolicy,
    EnumPolicy,
    IPAddressPolicy,
    NumericRangePolicy,
    QuotedValuePolicy,
    URLPolicy,
    build_policy,
    default_policies,
)

__all__ = [
    "ContentViolation",
    "EnvValidator",
    "Outcome",
    "OutcomeKind",
    "PolicyRegistry",
    "RequiredKeyLedger",
    "ValidationPolicy",
    "Verdict",
    "VerdictStatus",
    "BooleanPolicy",
    "EnumPolicy",
    "IPAddressPolicy",
    "NumericRangePolicy",
    "QuotedValuePolicy",
    "URLPolicy",
    "build_policy",
    "default_policies",
]
