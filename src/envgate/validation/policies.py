"""Built-in validation policies.

Each policy owns a single key (except the quoting policy, which owns every
key with a recorded raw line) and answers ``not_applicable`` for the rest.
"""

import ipaddress
import logging
import re
from collections.abc import Iterable, Mapping
from urllib.parse import urlsplit

from ..config import PolicyKind, PolicySpec
from .framework import Outcome, ValidationPolicy

logger = logging.getLogger(__name__)

INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")

DEFAULT_BOOLEAN_VALUES = ("true", "false", "1", "0", "yes", "no")

PRIVATE_NETWORKS = tuple(
    ipaddress.ip_network(cidr)
    for cidr in (
        "10.0.0.0/8",
        "172.16.0.0/12",
        "192.168.0.0/16",
        "::1/128",
        "fc00::/7",
    )
)


def format_list(values: Iterable[str]) -> str:
    return f"[{' '.join(values)}]"


class BooleanPolicy(ValidationPolicy):
    """Value must be one of the accepted boolean literals, ignoring case."""

    def __init__(self, key: str, accepted_values: Iterable[str] = DEFAULT_BOOLEAN_VALUES):
        self.key = key
        self.accepted_values = list(accepted_values)
        self._normalized = {value.lower() for value in self.accepted_values}

    @property
    def name(self) -> str:
        return "BooleanValidationPlugin"

    def applies_and_check(self, key: str, value: str) -> Outcome:
        if key != self.key:
            return Outcome.not_applicable()

        if value.strip().lower() not in self._normalized:
            return Outcome.rejected(
                f"value for key {key!r} must be a boolean "
                f"(accepted values: {format_list(self.accepted_values)})"
            )
        return Outcome.accepted()


class EnumPolicy(ValidationPolicy):
    """Value must be one of a fixed set of options."""

    def __init__(self, key: str, allowed_values: Iterable[str], case_sensitive: bool = True):
        self.key = key
        self.allowed_values = list(allowed_values)
        self.case_sensitive = case_sensitive

    @property
    def name(self) -> str:
        return "EnumValidationPlugin"

    def _matches(self, value: str, allowed: str) -> bool:
        if self.case_sensitive:
            return value == allowed
        return value.casefold() == allowed.casefold()

    def applies_and_check(self, key: str, value: str) -> Outcome:
        if key != self.key:
            return Outcome.not_applicable()

        if any(self._matches(value, allowed) for allowed in self.allowed_values):
            return Outcome.accepted()
        return Outcome.rejected(
            f"value for key {key!r} must be one of {format_list(self.allowed_values)}"
        )


class IPAddressPolicy(ValidationPolicy):
    """Value must be an IP address, optionally of given versions and private."""

    def __init__(
        self,
        key: str,
        allowed_versions: Iterable[str] | None = None,
        must_be_private: bool = False,
    ):
        self.key = key
        self.allowed_versions = list(allowed_versions or [])
        self.must_be_private = must_be_private

    @property
    def name(self) -> str:
        return "IPAddressValidationPlugin"

    def _version_allowed(self, address: ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
        for version in self.allowed_versions:
            version = version.lower()
            if version == "ipv4" and address.version == 4:
                return True
            if version == "ipv6" and address.version == 6:
                return True
        return False

    def applies_and_check(self, key: str, value: str) -> Outcome:
        if key != self.key:
            return Outcome.not_applicable()

        try:
            address = ipaddress.ip_address(value.strip())
        except ValueError:
            return Outcome.rejected(f"value for key {key!r} must be a valid IP address")

        # IPv4-mapped IPv6 addresses are judged as the IPv4 address they carry
        if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped:
            address = address.ipv4_mapped

        if self.allowed_versions and not self._version_allowed(address):
            return Outcome.rejected(
                f"value for key {key!r} must be one of the following IP versions: "
                f"{format_list(self.allowed_versions)}"
            )

        if self.must_be_private and not is_private_ip(address):
            return Outcome.rejected(f"value for key {key!r} must be a private IP address")

        return Outcome.accepted()


def is_private_ip(address: ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
    """Check membership in the reserved private blocks."""
    return any(
        address.version == network.version and address in network
        for network in PRIVATE_NETWORKS
    )


class URLPolicy(ValidationPolicy):
    """Value must be an absolute URL, optionally with an allowed scheme."""

    def __init__(self, key: str, allowed_schemes: Iterable[str] | None = None):
        self.key = key
        self.allowed_schemes = list(allowed_schemes or [])

    @property
    def name(self) -> str:
        return "URLValidationPlugin"

    def applies_and_check(self, key: str, value: str) -> Outcome:
        if key != self.key:
            return Outcome.not_applicable()

        try:
            parsed = urlsplit(value)
            hostname = parsed.hostname
        except ValueError:
            return Outcome.rejected(f"value for key {key!r} must be a valid URL")

        if not parsed.scheme or not hostname:
            return Outcome.rejected(f"value for key {key!r} must be a valid URL")

        if self.allowed_schemes:
            scheme = parsed.scheme.lower()
            if not any(scheme == allowed.lower() for allowed in self.allowed_schemes):
                return Outcome.rejected(
                    f"URL scheme for key {key!r} must be one of {format_list(self.allowed_schemes)}"
                )

        return Outcome.accepted()


class NumericRangePolicy(ValidationPolicy):
    """Value must be an integer within an inclusive range."""

    def __init__(self, key: str, minimum: int | None = None, maximum: int | None = None):
        self.key = key
        self.minimum = minimum
        self.maximum = maximum

    @property
    def name(self) -> str:
        return "NumericRangeValidationPlugin"

    def _describe_range(self) -> str:
        if self.minimum is not None and self.maximum is not None:
            return f"between {self.minimum} and {self.maximum}"
        if self.minimum is not None:
            return f"at least {self.minimum}"
        return f"at most {self.maximum}"

    def applies_and_check(self, key: str, value: str) -> Outcome:
        if key != self.key:
            return Outcome.not_applicable()

        # ASCII digits only; int() would also take underscores and other scripts
        value = value.strip()
        if not INTEGER_PATTERN.fullmatch(value):
            return Outcome.rejected(f"{key} must be a numeric value")
        number = int(value)

        if (self.minimum is not None and number < self.minimum) or (
            self.maximum is not None and number > self.maximum
        ):
            return Outcome.rejected(f"{key} must be {self._describe_range()}")

        return Outcome.accepted()


class QuotedValuePolicy(ValidationPolicy):
    """Raw assignment must wrap its value in single or double quotes."""

    def __init__(self, raw_lines: Mapping[str, str]):
        self.raw_lines = dict(raw_lines)

    @property
    def name(self) -> str:
        return "QuotedValueValidationPlugin"

    @staticmethod
    def is_quoted(raw_line: str) -> bool:
        _, _, raw_value = raw_line.partition("=")
        raw_value = raw_value.strip()
        if not raw_value or raw_value[0] not in "'\"":
            return False
        return raw_value.find(raw_value[0], 1) != -1

    def applies_and_check(self, key: str, value: str) -> Outcome:
        raw_line = self.raw_lines.get(key)
        if raw_line is None:
            return Outcome.not_applicable()

        if not self.is_quoted(raw_line):
            return Outcome.rejected(f"value for key {key!r} must be quoted")
        return Outcome.accepted()


def default_policies() -> list[ValidationPolicy]:
    """Create the built-in policies, pre-configured for conventional keys."""
    return [
        URLPolicy("API_URL", allowed_schemes=["https"]),
        EnumPolicy("ENVIRONMENT", ["DEVELOPMENT", "STAGING", "PRODUCTION"], case_sensitive=True),
        BooleanPolicy("ENABLE_DEBUG", DEFAULT_BOOLEAN_VALUES),
        IPAddressPolicy("TRUSTED_PROXY_IP", allowed_versions=["IPv4", "IPv6"], must_be_private=True),
    ]


def build_policy(spec: PolicySpec) -> ValidationPolicy:
    """Create a policy from its configuration description."""
    kind = PolicyKind(spec.kind)
    logger.debug(f"Building {kind.value} policy for {spec.key}")

    if kind == PolicyKind.BOOLEAN:
        return BooleanPolicy(spec.key, spec.accepted_values or DEFAULT_BOOLEAN_VALUES)
    if kind == PolicyKind.ENUM:
        return EnumPolicy(spec.key, spec.allowed_values, case_sensitive=spec.case_sensitive)
    if kind == PolicyKind.IP:
        return IPAddressPolicy(spec.key, spec.allowed_versions, must_be_private=spec.must_be_private)
    if kind == PolicyKind.URL:
        return URLPolicy(spec.key, spec.allowed_schemes)
    return NumericRangePolicy(spec.key, spec.minimum, spec.maximum)
