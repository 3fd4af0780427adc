"""envgate - validate .env files against required keys and value policies.

envgate checks that mandatory keys are present and that values such as
URLs, IP addresses, enums and booleans satisfy their policies.
"""

__version__ = "0.1.0"
__author__ = "envgate contributors"
__description__ = "Validate .env files against required keys and value policies"

from envgate.config import ValidatorConfig
from envgate.errors import ContentViolationError, EnvValidationError, MissingKeysError
from envgate.validation import EnvValidator, Verdict

__all__ = [
    "__version__",
    "__author__",
    "__description__",
    "ValidatorConfig",
    "EnvValidator",
    "Verdict",
    "EnvValidationError",
    "ContentViolationError",
    "MissingKeysError",
]
