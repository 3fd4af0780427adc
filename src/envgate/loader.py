"""Loading of .env files into key/value mappings.

Parsing is delegated to python-dotenv. Lines that carry no ``=`` separator
or an empty key are dropped without error.
"""

import logging
from pathlib import Path

from dotenv import dotenv_values
from dotenv.parser import parse_stream

logger = logging.getLogger(__name__)


def load_env_file(file_path: str | Path) -> dict[str, str]:
    """Read a .env file into an ordered mapping of key to unquoted value.

    Args:
        file_path: Path to the .env file

    Returns:
        Mapping in file order; later duplicates override earlier ones

    Raises:
        FileNotFoundError: If the file does not exist
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        raise FileNotFoundError(f"Env file not found: {file_path}")

    values = dotenv_values(file_path, interpolate=False)

    entries: dict[str, str] = {}
    for key, value in values.items():
        if not key or value is None:
            logger.debug(f"Skipping malformed entry: {key!r}")
            continue
        entries[key] = value

    return entries


def load_raw_lines(file_path: str | Path) -> dict[str, str]:
    """Map each key to the raw text of its assignment line."""
    file_path = Path(file_path)
    if not file_path.is_file():
        raise FileNotFoundError(f"Env file not found: {file_path}")

    raw_lines: dict[str, str] = {}
    with open(file_path, encoding="utf-8") as f:
        for binding in parse_stream(f):
            if binding.error or not binding.key or binding.value is None:
                continue
            raw_lines[binding.key] = binding.original.string.strip()

    return raw_lines
