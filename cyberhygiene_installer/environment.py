# Path and File Name : /home/cyberhygiene/installer/cyberhygiene_installer/environment.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Read-only installation environment loaded once from install_vars.sh or YAML

"""
Environment Store: Single source of installation variables for one run.

Sources:
- Shell variables file (install_vars.sh): KEY=value lines, optional 'export',
  shell quoting, '#' comments at word start, ${OTHER} references to keys
  defined earlier (an undefined reference is an error, command substitution
  is rejected)
- YAML mapping (.yaml / .yml), every scalar read as literal text

FAIL-CLOSED RULES:
- Loaded exactly once, before the first module runs
- Missing/malformed source aborts the whole run (ConfigLoadError)
- Required keys absent or empty abort the whole run (ConfigLoadError)
- Store is immutable after load; modules and checks only read it
"""

import re
import shlex
from collections.abc import Mapping
from pathlib import Path
from string import Template
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Optional, Union

import yaml
from jsonschema import Draft7Validator

from .errors import ConfigLoadError, MissingConfig


REQUIRED_KEYS = (
    'DOMAIN',
    'DC1_HOSTNAME',
    'DC1_IP',
    'ADMIN_PASSWORD',
    'SSL_CERT_PATH',
    'SSL_KEY_PATH',
    'TIMEZONE',
    'INSTALL_DATE',
)

ENVIRONMENT_SCHEMA = {
    'type': 'object',
    'required': list(REQUIRED_KEYS),
    'properties': {key: {'type': 'string', 'minLength': 1} for key in REQUIRED_KEYS},
    'additionalProperties': {'type': 'string'},
}

SENSITIVE_MARKERS = ('PASSWORD', 'SECRET', 'TOKEN')

_ASSIGNMENT = re.compile(r'^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)=(.*)$')

_UNSET = object()


class EnvironmentStore(Mapping):
    """Immutable mapping of installation variables."""

    def __init__(self, values: Mapping, source: Optional[Path] = None):
        self._values = MappingProxyType(dict(values))
        self.source = source

    def __getitem__(self, name: str) -> str:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def get(self, name: str, default=_UNSET) -> str:
        """
        Get a variable value.

        Args:
            name: Variable name
            default: Returned instead of raising when the variable is missing

        Returns:
            Non-empty variable value

        Raises:
            MissingConfig: If the variable is absent or empty and no default given
        """
        value = self._values.get(name)
        if value:
            return value
        if default is not _UNSET:
            return default
        raise MissingConfig([name])

    def require(self, names: Iterable[str]) -> None:
        """
        Verify all named variables are present and non-empty.

        Raises:
            MissingConfig: Naming every missing variable at once
        """
        missing = [name for name in names if not self._values.get(name)]
        if missing:
            raise MissingConfig(missing)

    def redacted(self) -> Dict[str, str]:
        """Copy of the store with secrets masked, safe for logging."""
        return {
            key: ('********' if any(marker in key for marker in SENSITIVE_MARKERS) else value)
            for key, value in self._values.items()
        }

    def __repr__(self) -> str:
        return f"EnvironmentStore({self.redacted()!r})"


def parse_vars_file(text: str) -> Dict[str, str]:
    """
    Parse a shell-style variables file.

    Args:
        text: File contents

    Returns:
        Dictionary of variables in definition order

    Raises:
        ConfigLoadError: On any line that is not a plain assignment
    """
    values: Dict[str, str] = {}

    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith('#'):
            continue

        match = _ASSIGNMENT.match(line)
        if not match:
            raise ConfigLoadError(f"line {line_number}: not a variable assignment: {line!r}")

        key = match.group(1)
        raw_value = _strip_comment(match.group(2), line_number, key).strip()

        try:
            tokens = shlex.split(raw_value, comments=False, posix=True)
        except ValueError as e:
            raise ConfigLoadError(f"line {line_number}: cannot parse value of {key}: {e}")

        if len(tokens) > 1:
            raise ConfigLoadError(f"line {line_number}: unquoted whitespace in value of {key}")

        value = tokens[0] if tokens else ''

        # Single-quoted values are literal, as in the shell
        if not raw_value.startswith("'"):
            value = _expand(value, values, line_number, key)

        values[key] = value

    return values


def _strip_comment(raw_value: str, line_number: int, key: str) -> str:
    """
    Drop a trailing shell comment from an assignment value.

    '#' only starts a comment at the beginning of a word outside quotes,
    so 'Pa#ss' keeps its '#'.

    Raises:
        ConfigLoadError: On command substitution outside single quotes
    """
    quote = None
    escaped = False

    for index, char in enumerate(raw_value):
        if escaped:
            escaped = False
            continue
        if quote == "'":
            if char == "'":
                quote = None
            continue
        if char == '\\':
            escaped = True
            continue

        if char == '`' or raw_value.startswith('$(', index):
            raise ConfigLoadError(
                f"line {line_number}: command substitution is not supported for {key}; "
                "write the literal value"
            )

        if quote == '"':
            if char == '"':
                quote = None
        elif char in ('"', "'"):
            quote = char
        elif char == '#' and index > 0 and raw_value[index - 1].isspace():
            return raw_value[:index]

    return raw_value


def _expand(value: str, defined: Mapping, line_number: int, key: str) -> str:
    """
    Expand $VAR / ${VAR} references to keys defined earlier in the file.

    Raises:
        ConfigLoadError: If a reference names a key not defined above it
    """
    for match in Template.pattern.finditer(value):
        name = match.group('named') or match.group('braced')
        if name and name not in defined:
            raise ConfigLoadError(
                f"line {line_number}: {key} references undefined variable {name}"
            )
    return Template(value).safe_substitute(defined)


class _LiteralLoader(yaml.SafeLoader):
    """SafeLoader that keeps every plain scalar as its literal text."""


# No implicit typing: 0123456 stays '0123456', yes stays 'yes'
_LiteralLoader.yaml_implicit_resolvers = {}


def parse_yaml_file(text: str) -> Dict[str, str]:
    """Parse a YAML mapping of scalar variables. Values are taken verbatim."""
    try:
        data = yaml.load(text, Loader=_LiteralLoader)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"invalid YAML: {e}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigLoadError("YAML environment must be a mapping of KEY: value")

    values: Dict[str, str] = {}
    for key, value in data.items():
        if not isinstance(key, str):
            raise ConfigLoadError(f"variable name must be a string: {key!r}")
        if not isinstance(value, str):
            raise ConfigLoadError(f"variable {key} must be a plain string value")
        values[key] = value

    return values


def validate_environment(values: Mapping) -> None:
    """
    Validate loaded values against the environment schema.

    Raises:
        ConfigLoadError: Listing every schema violation
    """
    validator = Draft7Validator(ENVIRONMENT_SCHEMA)
    errors = sorted(validator.iter_errors(dict(values)), key=lambda e: list(e.path))
    if errors:
        details = '; '.join(error.message for error in errors)
        raise ConfigLoadError(f"environment validation failed: {details}")


def load_environment(source: Union[str, Path]) -> EnvironmentStore:
    """
    Load the installation environment.

    Args:
        source: Path to install_vars.sh or a YAML file

    Returns:
        Validated, immutable EnvironmentStore

    Raises:
        ConfigLoadError: If source missing, unreadable, malformed or incomplete
    """
    path = Path(source)

    if not path.is_file():
        raise ConfigLoadError(f"environment source not found: {path}")

    try:
        text = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigLoadError(f"cannot read environment source {path}: {e}")

    if path.suffix in ('.yaml', '.yml'):
        values = parse_yaml_file(text)
    else:
        values = parse_vars_file(text)

    validate_environment(values)

    return EnvironmentStore(values, source=path)
