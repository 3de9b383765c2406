"""Persisted KEY="value" credential store (the project's .env file).

The file is shared with docker compose, which reads it for variable
interpolation, and stays hand-editable. This module is its only writer and
only ever appends: values already present are never rewritten.
"""
from __future__ import annotations

import logging
import re
import secrets
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .errors import ConfigError


logger = logging.getLogger(__name__)

HEADER = "# Auto-generated local credentials. Edit values to customize your setup.\n"

_LINE_RE = re.compile(r"^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)=(.*)$")


def random_hex(byte_length: int = 24) -> str:
    """Return ``byte_length`` random bytes as lowercase hex."""
    if byte_length < 1:
        raise ValueError("byte_length must be positive")
    return secrets.token_hex(byte_length)


def escape_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def format_entry(key: str, value: str) -> str:
    return f'{key}="{escape_value(value)}"\n'


def _parse_double_quoted(raw: str) -> Optional[str]:
    # raw starts just after the opening quote
    out: List[str] = []
    i = 0
    while i < len(raw):
        ch = raw[i]
        if ch == "\\" and i + 1 < len(raw) and raw[i + 1] in ('"', "\\"):
            out.append(raw[i + 1])
            i += 2
            continue
        if ch == '"':
            rest = raw[i + 1 :].strip()
            if rest and not rest.startswith("#"):
                return None
            return "".join(out)
        out.append(ch)
        i += 1
    return None


def parse_line(line: str) -> Optional[Tuple[str, str]]:
    """Parse one line into ``(key, value)``.

    Returns None for blank lines and comments. Raises ValueError when the
    line is not a recognizable assignment.
    """
    text = line.strip()
    if not text or text.startswith("#"):
        return None
    m = _LINE_RE.match(text)
    if not m:
        raise ValueError("expected KEY=value")
    key, raw = m.group(1), m.group(2).strip()
    if raw.startswith('"'):
        value = _parse_double_quoted(raw[1:])
        if value is None:
            raise ValueError("unterminated double-quoted value")
        return key, value
    if raw.startswith("'"):
        end = raw.find("'", 1)
        if end == -1:
            raise ValueError("unterminated single-quoted value")
        return key, raw[1:end]
    return key, raw


class EnvStore:
    """In-memory view of the .env file plus the entries created this run."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._values: Dict[str, str] = {}
        self._pending: List[Tuple[str, str]] = []
        self.added: List[str] = []
        self.existed = False

    def load(self) -> None:
        """Read persisted entries; an absent file yields an empty store."""
        self._values = {}
        self._pending = []
        self.added = []
        self.existed = self.path.exists()
        if not self.existed:
            logger.debug("No env store at %s; starting empty", self.path)
            return
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Failed to read env store {self.path}: {e}") from e
        for lineno, line in enumerate(text.splitlines(), start=1):
            try:
                parsed = parse_line(line)
            except ValueError as e:
                raise ConfigError(f"{self.path}:{lineno}: {e}") from e
            if parsed is None:
                continue
            key, value = parsed
            self._values[key] = value
        logger.debug("Loaded %d entries from %s", len(self._values), self.path)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._values.get(key, default)

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def as_dict(self) -> Dict[str, str]:
        return dict(self._values)

    def has_value(self, key: str) -> bool:
        return bool(self._values.get(key))

    def ensure_default(self, key: str, value: str) -> bool:
        """Set ``key`` to ``value`` only if it is missing or empty.

        An empty entry already in the file stays there; the new entry is
        appended after it and wins on the next load.
        """
        if self.has_value(key):
            return False
        self._values[key] = value
        self._pending.append((key, value))
        self.added.append(key)
        return True

    def ensure_random(self, key: str, byte_length: int) -> bool:
        if self.has_value(key):
            return False
        return self.ensure_default(key, random_hex(byte_length))

    @property
    def pending(self) -> List[Tuple[str, str]]:
        return list(self._pending)

    def persist_appended(self) -> int:
        """Append entries created since load, in creation order."""
        if not self._pending:
            return 0
        needs_header = not self.path.exists()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if not needs_header:
                needs_newline = not self.path.read_bytes().endswith(b"\n") and self.path.stat().st_size > 0
            else:
                needs_newline = False
            with open(self.path, "a", encoding="utf-8") as f:
                if needs_header:
                    f.write(HEADER)
                elif needs_newline:
                    f.write("\n")
                for key, value in self._pending:
                    f.write(format_entry(key, value))
        except OSError as e:
            raise ConfigError(f"Failed to write env store {self.path}: {e}") from e
        count = len(self._pending)
        self._pending = []
        logger.debug("Appended %d entries to %s", count, self.path)
        return count
