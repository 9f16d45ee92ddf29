"""Dotted version comparison.

Versions are normalised to four numeric parts, each zero-padded to
three digits, so that plain string comparison orders them numerically
(``"1.2.5"`` < ``"1.16.299"``).
"""

from __future__ import annotations

import re

_PARTS: int = 4
_WIDTH: int = 3
_LEADING_DIGITS = re.compile(r"\d+")


def version_key(version: str) -> str:
    """Return the comparable key for *version*.

    Non-numeric suffixes (``"0rc1"``) keep their leading digits; parts
    without digits count as ``0``.  Extra parts beyond four are ignored.
    """
    parts: list[str] = []
    for raw in version.strip().split(".")[:_PARTS]:
        match = _LEADING_DIGITS.match(raw)
        parts.append(match.group(0) if match else "0")
    parts.extend("0" for _ in range(_PARTS - len(parts)))
    return ".".join(part.zfill(_WIDTH) for part in parts)


def is_version_at_least(actual: str, minimum: str) -> bool:
    """Return ``True`` when *actual* is the same as or newer than *minimum*."""
    return version_key(actual) >= version_key(minimum)
