"""Exit-code constants used by the CLI layer.

Centralised here so that every exit path uses a well-known, tested
value rather than magic integers scattered across the codebase.  A
failed session exits with the session's own status instead.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Clean exit — session ended normally, or nothing matched the selector."""

GENERAL_ERROR: int = 1
"""A known SsmConnectError was caught, or ``-h`` was given."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C.  Follows POSIX convention (128 + SIGINT=2)."""

UNEXPECTED_ERROR: int = 2
"""An unhandled exception escaped all known error boundaries."""
