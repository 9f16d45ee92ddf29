"""Custom exception hierarchy for ssm-connect.

All exceptions that cross layer boundaries must inherit from
:class:`SsmConnectError`.  Raw subprocess, OS and HTTP exceptions must
NEVER propagate beyond the infrastructure layer — they are caught there
and re-raised as a typed subclass defined here.

Hierarchy
---------
SsmConnectError
├── UsageError
├── EnvironmentError
│   └── PluginInstallError
├── InventoryQueryError
├── InputError
└── DispatchError
"""

from __future__ import annotations


class SsmConnectError(Exception):
    """Base exception for all ssm-connect errors.

    Every user-visible error condition maps to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Arguments -------------------------------------------------------------

class UsageError(SsmConnectError):
    """Raised when command-line arguments are missing or invalid."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(SsmConnectError):
    """Raised when a required external tool is missing or too old."""


class PluginInstallError(EnvironmentError):
    """Raised when the session-manager-plugin self-install fails."""


# --- Inventory -------------------------------------------------------------

class InventoryQueryError(SsmConnectError):
    """Raised when ``aws ec2 describe-instances`` fails."""


# --- Selection -------------------------------------------------------------

class InputError(SsmConnectError):
    """Raised when the interactive instance choice is invalid."""


# --- Session ---------------------------------------------------------------

class DispatchError(SsmConnectError):
    """Raised when a session cannot be dispatched or exits non-zero.

    ``exit_status`` carries the session process's own status so the CLI
    can exit with it unchanged.  ``None`` when no process was started.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        exit_status: int | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.exit_status: int | None = exit_status
