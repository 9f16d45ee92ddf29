"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — so every external process can be stubbed in tests.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

Filter = dict[str, Any]
"""One ``describe-instances`` filter: ``{"Name": ..., "Values": [...]}``."""


class InventoryProvider(Protocol):
    """Contract for instance inventory backends."""

    def describe_instances(
        self,
        filters: Sequence[Filter],
        region: str,
        profile: str | None,
    ) -> str:
        """Return newline-delimited ``<instance-id> <name>`` text.

        *filters* follow the EC2 API shape, one map per filter, with
        every value kept as a distinct list element.  Lines must be returned
        in the order the inventory API produced them.

        Raises
        ------
        InventoryQueryError
            When the query itself fails.
        """
        ...  # pragma: no cover


class SessionLauncher(Protocol):
    """Contract for running the external session command."""

    def launch(self, argv: Sequence[str]) -> int:
        """Run *argv* with inherited stdio, wait, and return its status.

        Raises
        ------
        EnvironmentError
            When the executable cannot be started at all.
        """
        ...  # pragma: no cover


class PluginInstaller(Protocol):
    """Contract for the session-manager-plugin self-install step."""

    def install(self, target: Path) -> None:
        """Install the plugin so that *target* exists afterwards.

        Raises
        ------
        EnvironmentError
            When the platform is unsupported or any install step fails.
        """
        ...  # pragma: no cover


class VersionProbe(Protocol):
    """Contract for reading the installed AWS CLI version."""

    def version(self) -> str:
        """Return the dotted version string reported by the CLI."""
        ...  # pragma: no cover
