"""Domain models for ssm-connect.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access and rendering.  They carry zero I/O and
no dependencies on external packages.
"""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from typing import Union

from ssm_connect.exceptions import UsageError
from ssm_connect.utils.constants import MIN_LOCAL_PORT


# ---------------------------------------------------------------------------
# Action
# ---------------------------------------------------------------------------

class Action(enum.Enum):
    """What to open on the chosen instance."""

    SHELL = "ssh"
    TUNNEL = "tunnel"


# ---------------------------------------------------------------------------
# Tag filters
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class TagKey:
    """Match any instance carrying *key*, whatever its value."""

    key: str

    def describe(self) -> str:
        return f"tag key {self.key}"


@dataclass(frozen=True, slots=True)
class TagKeyValue:
    """Match instances whose tag *key* equals *value* exactly."""

    key: str
    value: str

    def describe(self) -> str:
        return f"{self.key}={self.value}"


TagFilter = Union[TagKey, TagKeyValue]


def parse_tag_filter(raw: str) -> TagFilter:
    """Parse ``key`` or ``key=value`` into a :data:`TagFilter`.

    Only the first ``=`` separates key from value, so values may
    themselves contain ``=``.

    Raises
    ------
    UsageError
        If the key is empty, or a ``=`` is present with nothing after it.
    """
    key, sep, value = raw.partition("=")
    key = key.strip()
    if not key:
        raise UsageError(f"Invalid tag selector {raw!r}: tag key is empty.")
    if not sep:
        return TagKey(key)
    if not value:
        raise UsageError(
            f"Invalid tag selector {raw!r}: value after '=' is empty.",
            hint="Use -t KEY to match any value, or -t KEY=VALUE.",
        )
    return TagKeyValue(key, value)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Configuration:
    """Parsed command-line configuration, built once by the parser."""

    action: Action
    region: str
    profile: str | None
    tag_filter: TagFilter | None
    instance_id: str | None
    local_port: int
    interactive: bool = False

    def __post_init__(self) -> None:
        if self.tag_filter is None and not self.instance_id:
            raise UsageError(
                "No instance selector given.",
                hint="Pass -n NAME, -t KEY[=VALUE] or -x INSTANCE_ID.",
            )
        if self.local_port <= MIN_LOCAL_PORT:
            raise UsageError(
                f"Local port {self.local_port} is not allowed.",
                hint=f"Choose a port greater than {MIN_LOCAL_PORT}.",
            )


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class InstanceRecord:
    """A single running instance returned by the inventory query."""

    instance_id: str
    """EC2 instance id (e.g. ``i-0abc123``)."""

    name: str = ""
    """Value of the ``Name`` tag, or ``""`` when the instance has none."""

    def label(self) -> str:
        """Render ``"id (name)"`` for menus and status lines."""
        return f"{self.instance_id} ({self.name})"


# ---------------------------------------------------------------------------
# Session request
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SessionRequest:
    """Everything needed to run ``aws ssm start-session`` once."""

    target: str
    region: str
    profile: str | None
    document_name: str | None = None
    parameters: dict[str, list[str]] | None = None

    def command(self, executable: str = "aws") -> list[str]:
        """Render the ``start-session`` argv for this request."""
        argv = [
            executable,
            "ssm",
            "start-session",
            "--target",
            self.target,
            "--region",
            self.region,
        ]
        if self.profile:
            argv += ["--profile", self.profile]
        if self.document_name:
            argv += ["--document-name", self.document_name]
        if self.parameters is not None:
            argv += [
                "--parameters",
                json.dumps(self.parameters, separators=(",", ":")),
            ]
        return argv
