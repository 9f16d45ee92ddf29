"""Named defaults and fixed AWS identifiers.

Centralised here so that the parser, the services and the installer
agree on the same values instead of repeating literals.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_REGION: str = "us-east-1"
"""Region used when ``-r`` is not given."""

DEFAULT_LOCAL_PORT: int = 9999
"""Local port for ``-a tunnel`` when ``-o`` is not given."""

MIN_LOCAL_PORT: int = 1024
"""Local ports must be strictly greater than this (non-privileged)."""

REMOTE_PORT: int = 22
"""Remote port on the instance that tunnels forward to."""

PORT_FORWARD_DOCUMENT: str = "AWS-StartPortForwardingSession"
"""SSM document used for local port-forwarding sessions."""

NAME_TAG: str = "Name"
"""Tag key targeted by the ``-n`` shorthand and shown in menus."""

RUNNING_STATE: str = "running"

MIN_AWS_CLI_VERSION: str = "1.16.12"
"""Oldest AWS CLI release that ships ``ssm start-session``."""

PLUGIN_INSTALL_ROOT: Path = Path("/usr/local/sessionmanagerplugin")
PLUGIN_PATH: Path = PLUGIN_INSTALL_ROOT / "bin" / "session-manager-plugin"
PLUGIN_LINK: Path = Path("/usr/local/bin/session-manager-plugin")

PLUGIN_DOWNLOAD_BASE_URL: str = (
    "https://s3.amazonaws.com/session-manager-downloads/plugin/latest"
)

DOWNLOAD_TIMEOUT_SECONDS: float = 60.0
