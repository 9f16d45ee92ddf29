"""Preflight checks run before every session.

Verifies that the AWS CLI is recent enough to run ``ssm start-session``
and that ``session-manager-plugin`` is installed, installing it through
an injected :class:`~ssm_connect.core.protocols.PluginInstaller` when it
is missing.

This module lives in the CLI layer because it reports progress to the
operator; the checks themselves live in ``infra`` and ``core``.
"""

from __future__ import annotations

from pathlib import Path

from ssm_connect.cli.console import console, escape
from ssm_connect.core.protocols import PluginInstaller, VersionProbe
from ssm_connect.core.versioning import is_version_at_least
from ssm_connect.exceptions import EnvironmentError
from ssm_connect.infra.session_plugin import detect_session_plugin
from ssm_connect.utils.constants import MIN_AWS_CLI_VERSION, PLUGIN_PATH


def check_cli_version(
    probe: VersionProbe,
    minimum: str = MIN_AWS_CLI_VERSION,
) -> str:
    """Return the installed AWS CLI version, or fail if older than *minimum*.

    Raises
    ------
    EnvironmentError
        When the CLI is missing or too old.
    """
    version = probe.version()
    if not is_version_at_least(version, minimum):
        raise EnvironmentError(
            f"AWS CLI {version} is too old; {minimum} or newer is required.",
            hint="Upgrade the AWS CLI, e.g. pip install --upgrade awscli",
        )
    return version


def ensure_session_plugin(
    installer: PluginInstaller,
    path: Path = PLUGIN_PATH,
) -> Path:
    """Make sure ``session-manager-plugin`` exists at *path*.

    The installer is only called when the binary is absent.
    """
    status = detect_session_plugin(path)
    if status.found:
        return status.path

    console.print(
        f"[yellow]session-manager-plugin not found at "
        f"{escape(str(status.path))}.[/yellow] "
        "Installing…"
    )
    installer.install(status.path)

    if not detect_session_plugin(path).found:
        raise EnvironmentError(
            f"session-manager-plugin is still missing at {status.path}.",
        )
    console.print("[green]session-manager-plugin installed.[/green]")
    return status.path


def run_preflight(
    installer: PluginInstaller,
    probe: VersionProbe,
    *,
    plugin_path: Path = PLUGIN_PATH,
) -> None:
    """Run every preflight check; the first failure raises."""
    check_cli_version(probe)
    ensure_session_plugin(installer, plugin_path)
