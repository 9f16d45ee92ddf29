"""AWS CLI backed implementations of the core protocols.

This module is the **only** place in the codebase that runs the ``aws``
executable.  Subprocess and OS failures are caught here and re-raised
as typed :class:`~ssm_connect.exceptions.SsmConnectError` subclasses.
"""

from __future__ import annotations

import json
import re
import shutil
import signal
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from ssm_connect.core.protocols import Filter
from ssm_connect.exceptions import EnvironmentError, InventoryQueryError
from ssm_connect.utils.constants import NAME_TAG

_AWS: str = "aws"
_VERSION_PATTERN = re.compile(r"(\d+(?:\.\d+)+)")
_INSTALL_HINT: str = (
    "Install the AWS CLI: "
    "https://docs.aws.amazon.com/cli/latest/userguide/getting-started-install.html"
)


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class AwsCliStatus:
    """Result of locating the ``aws`` executable on PATH."""

    found: bool
    path: Path | None


def detect_aws_cli() -> AwsCliStatus:
    """Probe PATH for the ``aws`` executable."""
    result = shutil.which(_AWS)
    if result is None:
        return AwsCliStatus(found=False, path=None)
    return AwsCliStatus(found=True, path=Path(result))


def require_aws_cli() -> Path:
    """Locate ``aws`` or raise :class:`EnvironmentError`."""
    status = detect_aws_cli()
    if not status.found or status.path is None:
        raise EnvironmentError(
            "The AWS CLI is not installed or not on PATH.",
            hint=_INSTALL_HINT,
        )
    return status.path


def parse_cli_version(output: str) -> str:
    """Extract the first dotted version from ``aws --version`` output.

    ``aws-cli/2.15.30 Python/3.11.8 Linux/6.5 exe/x86_64`` → ``2.15.30``.
    """
    match = _VERSION_PATTERN.search(output)
    if match is None:
        raise EnvironmentError(
            f"Could not read the AWS CLI version from {output.strip()!r}.",
        )
    return match.group(1)


# ---------------------------------------------------------------------------
# Version probe
# ---------------------------------------------------------------------------

class AwsCliVersionProbe:
    """Concrete :class:`VersionProbe` running ``aws --version``."""

    def version(self) -> str:
        require_aws_cli()
        try:
            proc = subprocess.run(
                [_AWS, "--version"],
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise EnvironmentError(f"Could not run the AWS CLI: {exc}") from exc
        # AWS CLI v1 prints its version on stderr.
        return parse_cli_version(proc.stdout or proc.stderr)


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------

class AwsCliInventoryProvider:
    """Concrete :class:`InventoryProvider` backed by ``aws ec2 describe-instances``.

    Each output line is ``<instance-id>\\t<Name tag>`` in API order.
    """

    _QUERY: str = (
        "Reservations[].Instances[].[InstanceId, "
        f"Tags[?Key=='{NAME_TAG}'].Value | [0]]"
    )

    @classmethod
    def build_command(
        cls,
        filters: Sequence[Filter],
        region: str,
        profile: str | None,
    ) -> list[str]:
        """Build the ``describe-instances`` argv.

        Filters are passed as one JSON document; the CLI's shorthand
        syntax would split tag values on commas.
        """
        argv = [_AWS, "ec2", "describe-instances", "--region", region]
        if profile:
            argv += ["--profile", profile]
        if filters:
            argv += ["--filters", json.dumps(list(filters), separators=(",", ":"))]
        argv += ["--query", cls._QUERY, "--output", "text"]
        return argv

    def describe_instances(
        self,
        filters: Sequence[Filter],
        region: str,
        profile: str | None,
    ) -> str:
        """Run the query and return its stdout.

        Raises
        ------
        InventoryQueryError
            When the CLI exits non-zero.
        EnvironmentError
            When the CLI cannot be started.
        """
        argv = self.build_command(filters, region, profile)
        try:
            proc = subprocess.run(argv, capture_output=True, text=True, check=False)
        except OSError as exc:
            raise EnvironmentError(
                f"Could not run the AWS CLI: {exc}",
                hint=_INSTALL_HINT,
            ) from exc
        if proc.returncode != 0:
            raise InventoryQueryError(
                f"Instance lookup in {region} failed "
                f"(aws exited with status {proc.returncode}).",
                hint=proc.stderr.strip() or None,
            )
        return proc.stdout


# ---------------------------------------------------------------------------
# Session launch
# ---------------------------------------------------------------------------

class SubprocessSessionLauncher:
    """Concrete :class:`SessionLauncher` sharing this process's terminal.

    The child inherits stdin/stdout/stderr and shares the terminal's
    process group, so every Ctrl+C already reaches it.  This process
    ignores ``SIGINT`` until the child exits and then returns the child's
    status; the previous handler is restored afterwards.
    """

    def launch(self, argv: Sequence[str]) -> int:
        old_sigint = signal.getsignal(signal.SIGINT)
        try:
            signal.signal(signal.SIGINT, _ignore_sigint)
            try:
                proc = subprocess.Popen(list(argv))
            except OSError as exc:
                raise EnvironmentError(
                    f"Could not start {argv[0]}: {exc}",
                    hint=_INSTALL_HINT,
                ) from exc
            returncode = proc.wait()
        finally:
            signal.signal(signal.SIGINT, old_sigint)
        return _normalise_returncode(returncode)


def _ignore_sigint(_signum: int, _frame: object) -> None:
    """SIGINT handler that leaves the interrupt to the child."""


def _normalise_returncode(returncode: int) -> int:
    """Map ``-N`` (killed by signal N) to the shell's ``128 + N``."""
    if returncode < 0:
        return 128 - returncode
    return returncode
