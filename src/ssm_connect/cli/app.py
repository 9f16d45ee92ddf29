"""CLI application entry point and command routing for ssm-connect.

This module is the **sole error boundary** for the entire application.
It catches :class:`~ssm_connect.exceptions.SsmConnectError`,
``KeyboardInterrupt``, and any unexpected ``Exception``, rendering
user-friendly messages via Rich and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — all work is delegated to the core/service
  and infrastructure layers.
* ``print()`` is forbidden outside the CLI layer; the console proxy is used
  exclusively.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import shlex
import sys
from typing import NoReturn

from ssm_connect.cli import exit_codes
from ssm_connect.cli.console import console, escape, out
from ssm_connect.cli.preflight import run_preflight
from ssm_connect.core.instance_service import InstanceService
from ssm_connect.core.models import (
    Action,
    Configuration,
    InstanceRecord,
    TagKeyValue,
    parse_tag_filter,
)
from ssm_connect.core.selection import select_first
from ssm_connect.core.session_service import SessionService, build_session_request
from ssm_connect.exceptions import DispatchError, SsmConnectError, UsageError
from ssm_connect.infra.aws_cli import (
    AwsCliInventoryProvider,
    AwsCliVersionProbe,
    SubprocessSessionLauncher,
)
from ssm_connect.infra.session_plugin import BundleInstaller
from ssm_connect.utils.constants import (
    DEFAULT_LOCAL_PORT,
    DEFAULT_REGION,
    NAME_TAG,
    REMOTE_PORT,
)
from ssm_connect.version import __version__


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

class _ArgumentParser(argparse.ArgumentParser):
    """Parser that reports bad arguments as :class:`UsageError`."""

    def error(self, message: str) -> NoReturn:
        self.print_help(sys.stderr)
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    """Construct the argument parser.

    ``-h`` is declared by hand so that asking for help exits with
    :data:`exit_codes.GENERAL_ERROR`, like any other non-session run.
    """
    parser = _ArgumentParser(
        prog="ssm-connect",
        description=(
            "Open an SSM shell or SSH tunnel to a running EC2 instance "
            "selected by tag or id."
        ),
        add_help=False,
    )
    parser.add_argument(
        "-a",
        dest="action",
        choices=[action.value for action in Action],
        default=Action.SHELL.value,
        help="ssh opens a shell, tunnel forwards a local port to port "
        f"{REMOTE_PORT} (default: %(default)s).",
    )
    selector = parser.add_mutually_exclusive_group()
    selector.add_argument(
        "-n",
        dest="name",
        metavar="NAME",
        help=f"Select instances whose {NAME_TAG} tag equals NAME.",
    )
    selector.add_argument(
        "-t",
        dest="tag",
        metavar="TAG",
        help="Select instances by tag: KEY matches any value, KEY=VALUE an exact one.",
    )
    parser.add_argument(
        "-r",
        dest="region",
        default=DEFAULT_REGION,
        help="AWS region (default: %(default)s).",
    )
    parser.add_argument(
        "-p",
        dest="profile",
        default=None,
        help="AWS named profile (default: your default credentials).",
    )
    parser.add_argument(
        "-o",
        dest="port",
        type=int,
        default=DEFAULT_LOCAL_PORT,
        help="Local port for tunnels, must be > 1024 (default: %(default)s).",
    )
    parser.add_argument(
        "-x",
        dest="instance_id",
        metavar="INSTANCE_ID",
        help="Connect to this instance id; tag selectors are ignored.",
    )
    parser.add_argument(
        "-s",
        dest="interactive",
        action="store_true",
        help="Choose among matching instances instead of taking the first.",
    )
    parser.add_argument(
        "-h",
        dest="help",
        action="store_true",
        help="Show this help message and exit.",
    )
    parser.add_argument(
        "-v",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show the version and exit.",
    )
    return parser


def build_configuration(args: argparse.Namespace) -> Configuration:
    """Turn parsed arguments into a validated :class:`Configuration`.

    Raises
    ------
    UsageError
        If no selector was given, a tag is malformed, or the port is
        not above 1024.
    """
    if args.name is not None:
        if not args.name:
            raise UsageError(
                "Invalid name selector: the name is empty.",
                hint="Use -t Name to match any name, or -n NAME.",
            )
        tag_filter = TagKeyValue(NAME_TAG, args.name)
    elif args.tag is not None:
        tag_filter = parse_tag_filter(args.tag)
    else:
        tag_filter = None

    return Configuration(
        action=Action(args.action),
        region=args.region,
        profile=args.profile or None,
        tag_filter=tag_filter,
        instance_id=args.instance_id or None,
        local_port=args.port,
        interactive=args.interactive,
    )


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _resolve_target(config: Configuration) -> InstanceRecord | None:
    """Return the instance to connect to, or ``None`` when nothing matched.

    An explicit ``-x`` id bypasses the inventory query entirely.
    """
    if config.instance_id:
        return InstanceRecord(instance_id=config.instance_id)

    assert config.tag_filter is not None
    service = InstanceService(AwsCliInventoryProvider())
    records = service.resolve(config.tag_filter, config.region, config.profile)

    if not records:
        out.print(
            f"No instances found for {escape(config.tag_filter.describe())} "
            f"in {escape(config.region)}"
        )
        return None

    if config.interactive:
        from ssm_connect.cli.instance_prompt import prompt_instance_selection

        return prompt_instance_selection(records)
    return select_first(records)


def _handle_session(config: Configuration) -> int:
    """Run preflight, pick the instance and hand the terminal to the session.

    Flow:
    1. Check the AWS CLI version and the session-manager-plugin.
    2. Resolve the target (explicit id, first match, or operator choice).
    3. Build the session request and run ``aws ssm start-session``.
    """
    run_preflight(BundleInstaller(), AwsCliVersionProbe())

    record = _resolve_target(config)
    if record is None:
        return exit_codes.SUCCESS

    request = build_session_request(config, record.instance_id)
    if config.action is Action.TUNNEL:
        console.print(
            f"[bold green]Forwarding[/bold green] localhost:{config.local_port} "
            f"→ {escape(record.instance_id)}:{REMOTE_PORT}"
        )
    else:
        target = record.label() if record.name else record.instance_id
        console.print(f"[bold green]Connecting to[/bold green] {escape(target)}")
    console.print(f"[dim]$ {escape(shlex.join(request.command()))}[/dim]")

    SessionService(SubprocessSessionLauncher()).start(request)
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the ssm-connect CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.help:
        parser.print_help()
        return exit_codes.GENERAL_ERROR

    try:
        config = build_configuration(args)
    except UsageError:
        parser.print_help(sys.stderr)
        raise

    return _handle_session(config)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except SsmConnectError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")
        if isinstance(exc, DispatchError) and exc.exit_status:
            sys.exit(exc.exit_status)
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape(str(exc))}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
