"""Infrastructure layer — external system integration.

This layer wraps all interaction with the ``aws`` executable, the
session-manager-plugin installer, the network and the operating system.
Every raw subprocess, OS or HTTP exception is caught here and re-raised
as a :class:`~ssm_connect.exceptions.SsmConnectError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from ssm_connect.infra.aws_cli import (
    AwsCliInventoryProvider,
    AwsCliStatus,
    AwsCliVersionProbe,
    SubprocessSessionLauncher,
    detect_aws_cli,
    require_aws_cli,
)
from ssm_connect.infra.session_plugin import (
    BundleInstaller,
    PluginBundle,
    PluginStatus,
    detect_session_plugin,
    select_bundle,
)

__all__: list[str] = [
    "AwsCliInventoryProvider",
    "AwsCliStatus",
    "AwsCliVersionProbe",
    "BundleInstaller",
    "PluginBundle",
    "PluginStatus",
    "SubprocessSessionLauncher",
    "detect_aws_cli",
    "detect_session_plugin",
    "require_aws_cli",
    "select_bundle",
]
