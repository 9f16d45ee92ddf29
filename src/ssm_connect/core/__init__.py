"""Core / service layer — pure business logic and data transformations.

Rules
-----
* No ``print()`` calls.
* No filesystem, network or subprocess I/O.
* No imports from ``cli`` or ``infra``.
"""

from ssm_connect.core.instance_service import InstanceService, parse_instance_lines
from ssm_connect.core.models import (
    Action,
    Configuration,
    InstanceRecord,
    SessionRequest,
    TagFilter,
    TagKey,
    TagKeyValue,
    parse_tag_filter,
)
from ssm_connect.core.protocols import (
    Filter,
    InventoryProvider,
    PluginInstaller,
    SessionLauncher,
    VersionProbe,
)
from ssm_connect.core.selection import select_first
from ssm_connect.core.session_service import SessionService, build_session_request
from ssm_connect.core.versioning import is_version_at_least, version_key

__all__: list[str] = [
    "Action",
    "Configuration",
    "Filter",
    "InstanceRecord",
    "InstanceService",
    "InventoryProvider",
    "PluginInstaller",
    "SessionLauncher",
    "SessionRequest",
    "SessionService",
    "TagFilter",
    "TagKey",
    "TagKeyValue",
    "VersionProbe",
    "build_session_request",
    "is_version_at_least",
    "parse_instance_lines",
    "parse_tag_filter",
    "select_first",
    "version_key",
]
