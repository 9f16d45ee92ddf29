"""Smoke tests — verify scaffold wiring.

These tests prove that:
* The exception hierarchy is correctly structured.
* Version is accessible.
* Exit codes are defined.
"""

from __future__ import annotations

import pytest

from ssm_connect import __version__
from ssm_connect.cli import exit_codes
from ssm_connect.exceptions import (
    DispatchError,
    EnvironmentError,
    InputError,
    InventoryQueryError,
    PluginInstallError,
    SsmConnectError,
    UsageError,
)


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------

class TestVersion:
    def test_version_is_string(self) -> None:
        assert isinstance(__version__, str)

    def test_version_is_semver_like(self) -> None:
        parts = __version__.split(".")
        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)


# ---------------------------------------------------------------------------
# Exception hierarchy
# ---------------------------------------------------------------------------

class TestExceptions:
    @pytest.mark.parametrize(
        "exc_class",
        [
            UsageError,
            EnvironmentError,
            PluginInstallError,
            InventoryQueryError,
            InputError,
            DispatchError,
        ],
    )
    def test_all_exceptions_inherit_from_base(
        self, exc_class: type[SsmConnectError]
    ) -> None:
        assert issubclass(exc_class, SsmConnectError)

    def test_plugin_install_is_an_environment_error(self) -> None:
        assert issubclass(PluginInstallError, EnvironmentError)

    def test_hint_is_stored(self) -> None:
        err = SsmConnectError("boom", hint="try this")
        assert str(err) == "boom"
        assert err.hint == "try this"

    def test_hint_defaults_to_none(self) -> None:
        assert SsmConnectError("boom").hint is None

    def test_dispatch_error_carries_status(self) -> None:
        err = DispatchError("session failed", exit_status=255)
        assert err.exit_status == 255
        assert DispatchError("unknown action").exit_status is None


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

class TestExitCodes:
    def test_success_is_zero(self) -> None:
        assert exit_codes.SUCCESS == 0

    def test_general_error_is_one(self) -> None:
        assert exit_codes.GENERAL_ERROR == 1

    def test_keyboard_interrupt_is_130(self) -> None:
        assert exit_codes.KEYBOARD_INTERRUPT == 130

    def test_unexpected_error_is_two(self) -> None:
        assert exit_codes.UNEXPECTED_ERROR == 2
