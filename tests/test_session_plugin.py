"""Tests for session-manager-plugin detection and install (infra/session_plugin.py).

Installing the plugin writes outside the temporary directory and needs
root, so every test here mocks the download (``httpx``), the privilege
check and the installer subprocess.  Install paths point into
``tmp_path``.
"""

from __future__ import annotations

import io
import sys
import zipfile
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from ssm_connect.exceptions import EnvironmentError, PluginInstallError
from ssm_connect.infra.session_plugin import (
    BundleInstaller,
    PluginBundle,
    PluginStatus,
    detect_session_plugin,
    select_bundle,
)

_DEB = PluginBundle("ubuntu_64bit", "session-manager-plugin.deb", "deb")
_ZIP = PluginBundle("mac_arm64", "sessionmanager-bundle.zip", "zip")


class _FakeHTTPError(Exception):
    pass


def _fake_httpx(payload: bytes = b"pkg", *, error: Exception | None = None) -> MagicMock:
    httpx = MagicMock()
    httpx.HTTPError = _FakeHTTPError
    response = MagicMock()
    response.iter_bytes.return_value = [payload]
    if error is not None:
        response.raise_for_status.side_effect = error
    httpx.stream.return_value.__enter__.return_value = response
    return httpx


def _zip_bundle() -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        zf.writestr("sessionmanager-bundle/install", "#!/usr/bin/env python3\n")
    return buf.getvalue()


def _installing(target: Path, returncode: int = 0) -> Any:
    """Installer side effect that creates *target* like the real one."""

    def _run(argv: list[str], check: bool = False) -> MagicMock:
        if returncode == 0:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text("binary")
        proc = MagicMock()
        proc.returncode = returncode
        return proc

    return _run


def _installer(tmp_path: Path, bundle: PluginBundle = _DEB) -> BundleInstaller:
    return BundleInstaller(
        bundle=bundle,
        base_url="https://example.invalid/plugin/latest",
        install_root=tmp_path / "sessionmanagerplugin",
        link_path=tmp_path / "bin" / "session-manager-plugin",
    )


def _target(tmp_path: Path) -> Path:
    return tmp_path / "sessionmanagerplugin" / "bin" / "session-manager-plugin"


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------

class TestDetectSessionPlugin:
    def test_found(self, tmp_path: Path) -> None:
        binary = tmp_path / "session-manager-plugin"
        binary.write_text("x")
        assert detect_session_plugin(binary) == PluginStatus(found=True, path=binary)

    def test_missing(self, tmp_path: Path) -> None:
        status = detect_session_plugin(tmp_path / "nope")
        assert status.found is False

    def test_directory_does_not_count(self, tmp_path: Path) -> None:
        assert detect_session_plugin(tmp_path).found is False


# ---------------------------------------------------------------------------
# Bundle selection
# ---------------------------------------------------------------------------

class TestSelectBundle:
    def test_mac_arm(self) -> None:
        bundle = select_bundle("Darwin", "arm64")
        assert bundle.kind == "zip"
        assert bundle.url("https://x").endswith("/mac_arm64/sessionmanager-bundle.zip")

    def test_mac_intel(self) -> None:
        assert select_bundle("Darwin", "x86_64").platform_dir == "mac"

    def test_linux(self) -> None:
        bundle = select_bundle("Linux", "x86_64")
        assert bundle.kind == "deb"
        assert bundle.platform_dir == "ubuntu_64bit"

    def test_linux_arm(self) -> None:
        assert select_bundle("Linux", "aarch64").platform_dir == "ubuntu_arm64"

    def test_unsupported(self) -> None:
        with pytest.raises(EnvironmentError, match="not supported") as exc_info:
            select_bundle("Windows", "AMD64")
        assert exc_info.value.hint is not None


# ---------------------------------------------------------------------------
# BundleInstaller
# ---------------------------------------------------------------------------

class TestBundleInstaller:
    @patch("ssm_connect.infra.session_plugin.subprocess.run")
    @patch("ssm_connect.infra.session_plugin._import_httpx")
    def test_deb_install(
        self, mock_httpx: MagicMock, mock_run: MagicMock, tmp_path: Path,
    ) -> None:
        httpx = _fake_httpx()
        mock_httpx.return_value = httpx
        target = _target(tmp_path)
        mock_run.side_effect = _installing(target)

        _installer(tmp_path).install(target)

        assert target.is_file()
        url = httpx.stream.call_args.args[1]
        assert url == "https://example.invalid/plugin/latest/ubuntu_64bit/session-manager-plugin.deb"
        argv = mock_run.call_args.args[0]
        assert argv[:2] == ["dpkg", "-i"]
        # The temporary download directory is gone afterwards.
        assert not Path(argv[2]).exists()

    @patch("ssm_connect.infra.session_plugin.subprocess.run")
    @patch("ssm_connect.infra.session_plugin._import_httpx")
    def test_zip_install_runs_bundle_script(
        self, mock_httpx: MagicMock, mock_run: MagicMock, tmp_path: Path,
    ) -> None:
        mock_httpx.return_value = _fake_httpx(_zip_bundle())
        target = _target(tmp_path)
        mock_run.side_effect = _installing(target)

        _installer(tmp_path, _ZIP).install(target)

        argv = mock_run.call_args.args[0]
        assert argv[0] == sys.executable
        assert argv[1].endswith("sessionmanager-bundle/install")
        assert argv[argv.index("-i") + 1] == str(tmp_path / "sessionmanagerplugin")
        assert argv[argv.index("-b") + 1] == str(tmp_path / "bin" / "session-manager-plugin")

    @patch("ssm_connect.infra.session_plugin.subprocess.run")
    @patch("ssm_connect.infra.session_plugin._import_httpx")
    def test_bad_zip(
        self, mock_httpx: MagicMock, mock_run: MagicMock, tmp_path: Path,
    ) -> None:
        mock_httpx.return_value = _fake_httpx(b"not a zip")
        with pytest.raises(PluginInstallError, match="not a valid zip"):
            _installer(tmp_path, _ZIP).install(_target(tmp_path))
        mock_run.assert_not_called()

    @patch("ssm_connect.infra.session_plugin.subprocess.run")
    @patch("ssm_connect.infra.session_plugin._import_httpx")
    def test_download_failure(
        self, mock_httpx: MagicMock, mock_run: MagicMock, tmp_path: Path,
    ) -> None:
        mock_httpx.return_value = _fake_httpx(error=_FakeHTTPError("404 Not Found"))
        with pytest.raises(PluginInstallError, match="Could not download"):
            _installer(tmp_path).install(_target(tmp_path))
        mock_run.assert_not_called()

    @patch("ssm_connect.infra.session_plugin.subprocess.run")
    @patch("ssm_connect.infra.session_plugin._import_httpx")
    def test_installer_failure(
        self, mock_httpx: MagicMock, mock_run: MagicMock, tmp_path: Path,
    ) -> None:
        mock_httpx.return_value = _fake_httpx()
        target = _target(tmp_path)
        mock_run.side_effect = _installing(target, returncode=1)
        with pytest.raises(PluginInstallError, match="exited with status 1"):
            _installer(tmp_path).install(target)

    @patch("ssm_connect.infra.session_plugin.subprocess.run")
    @patch("ssm_connect.infra.session_plugin._import_httpx")
    def test_installer_succeeds_but_binary_missing(
        self, mock_httpx: MagicMock, mock_run: MagicMock, tmp_path: Path,
    ) -> None:
        mock_httpx.return_value = _fake_httpx()
        mock_run.return_value.returncode = 0
        with pytest.raises(PluginInstallError, match="does not exist"):
            _installer(tmp_path).install(_target(tmp_path))

    @patch("ssm_connect.infra.session_plugin.shutil.which", return_value=None)
    @patch("ssm_connect.infra.session_plugin.os.access", return_value=False)
    @patch("ssm_connect.infra.session_plugin._import_httpx")
    def test_not_writable_without_sudo(
        self,
        mock_httpx: MagicMock,
        _mock_access: MagicMock,
        _mock_which: MagicMock,
        tmp_path: Path,
    ) -> None:
        with pytest.raises(PluginInstallError, match="not writable"):
            _installer(tmp_path).install(_target(tmp_path))
        mock_httpx.assert_not_called()

    @patch("ssm_connect.infra.session_plugin.subprocess.run")
    @patch("ssm_connect.infra.session_plugin.shutil.which", return_value="/usr/bin/sudo")
    @patch("ssm_connect.infra.session_plugin.os.access", return_value=False)
    @patch("ssm_connect.infra.session_plugin._import_httpx")
    def test_not_writable_uses_sudo(
        self,
        mock_httpx: MagicMock,
        _mock_access: MagicMock,
        _mock_which: MagicMock,
        mock_run: MagicMock,
        tmp_path: Path,
    ) -> None:
        mock_httpx.return_value = _fake_httpx()
        target = _target(tmp_path)
        mock_run.side_effect = _installing(target)

        _installer(tmp_path).install(target)

        assert mock_run.call_args.args[0][:3] == ["sudo", "dpkg", "-i"]
