"""Infrastructure: session-manager-plugin detection and self-install.

``aws ssm start-session`` hands the connection to an external helper,
``session-manager-plugin``.  This module checks that the helper exists
at its expected install path and, when asked, installs it from the
official AWS bundle.

Rules
-----
* Detection checks the expected install path only.
* Installation is isolated behind :class:`BundleInstaller` so that
  callers (and tests) can inject any :class:`PluginInstaller`.
* Downloads and unpacked files live in a temporary directory that is
  removed once the installer returns.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import os
import platform
import shutil
import subprocess
import sys
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ssm_connect.exceptions import EnvironmentError, PluginInstallError
from ssm_connect.utils.constants import (
    DOWNLOAD_TIMEOUT_SECONDS,
    PLUGIN_DOWNLOAD_BASE_URL,
    PLUGIN_INSTALL_ROOT,
    PLUGIN_LINK,
    PLUGIN_PATH,
)

_MANUAL_INSTALL_HINT: str = (
    "Install it manually: https://docs.aws.amazon.com/systems-manager/latest/"
    "userguide/session-manager-working-with-install-plugin.html"
)


# ---------------------------------------------------------------------------
# Detection result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PluginStatus:
    """Result of a session-manager-plugin detection probe.

    Attributes
    ----------
    found : bool
        Whether the plugin binary exists at *path*.
    path : Path
        The expected install location that was probed.
    """

    found: bool
    path: Path


def detect_session_plugin(path: Path = PLUGIN_PATH) -> PluginStatus:
    """Probe the expected install path for the plugin binary."""
    return PluginStatus(found=path.is_file(), path=path)


# ---------------------------------------------------------------------------
# Platform bundles
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PluginBundle:
    """One downloadable plugin package for a given platform."""

    platform_dir: str
    """Directory under the download base URL (e.g. ``mac_arm64``)."""

    filename: str
    """Archive or package file name."""

    kind: str
    """``"zip"`` for the macOS bundle, ``"deb"`` for Debian packages."""

    def url(self, base_url: str = PLUGIN_DOWNLOAD_BASE_URL) -> str:
        return f"{base_url}/{self.platform_dir}/{self.filename}"


_BUNDLES: dict[tuple[str, str], PluginBundle] = {
    ("darwin", "x86_64"): PluginBundle("mac", "sessionmanager-bundle.zip", "zip"),
    ("darwin", "arm64"): PluginBundle("mac_arm64", "sessionmanager-bundle.zip", "zip"),
    ("linux", "x86_64"): PluginBundle("ubuntu_64bit", "session-manager-plugin.deb", "deb"),
    ("linux", "amd64"): PluginBundle("ubuntu_64bit", "session-manager-plugin.deb", "deb"),
    ("linux", "aarch64"): PluginBundle("ubuntu_arm64", "session-manager-plugin.deb", "deb"),
    ("linux", "arm64"): PluginBundle("ubuntu_arm64", "session-manager-plugin.deb", "deb"),
}


def select_bundle(system: str | None = None, machine: str | None = None) -> PluginBundle:
    """Return the bundle for the current (or given) platform.

    Raises
    ------
    EnvironmentError
        When there is no automatic install for this platform.
    """
    system = (system or platform.system()).lower()
    machine = (machine or platform.machine()).lower()
    bundle = _BUNDLES.get((system, machine))
    if bundle is None:
        raise EnvironmentError(
            f"Automatic session-manager-plugin install is not supported on "
            f"{system}/{machine}.",
            hint=_MANUAL_INSTALL_HINT,
        )
    return bundle


def _import_httpx() -> Any:
    """Import httpx lazily; only the install path needs it."""
    try:
        import httpx
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "httpx is not installed. Install with: pip install httpx",
        ) from exc
    return httpx


# ---------------------------------------------------------------------------
# Installer
# ---------------------------------------------------------------------------

class BundleInstaller:
    """Concrete :class:`PluginInstaller` using the official AWS bundles.

    Usage::

        BundleInstaller().install(PLUGIN_PATH)

    The bundle is downloaded into a temporary directory, unpacked there
    and handed to the platform installer.  The installer runs under
    ``sudo`` when the install root's parent is not writable by the
    current user.
    """

    def __init__(
        self,
        *,
        bundle: PluginBundle | None = None,
        base_url: str = PLUGIN_DOWNLOAD_BASE_URL,
        install_root: Path = PLUGIN_INSTALL_ROOT,
        link_path: Path = PLUGIN_LINK,
    ) -> None:
        self._bundle = bundle
        self._base_url = base_url
        self._install_root = install_root
        self._link_path = link_path

    # ------------------------------------------------------------------
    # Protocol method
    # ------------------------------------------------------------------

    def install(self, target: Path) -> None:
        """Download, unpack and install the plugin.

        Raises
        ------
        EnvironmentError
            On an unsupported platform.
        PluginInstallError
            When the install location is not writable, or the download,
            unpack or installer step fails.
        """
        bundle = self._bundle or select_bundle()
        prefix = self._privilege_prefix()

        with tempfile.TemporaryDirectory(prefix="ssm-connect-") as tmp:
            workdir = Path(tmp)
            archive = workdir / bundle.filename
            self._download(bundle.url(self._base_url), archive)
            argv = prefix + self._installer_command(bundle, archive, workdir)
            self._run_installer(argv)

        if not target.is_file():
            raise PluginInstallError(
                f"Installer finished but {target} does not exist.",
                hint=_MANUAL_INSTALL_HINT,
            )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _privilege_prefix(self) -> list[str]:
        """Return ``[]`` or ``["sudo"]`` for the installer command."""
        parent = self._install_root.parent
        if os.access(parent, os.W_OK):
            return []
        if shutil.which("sudo") is None:
            raise PluginInstallError(
                f"Install location {parent} is not writable and sudo is "
                f"not available.",
                hint=_MANUAL_INSTALL_HINT,
            )
        return ["sudo"]

    def _download(self, url: str, destination: Path) -> None:
        httpx = _import_httpx()
        try:
            with httpx.stream(
                "GET",
                url,
                follow_redirects=True,
                timeout=DOWNLOAD_TIMEOUT_SECONDS,
            ) as response:
                response.raise_for_status()
                with destination.open("wb") as fh:
                    for chunk in response.iter_bytes():
                        fh.write(chunk)
        except (httpx.HTTPError, OSError) as exc:
            raise PluginInstallError(
                f"Could not download session-manager-plugin from {url}: {exc}",
                hint=_MANUAL_INSTALL_HINT,
            ) from exc

    def _installer_command(
        self,
        bundle: PluginBundle,
        archive: Path,
        workdir: Path,
    ) -> list[str]:
        if bundle.kind == "deb":
            return ["dpkg", "-i", str(archive)]

        try:
            with zipfile.ZipFile(archive) as zf:
                zf.extractall(workdir)
        except zipfile.BadZipFile as exc:
            raise PluginInstallError(
                f"Downloaded bundle {archive.name} is not a valid zip archive.",
                hint=_MANUAL_INSTALL_HINT,
            ) from exc

        # The bundle's ``install`` is a Python script; zip extraction drops
        # its executable bit, so run it through the interpreter.
        script = workdir / archive.stem / "install"
        return [
            sys.executable,
            str(script),
            "-i",
            str(self._install_root),
            "-b",
            str(self._link_path),
        ]

    @staticmethod
    def _run_installer(argv: list[str]) -> None:
        try:
            proc = subprocess.run(argv, check=False)
        except OSError as exc:
            raise PluginInstallError(
                f"Could not run installer {argv[0]}: {exc}",
                hint=_MANUAL_INSTALL_HINT,
            ) from exc
        if proc.returncode != 0:
            raise PluginInstallError(
                f"session-manager-plugin installer exited with status "
                f"{proc.returncode}.",
                hint=_MANUAL_INSTALL_HINT,
            )
