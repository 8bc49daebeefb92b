"""Cross-distro package management driven by a plain package list."""

import os
import shutil
import subprocess
from enum import Enum, auto
from pathlib import Path
from typing import IO, Iterator, Optional, Union


class PackageManager(Enum):
    APT = auto()
    PACMAN = auto()
    DNF = auto()


COMMENT_PREFIX = "#"


def detect_pm() -> PackageManager:
    """Detect the system's package manager."""
    if shutil.which("apt"):
        return PackageManager.APT
    if shutil.which("pacman"):
        return PackageManager.PACMAN
    if shutil.which("dnf"):
        return PackageManager.DNF
    raise RuntimeError("Unknown package manager")


def _get_install_cmd(pm: PackageManager) -> list[str]:
    """Get the install command for a package manager."""
    return {
        PackageManager.APT: ["apt", "install", "-y"],
        PackageManager.PACMAN: ["pacman", "-S", "--noconfirm"],
        PackageManager.DNF: ["dnf", "install", "-y"],
    }[pm]


def _get_check_cmd(pm: PackageManager, package: str) -> list[str]:
    """Get command to check if a package is installed."""
    return {
        PackageManager.APT: ["dpkg", "-s", package],
        PackageManager.PACMAN: ["pacman", "-Q", package],
        PackageManager.DNF: ["rpm", "-q", package],
    }[pm]


def _get_update_cmds(pm: PackageManager) -> list[list[str]]:
    """Get the refresh and upgrade commands, in the order they must run."""
    return {
        PackageManager.APT: [
            ["apt", "update"],
            ["apt", "upgrade", "-y"],
        ],
        PackageManager.PACMAN: [
            ["pacman", "-Sy"],
            ["pacman", "-Su", "--noconfirm"],
        ],
        PackageManager.DNF: [
            ["dnf", "makecache"],
            ["dnf", "upgrade", "-y"],
        ],
    }[pm]


def _command_env(pm: PackageManager) -> Optional[dict]:
    """Environment for unattended package manager runs."""
    if pm == PackageManager.APT:
        return {**os.environ, "DEBIAN_FRONTEND": "noninteractive"}
    return None


def read_package_list(list_path: Union[str, Path]) -> Iterator[str]:
    """
    Yield package names from a newline-delimited list file.

    Blank lines and lines starting with '#' are skipped. Other lines are
    yielded as-is, minus the line terminator. The file is read lazily,
    in a single pass.
    """
    with open(list_path) as f:
        for line in f:
            name = line.rstrip("\r\n")
            if not name or name.startswith(COMMENT_PREFIX):
                continue
            yield name


def is_installed(package: str, pm: Optional[PackageManager] = None) -> bool:
    """Check the local package database for an installed package."""
    pm = pm or detect_pm()
    result = subprocess.run(
        _get_check_cmd(pm, package),
        capture_output=True,
    )
    return result.returncode == 0


def install(
    package: str,
    pm: Optional[PackageManager] = None,
    output: Optional[IO[str]] = None,
) -> bool:
    """
    Install a single package without prompting.

    Args:
        package: Package name
        pm: Package manager to use (auto-detected if not specified)
        output: Open file receiving the installer's stdout and stderr

    Returns:
        True if the installer exited successfully
    """
    pm = pm or detect_pm()
    result = subprocess.run(
        _get_install_cmd(pm) + [package],
        stdout=output,
        stderr=subprocess.STDOUT if output else None,
        env=_command_env(pm),
    )
    return result.returncode == 0


def update_system(
    pm: Optional[PackageManager] = None,
    output: Optional[IO[str]] = None,
) -> bool:
    """
    Refresh package metadata, then upgrade installed packages.

    The upgrade only runs if the refresh succeeded.

    Returns:
        True if every command exited successfully
    """
    pm = pm or detect_pm()

    for cmd in _get_update_cmds(pm):
        result = subprocess.run(
            cmd,
            stdout=output,
            stderr=subprocess.STDOUT if output else None,
            env=_command_env(pm),
        )
        if result.returncode != 0:
            return False
    return True
