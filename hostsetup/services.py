"""Systemd service helpers."""

import subprocess
from typing import IO, Optional

from .paths import SSH_UNIT_FILE


def _systemctl(
    *args: str,
    check: bool = True,
    output: Optional[IO[str]] = None,
) -> subprocess.CompletedProcess:
    """Run a systemctl command, optionally sending its output to a file."""
    cmd = ["systemctl"] + list(args)
    if output is None:
        return subprocess.run(cmd, capture_output=True, text=True, check=check)
    return subprocess.run(cmd, stdout=output, stderr=subprocess.STDOUT, check=check)


def get_ssh_service_name() -> str:
    """
    Get the correct SSH service name for this distro.

    Debian/Ubuntu use 'ssh', RHEL/Fedora/Arch use 'sshd'.
    """
    if SSH_UNIT_FILE.exists():
        return "ssh"
    result = _systemctl("list-unit-files", "ssh.service", check=False)
    if "ssh.service" in result.stdout:
        return "ssh"
    return "sshd"


def restart_service(service: str, output: Optional[IO[str]] = None) -> None:
    """Restart a service; raises CalledProcessError on failure."""
    _systemctl("restart", service, output=output)
