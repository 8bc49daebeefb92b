"""Centralized path constants for postinstall.

Input and output directories are relative to the directory the run is
started from; system paths are absolute.
"""

import getpass
import os
import pwd
from pathlib import Path

# Run-relative directories
LOG_DIR_NAME = "logs"
CONFIG_DIR_NAME = "config"
PACKAGE_LIST_NAME = Path("lists") / "packages.txt"

# Config fragment names (under the config directory)
MOTD_FRAGMENT = "motd.txt"
MOTD_TEMPLATE = "motd.txt.j2"
BASHRC_FRAGMENT = "bashrc.append"
NANORC_FRAGMENT = "nanorc.append"

# System paths
MOTD_PATH = Path("/etc/motd")
SSHD_CONFIG = Path("/etc/ssh/sshd_config")
SSH_UNIT_FILE = Path("/lib/systemd/system/ssh.service")


def get_target_user() -> str:
    """
    Get the name of the user the machine is being set up for.

    Mirrors ``logname``: the login name of the controlling terminal, so a
    run under sudo still targets the original user.
    """
    try:
        return os.getlogin()
    except OSError:
        pass
    sudo_user = os.environ.get("SUDO_USER")
    if sudo_user:
        return sudo_user
    return getpass.getuser()


def get_user_home(username: str) -> Path:
    """Get a user's home directory from the password database."""
    try:
        return Path(pwd.getpwnam(username).pw_dir)
    except KeyError:
        return Path("/home") / username
