#!/usr/bin/env python3
"""
postinstall - post-installation setup for a freshly provisioned machine.

Run as root from the directory holding the inputs:

    lists/packages.txt      packages to install, one per line ('#' comments)
    config/motd.txt         copied to /etc/motd (or config/motd.txt.j2, rendered)
    config/bashrc.append    appended to the user's ~/.bashrc
    config/nanorc.append    appended to the user's ~/.nanorc

Every step is optional and logged to logs/postinstall_<timestamp>.log.
The run also offers to add an SSH public key for the user and restricts
the SSH daemon to key-based authentication.
"""

import argparse
import os
import socket
import subprocess
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from jinja2 import TemplateError

from hostsetup.base import BaseOrchestrator, NotRootError
from hostsetup.config import RunConfig
from hostsetup.files import (
    append_file,
    append_text,
    copy_file,
    ensure_dir,
    ensure_file,
    primary_group,
    render_template,
    set_permissions,
    set_permissions_recursive,
)
from hostsetup.logger import RunLogger
from hostsetup.packages import (
    PackageManager,
    detect_pm,
    install,
    is_installed,
    read_package_list,
    update_system,
)
from hostsetup.paths import (
    BASHRC_FRAGMENT,
    MOTD_FRAGMENT,
    MOTD_TEMPLATE,
    NANORC_FRAGMENT,
)
from hostsetup.prompts import ask_yes_no, prompt
from hostsetup.security import harden_sshd_config
from hostsetup.services import get_ssh_service_name, restart_service


class PostInstall(BaseOrchestrator):
    """Main post-installation class."""

    def __init__(
        self,
        config: RunConfig,
        logger: RunLogger,
        pm: Optional[PackageManager] = None,
    ):
        super().__init__(config, logger)
        self._pm = pm

    @property
    def pm(self) -> PackageManager:
        if self._pm is None:
            self._pm = detect_pm()
        return self._pm

    # -------------------------------------------------------------------------
    # Privileges
    # -------------------------------------------------------------------------

    def require_root(self) -> None:
        """Abort the run unless it has superuser privileges."""
        if os.geteuid() != 0:
            self.log("This script must be run as root.")
            raise NotRootError("must be run as root")

    # -------------------------------------------------------------------------
    # Packages
    # -------------------------------------------------------------------------

    def _detect_package_manager(self) -> bool:
        try:
            self.log(f"Package manager: {self.pm.name}")
        except RuntimeError as e:
            self.log(f"{e}. Skipping package update and installation.")
            return False
        return True

    def update_system(self) -> None:
        """Refresh package metadata and upgrade everything."""
        self.log("Updating system packages...")
        with self.logger.output() as out:
            ok = update_system(self.pm, output=out)
        if not ok:
            self.log("System update did not complete cleanly, continuing.")

    def install_packages(self, list_path: Optional[Path] = None) -> None:
        """Install every package from the list that is not installed yet."""
        list_path = list_path or self.config.package_list

        if not list_path.exists():
            self.log(f"Package list file {list_path} not found. Skipping package installation.")
            return

        self.log(f"Reading package list from {list_path}")
        for pkg in read_package_list(list_path):
            self._check_and_install(pkg)

    def _check_and_install(self, pkg: str) -> None:
        if is_installed(pkg, self.pm):
            self.log(f"{pkg} is already installed.")
            return

        self.log(f"Installing {pkg}...")
        with self.logger.output() as out:
            ok = install(pkg, self.pm, output=out)
        if ok:
            self.log(f"{pkg} successfully installed.")
        else:
            self.log(f"Failed to install {pkg}.")

    # -------------------------------------------------------------------------
    # Config fragments
    # -------------------------------------------------------------------------

    def apply_configs(self) -> None:
        """Apply the MOTD and rc fragments; each step stands alone."""
        self.update_motd()
        self.append_rc(BASHRC_FRAGMENT, ".bashrc")
        self.append_rc(NANORC_FRAGMENT, ".nanorc")

    def update_motd(self) -> None:
        """Install the login banner from motd.txt.j2 or motd.txt."""
        template = self.config.config_dir / MOTD_TEMPLATE
        src = self.config.config_dir / MOTD_FRAGMENT

        try:
            if template.exists():
                content = render_template(template, {
                    "hostname": socket.gethostname(),
                    "username": self.config.username,
                    "date": datetime.now().strftime("%Y-%m-%d"),
                })
                ensure_file(self.config.motd_path, content, mode=0o644, backup=False)
            elif src.exists():
                copy_file(src, self.config.motd_path)
            else:
                self.log(f"{MOTD_FRAGMENT} not found.")
                return
        except (OSError, ValueError, TemplateError) as e:
            self.log(f"Failed to update MOTD: {e}")
            return

        self.log("MOTD updated.")

    def append_rc(self, fragment: str, rc_name: str) -> None:
        """Append a config fragment to one of the user's rc files."""
        src = self.config.config_dir / fragment
        dest = self.config.user_home / rc_name

        if not src.exists():
            self.log(f"{fragment} not found.")
            return

        try:
            append_file(
                src,
                dest,
                owner=self.config.username,
                group=primary_group(self.config.username),
            )
        except (OSError, KeyError) as e:
            self.log(f"Failed to customize {rc_name}: {e}")
            return

        self.log(f"{rc_name} customized.")

    # -------------------------------------------------------------------------
    # SSH
    # -------------------------------------------------------------------------

    def provision_ssh_key(self) -> None:
        """Offer to add a public key to the user's authorized_keys."""
        if not ask_yes_no("Would you like to add a public SSH key?"):
            return

        ssh_key = prompt("Paste your public SSH key")
        ssh_dir = self.config.ssh_dir
        authorized_keys = self.config.authorized_keys

        try:
            ensure_dir(ssh_dir)
            append_text(authorized_keys, ssh_key + "\n")
            set_permissions_recursive(
                ssh_dir,
                owner=self.config.username,
                group=primary_group(self.config.username),
            )
            set_permissions(ssh_dir, mode=0o700)
            set_permissions(authorized_keys, mode=0o600)
        except (OSError, KeyError, subprocess.CalledProcessError) as e:
            self.log(f"Failed to add SSH public key: {e}")
            return

        self.log("SSH public key added.")

    def harden_ssh(self) -> None:
        """Allow key-based SSH logins only and restart the daemon."""
        sshd_config = self.config.sshd_config

        if not sshd_config.exists():
            self.log(f"{sshd_config.name} file not found.")
            return

        try:
            _, missing = harden_sshd_config(sshd_config)
        except (OSError, ValueError) as e:
            self.log(f"Failed to update {sshd_config}: {e}")
            return

        for name in missing:
            self.log(f"{name} not present in {sshd_config}; left unchanged.")

        service = "SSH service"
        try:
            service = get_ssh_service_name()
            with self.logger.output() as out:
                restart_service(service, output=out)
        except (subprocess.CalledProcessError, OSError):
            self.log(f"Failed to restart {service}.")

        self.log("SSH configured to accept key-based authentication only.")

    # -------------------------------------------------------------------------
    # Full run
    # -------------------------------------------------------------------------

    def run_all(self) -> None:
        """Run every step in order."""
        self.log(f"Starting post-installation script. Logged user: {self.config.username}")
        self.require_root()

        if self._detect_package_manager():
            self.update_system()
            self.install_packages()
        self.apply_configs()
        self.provision_ssh_key()
        self.harden_ssh()

        self.log("Post-installation script completed.")


def main():
    parser = argparse.ArgumentParser(
        description="postinstall - post-installation setup for a fresh machine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.parse_args()

    try:
        config = RunConfig.from_environment()
        logger = RunLogger(config.log_file)
        PostInstall(config, logger).run_all()
    except NotRootError:
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nAborted.")
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
