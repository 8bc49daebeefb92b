"""Run configuration, resolved once at startup."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from . import paths


@dataclass(frozen=True)
class RunConfig:
    """Every path and identity a post-install run works with."""

    log_file: Path
    config_dir: Path
    package_list: Path
    username: str
    user_home: Path
    motd_path: Path = paths.MOTD_PATH
    sshd_config: Path = paths.SSHD_CONFIG

    @property
    def ssh_dir(self) -> Path:
        return self.user_home / ".ssh"

    @property
    def authorized_keys(self) -> Path:
        return self.ssh_dir / "authorized_keys"

    @classmethod
    def from_environment(
        cls,
        base_dir: Optional[Path] = None,
        now: Optional[datetime] = None,
    ) -> "RunConfig":
        """
        Build the configuration for a run started in ``base_dir``.

        Args:
            base_dir: Directory holding logs/, config/ and lists/
                      (defaults to the current working directory)
            now: Start time used to name the log file

        Returns:
            A frozen RunConfig
        """
        base_dir = Path(base_dir) if base_dir else Path.cwd()
        timestamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
        username = paths.get_target_user()

        return cls(
            log_file=base_dir / paths.LOG_DIR_NAME / f"postinstall_{timestamp}.log",
            config_dir=base_dir / paths.CONFIG_DIR_NAME,
            package_list=base_dir / paths.PACKAGE_LIST_NAME,
            username=username,
            user_home=paths.get_user_home(username),
        )
