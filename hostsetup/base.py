"""Base orchestrator class for postinstall components."""

from .config import RunConfig
from .logger import RunLogger


class NotRootError(RuntimeError):
    """Raised when a run is started without superuser privileges."""


class BaseOrchestrator:
    """
    Base class for postinstall orchestrator components.

    Holds the run configuration and routes every message through the
    run logger, so all steps share one timestamped log file.
    """

    def __init__(self, config: RunConfig, logger: RunLogger):
        """
        Initialize the orchestrator.

        Args:
            config: Paths and identity for this run
            logger: Run log that receives messages and command output
        """
        self.config = config
        self.logger = logger

    def log(self, msg: str) -> None:
        """
        Log a timestamped message to the terminal and the run log.

        Args:
            msg: Message to log
        """
        self.logger.log(msg)
