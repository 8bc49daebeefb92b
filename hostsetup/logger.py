"""Run log: timestamped lines echoed to the terminal and appended to a file."""

from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import IO, Iterator, Union


class RunLogger:
    """
    Append-only log for a single run.

    The log directory is created on construction; if that fails the
    exception propagates and the run cannot start.
    """

    TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

    def __init__(self, log_file: Union[str, Path]):
        self.log_file = Path(log_file)
        self.log_file.parent.mkdir(parents=True, exist_ok=True)
        self.log_file.touch()

    def format(self, msg: str) -> str:
        """Render a log line with the current local time."""
        return f"[{datetime.now().strftime(self.TIME_FORMAT)}] {msg}"

    def log(self, msg: str) -> None:
        """Print a timestamped line and append it to the log file."""
        line = self.format(msg)
        print(line)
        with open(self.log_file, "a") as f:
            f.write(line + "\n")

    @contextmanager
    def output(self) -> Iterator[IO[str]]:
        """
        Open the log file for appending command output.

        Usage:
            with logger.output() as out:
                subprocess.run(cmd, stdout=out, stderr=subprocess.STDOUT)
        """
        with open(self.log_file, "a") as f:
            yield f
