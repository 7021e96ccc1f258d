"""
External helper program execution.

Some builds fetch auxiliary metadata (chromosome sizes, cytobands, protein
function prediction matrices) by running helper scripts shipped next to the
pipeline. The runner only reports success or failure; launching problems are
raised as ExternalToolError so the caller can decide how to continue.
"""

import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from ..core.exceptions import ExternalToolError
from ..core.types import PathLike
from .logging import LoggerMixin


class ExternalToolRunner(LoggerMixin):
    """Runs helper scripts with their output redirected to a log file."""

    def __init__(self, timeout: Optional[float] = None):
        """
        Args:
            timeout: Optional timeout in seconds; a timed out process counts as a failure
        """
        self.timeout = timeout

    def build_command(self, script_path: PathLike, arguments: Sequence[str]) -> List[str]:
        """Return the argument vector for a script invocation."""
        return [str(script_path), *[str(arg) for arg in arguments]]

    def run(
        self,
        working_directory: PathLike,
        script_path: PathLike,
        arguments: Sequence[str],
        log_file: PathLike,
        expected_output: Optional[PathLike] = None,
    ) -> bool:
        """
        Run an external program and wait for it to finish.

        Args:
            working_directory: Directory the program runs in
            script_path: Program to run, relative to working_directory or absolute
            arguments: Program arguments
            log_file: File receiving the program's stdout and stderr
            expected_output: Optional file the program must have produced

        Returns:
            True if the program exited with status 0 and produced expected_output

        Raises:
            ExternalToolError: If the program could not be launched
        """
        cmd = self.build_command(script_path, arguments)
        log_path = Path(log_file)
        self.logger.info(f"Running {' '.join(cmd)} in {working_directory}")

        try:
            with open(log_path, "w") as log:
                result = subprocess.run(
                    cmd,
                    cwd=str(working_directory),
                    stdout=log,
                    stderr=subprocess.STDOUT,
                    timeout=self.timeout,
                    check=False,
                )
        except subprocess.TimeoutExpired:
            self.logger.error(f"{script_path} timed out after {self.timeout}s, see {log_path}")
            return False
        except (FileNotFoundError, PermissionError, NotADirectoryError) as e:
            raise ExternalToolError(
                f"Cannot launch {script_path}: {e}",
                script=str(script_path),
                working_directory=str(working_directory),
            ) from e

        if result.returncode != 0:
            self.logger.error(f"{script_path} exited with status {result.returncode}, see {log_path}")
            return False

        if expected_output is not None and not Path(expected_output).exists():
            self.logger.error(f"{script_path} finished but {expected_output} was not created")
            return False

        return True
