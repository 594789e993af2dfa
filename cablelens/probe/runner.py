"""
Subprocess runner for diagnostic tools
"""

import logging
import subprocess
import sys
from dataclasses import dataclass
from typing import Optional, Union

from ..config import MAX_OUTPUT_BYTES


logger = logging.getLogger(__name__)


@dataclass
class RunOutput:
    """What a tool invocation left behind, even when it failed"""
    stdout: str = ''
    stderr: str = ''
    returncode: Optional[int] = None
    timed_out: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out and self.error is None


def _decode(data: Union[bytes, str, None], limit: int) -> str:
    if data is None:
        return ''
    if isinstance(data, bytes):
        data = data[:limit].decode('utf-8', errors='replace')
    return data[:limit]


class ProcessRunner:
    """
    Runs a diagnostic command and always returns its captured text.

    A timeout or non-zero exit is reported in the result rather than
    raised, with whatever stdout was produced up to that point.
    """

    def run(self, argv: list[str], timeout: float,
            max_output: int = MAX_OUTPUT_BYTES) -> RunOutput:
        """
        Execute a command.

        Args:
            argv: Command and arguments
            timeout: Seconds before the process is killed
            max_output: Ceiling on captured bytes per stream

        Returns:
            RunOutput with stdout/stderr and exit status
        """
        logger.debug("Running: %s", ' '.join(argv))

        kwargs = {}
        if sys.platform == 'win32':
            kwargs['creationflags'] = getattr(subprocess, 'CREATE_NO_WINDOW', 0)

        try:
            completed = subprocess.run(
                argv,
                capture_output=True,
                timeout=timeout,
                **kwargs
            )
        except subprocess.TimeoutExpired as e:
            logger.warning("%s timed out after %ss", argv[0], timeout)
            return RunOutput(
                stdout=_decode(e.stdout, max_output),
                stderr=_decode(e.stderr, max_output),
                timed_out=True
            )
        except FileNotFoundError:
            return RunOutput(error=f"{argv[0]} not found")
        except OSError as e:
            return RunOutput(error=f"{argv[0]} failed to start: {e}")

        return RunOutput(
            stdout=_decode(completed.stdout, max_output),
            stderr=_decode(completed.stderr, max_output),
            returncode=completed.returncode
        )
