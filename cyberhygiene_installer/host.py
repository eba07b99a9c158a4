# Path and File Name : /home/cyberhygiene/installer/cyberhygiene_installer/host.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Host command runner - single gateway for dnf, systemctl, firewall-cmd and probe tools

"""
Host Command Runner

Every external process the installer starts (package manager, service
manager, firewall, verification tools) goes through HostRunner.run().
Tests substitute a fake runner so no real host state is touched.
"""

import logging
import subprocess
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .errors import ModuleFailure


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 1800  # dnf transactions can be slow


@dataclass(frozen=True)
class CommandResult:
    """Captured result of one command."""
    argv: List[str]
    returncode: int
    stdout: str = ''
    stderr: str = ''

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class HostRunner:
    """Runs commands on the target host."""

    def __init__(self, default_timeout: int = DEFAULT_TIMEOUT):
        self.default_timeout = default_timeout

    def run(self, argv: Sequence[str], input_text: Optional[str] = None,
            env: Optional[Dict[str, str]] = None,
            timeout: Optional[int] = None) -> CommandResult:
        """
        Run a command and capture its output.

        Args:
            argv: Command and arguments (never passed through a shell)
            input_text: Text written to the command's stdin
            env: Complete environment for the child process (None inherits)
            timeout: Seconds before the command is killed

        Returns:
            CommandResult with stripped stdout/stderr

        Raises:
            FileNotFoundError: If the executable does not exist
            subprocess.TimeoutExpired: If the command exceeds the timeout
        """
        argv = [str(arg) for arg in argv]
        logger.debug("exec: %s", argv[0] if argv else '')

        p = subprocess.run(
            argv,
            input=input_text,
            text=True,
            capture_output=True,
            env=env,
            timeout=timeout or self.default_timeout,
        )

        return CommandResult(
            argv=argv,
            returncode=p.returncode,
            stdout=(p.stdout or '').strip(),
            stderr=(p.stderr or '').strip(),
        )

    def check(self, argv: Sequence[str], **kwargs) -> CommandResult:
        """
        Run a command that must succeed.

        Raises:
            ModuleFailure: On non-zero exit, missing executable or timeout
        """
        try:
            result = self.run(argv, **kwargs)
        except FileNotFoundError:
            raise ModuleFailure(f"command not found: {argv[0]}")
        except subprocess.TimeoutExpired:
            raise ModuleFailure(f"command timed out: {' '.join(str(a) for a in argv)}")

        if not result.ok:
            detail = result.stderr or result.stdout or 'no output'
            raise ModuleFailure(
                f"command failed (exit {result.returncode}): {' '.join(result.argv)}: {detail}"
            )
        return result
