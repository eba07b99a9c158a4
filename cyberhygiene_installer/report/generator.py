# Path and File Name : /home/cyberhygiene/installer/cyberhygiene_installer/report/generator.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Renders and persists the owner-only VERIFICATION_REPORT_<date>.txt

"""
Verification Report Generator

Sections, in fixed order:
  header, test results, system information, service status,
  failures, next steps, credentials-file pointer

The report contains domain and host identity, so it is written with mode
0600 regardless of the process umask, and a symlink at the report path is
refused. A report that cannot be persisted is NOT a usable deliverable:
persist() raises ReportIOError.
"""

import os
from pathlib import Path
from typing import List, Union

from ..environment import EnvironmentStore
from ..errors import ReportIOError
from ..results import RunResult
from .snapshot import SystemSnapshot


RULE = "=" * 40
REPORT_TITLE = "CyberHygiene Installation Verification Report"
NO_FAILURES = "None - All tests passed!"
REPORT_MODE = 0o600


def report_path(install_root: Union[str, Path], install_date: str) -> Path:
    return Path(install_root) / f"VERIFICATION_REPORT_{install_date}.txt"


def credentials_path(install_root: Union[str, Path], install_date: str) -> Path:
    return Path(install_root) / f"CREDENTIALS_{install_date}.txt"


def render_failures(failure_labels) -> List[str]:
    """Failures block body: sentinel line, or one '- label' line per failure."""
    if not failure_labels:
        return [NO_FAILURES]
    return [f"- {label}" for label in failure_labels]


class ReportGenerator:
    """Renders a RunResult and a live SystemSnapshot into report text."""

    def __init__(self, environment: EnvironmentStore, install_root: Union[str, Path]):
        self.environment = environment
        self.install_root = Path(install_root)

    @staticmethod
    def _section(title: str) -> List[str]:
        return ['', RULE, title, RULE]

    def render(self, result: RunResult, snapshot: SystemSnapshot) -> str:
        """
        Render the report text.

        Args:
            result: Finalized run result
            snapshot: System snapshot collected at render time

        Returns:
            Report text (deterministic for the same inputs)
        """
        env = self.environment
        install_date = env.get('INSTALL_DATE')
        generated = result.finished_at.astimezone().strftime('%a %b %d %H:%M:%S %Z %Y')

        lines = [
            RULE,
            REPORT_TITLE,
            RULE,
            f"Generated: {generated}",
            f"Domain: {env.get('DOMAIN')}",
            f"Hostname: {snapshot.hostname}",
        ]

        lines += self._section("TEST RESULTS")
        lines += [
            f"Total Tests: {result.total_checks}",
            f"Passed: {result.checks_passed}",
            f"Failed: {result.checks_failed}",
            f"Warnings: {len(result.warning_labels)}",
        ]

        lines += self._section("SYSTEM INFORMATION")
        lines += [
            f"OS: {snapshot.os_release}",
            f"Kernel: {snapshot.kernel}",
            f"FIPS: {snapshot.fips}",
            f"SELinux: {snapshot.selinux}",
            f"Hostname: {snapshot.hostname}",
            f"IP Address: {snapshot.ip_address}",
            '',
            f"Memory: {snapshot.memory_total} total, {snapshot.memory_available} available",
            f"Disk: {snapshot.disk_total} total, {snapshot.disk_available} available",
        ]

        lines += self._section("SERVICE STATUS")
        lines += list(snapshot.running_services) or ["No matching services"]

        lines += self._section("FAILURES (if any)")
        lines += render_failures(result.failure_labels)

        lines += self._section("NEXT STEPS")
        lines += [
            "1. Review this verification report",
            f"2. Access FreeIPA web UI: https://{env.get('DC1_HOSTNAME')}",
            "3. Test user authentication",
            "4. Configure additional services as needed",
            "5. Complete customer handoff documentation",
        ]

        lines += self._section("CREDENTIALS")
        lines += [f"See file: {credentials_path(self.install_root, install_date)}"]
        lines += ['', RULE]

        return '\n'.join(lines) + '\n'

    def persist(self, artifact: str, destination: Union[str, Path]) -> Path:
        """
        Write the report with owner-only permissions.

        Args:
            artifact: Rendered report text
            destination: Report file path

        Returns:
            Path written

        Raises:
            ReportIOError: If the report cannot be written
        """
        path = Path(destination)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC | os.O_NOFOLLOW, REPORT_MODE)
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                # O_CREAT mode is filtered by umask and ignored for existing files
                os.fchmod(f.fileno(), REPORT_MODE)
                f.write(artifact)
        except OSError as e:
            raise ReportIOError(f"cannot write verification report {path}: {e}")
        return path
