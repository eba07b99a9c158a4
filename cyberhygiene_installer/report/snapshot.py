# Path and File Name : /home/cyberhygiene/installer/cyberhygiene_installer/report/snapshot.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Live host system snapshot (OS, kernel, FIPS, SELinux, resources, running services) for the report

"""
System Snapshot

Collected at report render time, never cached from earlier in the run.
Each field is collected independently; a field that cannot be read is
reported as 'Unavailable' so one missing tool does not blank the report.
"""

import logging
import platform
import re
import socket
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

import psutil

from ..host import HostRunner


logger = logging.getLogger(__name__)

UNAVAILABLE = 'Unavailable'

DEFAULT_SERVICE_PATTERN = r'ipa|samba|firewalld'

_COLLECTION_ERRORS = (OSError, ValueError, subprocess.SubprocessError, psutil.Error)


def format_size(num_bytes: float) -> str:
    """Human-readable size in the style of free -h / df -h."""
    for unit in ('B', 'K', 'M', 'G', 'T'):
        if abs(num_bytes) < 1024 or unit == 'T':
            return f"{num_bytes:.0f}{unit}" if unit == 'B' else f"{num_bytes:.1f}{unit}"
        num_bytes /= 1024.0


@dataclass(frozen=True)
class SystemSnapshot:
    os_release: str = UNAVAILABLE
    kernel: str = UNAVAILABLE
    fips: str = UNAVAILABLE
    selinux: str = UNAVAILABLE
    hostname: str = UNAVAILABLE
    ip_address: str = UNAVAILABLE
    memory_total: str = UNAVAILABLE
    memory_available: str = UNAVAILABLE
    disk_total: str = UNAVAILABLE
    disk_available: str = UNAVAILABLE
    running_services: List[str] = field(default_factory=list)


class SnapshotCollector:
    """Collects a SystemSnapshot from the live host."""

    RELEASE_FILE = Path('/etc/redhat-release')

    def __init__(self, runner: Optional[HostRunner] = None,
                 service_pattern: str = DEFAULT_SERVICE_PATTERN):
        self.runner = runner or HostRunner()
        self.service_pattern = re.compile(service_pattern)

    def _safe(self, name: str, collect: Callable[[], str]) -> str:
        try:
            value = collect()
        except _COLLECTION_ERRORS as e:
            logger.debug("snapshot field %s unavailable: %s", name, e)
            return UNAVAILABLE
        return value or UNAVAILABLE

    def _command(self, argv: List[str]) -> str:
        return self.runner.run(argv, timeout=30).stdout

    def _os_release(self) -> str:
        if self.RELEASE_FILE.is_file():
            return self.RELEASE_FILE.read_text(encoding='utf-8').strip()
        return platform.platform()

    @staticmethod
    def _ip_address() -> str:
        for addresses in psutil.net_if_addrs().values():
            for address in addresses:
                if address.family == socket.AF_INET and not address.address.startswith('127.'):
                    return address.address
        return ''

    def _running_services(self) -> List[str]:
        try:
            output = self._command(['systemctl', 'list-units', '--type=service',
                                    '--state=running', '--no-legend', '--no-pager'])
        except _COLLECTION_ERRORS as e:
            logger.debug("running services unavailable: %s", e)
            return []
        return [
            line.strip() for line in output.splitlines()
            if line.strip() and self.service_pattern.search(line)
        ]

    def collect(self) -> SystemSnapshot:
        memory = self._safe_call(psutil.virtual_memory)
        disk = self._safe_call(lambda: psutil.disk_usage('/'))

        return SystemSnapshot(
            os_release=self._safe('os_release', self._os_release),
            kernel=self._safe('kernel', platform.release),
            fips=self._safe('fips', lambda: self._command(['fips-mode-setup', '--check'])),
            selinux=self._safe('selinux', lambda: self._command(['getenforce'])),
            hostname=self._safe('hostname', socket.getfqdn),
            ip_address=self._safe('ip_address', self._ip_address),
            memory_total=format_size(memory.total) if memory else UNAVAILABLE,
            memory_available=format_size(memory.available) if memory else UNAVAILABLE,
            disk_total=format_size(disk.total) if disk else UNAVAILABLE,
            disk_available=format_size(disk.free) if disk else UNAVAILABLE,
            running_services=self._running_services(),
        )

    @staticmethod
    def _safe_call(fn):
        try:
            return fn()
        except _COLLECTION_ERRORS as e:
            logger.debug("resource usage unavailable: %s", e)
            return None
