# Path and File Name : /home/cyberhygiene/installer/cyberhygiene_installer/verification/battery.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Declarative final-verification check battery for the provisioned host

"""
Final Verification Battery

Built fresh for every verifier run from the environment. Checks are
independent of each other; all of them are always evaluated.
"""

from typing import Callable, List, Sequence

import psutil

from ..environment import EnvironmentStore
from ..host import HostRunner
from .checks import (
    CertificateValidProbe,
    Check,
    CommandOutputProbe,
    FileExistsProbe,
    KerberosAuthProbe,
    ServiceActiveProbe,
    ServiceEnabledProbe,
    Severity,
    ThresholdProbe,
)


GIB = 1024 ** 3

MIN_FREE_DISK_GB = 10
MIN_FREE_MEMORY_GB = 5

EXPECTED_ENABLED_SERVICES = ('ipa', 'firewalld')


def free_disk_gb(path: str = '/') -> float:
    return psutil.disk_usage(path).free / GIB


def available_memory_gb() -> float:
    return psutil.virtual_memory().available / GIB


def default_battery(environment: EnvironmentStore, runner: HostRunner,
                    services: Sequence[str] = (),
                    disk_gb: Callable[[], float] = free_disk_gb,
                    memory_gb: Callable[[], float] = available_memory_gb) -> List[Check]:
    """
    Build the final verification battery.

    Args:
        environment: Installation environment
        runner: Command runner used by the probes
        services: Additional services that must be active (from provisioned modules)
        disk_gb: Free disk measurement in GB
        memory_gb: Available memory measurement in GB

    Returns:
        Ordered list of Checks

    Raises:
        MissingConfig: If a variable the battery needs is absent
    """
    hostname = environment.get('DC1_HOSTNAME')
    address = environment.get('DC1_IP')
    cert_path = environment.get('SSL_CERT_PATH')
    key_path = environment.get('SSL_KEY_PATH')

    checks = [
        Check("FreeIPA service", ServiceActiveProbe(runner, 'ipa')),
        Check("FreeIPA authentication",
              KerberosAuthProbe(runner, 'admin', environment.get('ADMIN_PASSWORD'))),
        Check("DNS resolution", CommandOutputProbe(runner, ['host', hostname, address])),
        Check("Firewall", ServiceActiveProbe(runner, 'firewalld')),
        Check("SELinux", CommandOutputProbe(runner, ['getenforce'], expected='Enforcing')),
        Check("FIPS mode", CommandOutputProbe(runner, ['fips-mode-setup', '--check'],
                                              expected='FIPS mode is enabled')),
        Check("SSL certificates", FileExistsProbe([cert_path, key_path])),
        Check("SSL certificate validity", CertificateValidProbe(cert_path)),
        Check("Disk space", ThresholdProbe(disk_gb, MIN_FREE_DISK_GB, unit='GB'),
              severity=Severity.SOFT),
        Check("Free memory", ThresholdProbe(memory_gb, MIN_FREE_MEMORY_GB, unit='GB'),
              severity=Severity.SOFT),
    ]

    for service in services:
        checks.append(Check(f"{service} service", ServiceActiveProbe(runner, service)))

    for service in EXPECTED_ENABLED_SERVICES:
        checks.append(Check(f"{service} enabled", ServiceEnabledProbe(runner, service)))

    return checks
