# Path and File Name : /home/cyberhygiene/installer/cyberhygiene_installer/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: CyberHygiene installer package initialization

"""
CyberHygiene Installer

Provisions the on-premises security stack (FreeIPA, Graylog, Wazuh) on a
single host through a numbered sequence of idempotent modules, then runs
the final verification battery and writes the verification report.
"""

from .environment import EnvironmentStore, load_environment
from .errors import (
    InstallerError,
    ConfigLoadError,
    MissingConfig,
    ModuleFailure,
    ReportIOError,
    CatalogError,
)
from .orchestrator import Orchestrator
from .results import ModuleOutcome, ModuleStatus, RunResult

__all__ = [
    'EnvironmentStore',
    'load_environment',
    'InstallerError',
    'ConfigLoadError',
    'MissingConfig',
    'ModuleFailure',
    'ReportIOError',
    'CatalogError',
    'Orchestrator',
    'ModuleOutcome',
    'ModuleStatus',
    'RunResult',
]

__version__ = "1.0.0"
