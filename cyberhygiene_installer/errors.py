# Path and File Name : /home/cyberhygiene/installer/cyberhygiene_installer/errors.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Installer error taxonomy shared by environment, modules and report writer

"""
Installer Errors

FAIL-CLOSED taxonomy:
- ConfigLoadError: environment source missing/malformed (pre-flight, whole run aborts)
- MissingConfig:   a required variable is absent or empty (module aborts before any action)
- ModuleFailure:   a provisioning action did not complete (remaining modules are skipped)
- ReportIOError:   verification report could not be persisted (run is NOT successful)
- CatalogError:    module catalog missing or invalid (pre-flight)

Check failures are NOT exceptions; they are CheckStatus values counted by the verifier.
"""

from typing import Iterable


class InstallerError(Exception):
    """Base class for all installer errors."""
    pass


class ConfigLoadError(InstallerError):
    """Raised when the environment source cannot be loaded."""
    pass


class MissingConfig(InstallerError):
    """Raised when required environment variables are absent or empty."""

    def __init__(self, names: Iterable[str]):
        self.names = sorted(set(names))
        super().__init__(f"Missing required configuration: {', '.join(self.names)}")


class ModuleFailure(InstallerError):
    """Raised when a provisioning action did not complete."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class ReportIOError(InstallerError):
    """Raised when the verification report cannot be written."""
    pass


class CatalogError(InstallerError):
    """Raised when the module catalog cannot be loaded or validated."""
    pass
