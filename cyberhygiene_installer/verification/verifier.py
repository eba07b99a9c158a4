# Path and File Name : /home/cyberhygiene/installer/cyberhygiene_installer/verification/verifier.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Final verification module - runs the full check battery and writes the verification report

"""
Final Verification (module 99)

Runs EVERY check in the battery (no short-circuit) so the operator gets the
complete diagnostic picture in one pass, then renders and persists the
verification report.

Counting rules:
- PASS (either severity) -> checks_passed
- HARD fail -> checks_failed + failure label
- SOFT fail, or WARN from any check -> warning label only
"""

import re
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from ..environment import EnvironmentStore
from ..errors import ReportIOError
from ..host import HostRunner
from ..modules.base import ProvisioningModule
from ..report.generator import ReportGenerator, report_path
from ..report.snapshot import DEFAULT_SERVICE_PATTERN, SnapshotCollector
from ..results import ModuleOutcome, RunRecorder, RunResult, utc_now
from .battery import default_battery
from .checks import Check, CheckStatus, Severity


VERIFY_PRIORITY = 99

BatteryFactory = Callable[[EnvironmentStore], List[Check]]


class Verifier(ProvisioningModule):
    """Terminal verification module."""

    def __init__(self, install_root: Union[str, Path],
                 battery: Optional[BatteryFactory] = None,
                 services: Sequence[str] = (),
                 runner: Optional[HostRunner] = None,
                 snapshot_collector: Optional[SnapshotCollector] = None,
                 clock=utc_now):
        super().__init__(
            VERIFY_PRIORITY, 'final-verification', tag='99-VERIFY',
            required_keys=('INSTALL_DATE', 'DOMAIN', 'DC1_HOSTNAME', 'DC1_IP',
                           'ADMIN_PASSWORD', 'SSL_CERT_PATH', 'SSL_KEY_PATH'),
        )
        self.install_root = Path(install_root)
        self.services = list(services)
        self.runner = runner or HostRunner()
        self.battery = battery or (
            lambda env: default_battery(env, self.runner, services=self.services)
        )
        pattern = '|'.join([DEFAULT_SERVICE_PATTERN] + [re.escape(s) for s in self.services])
        self.snapshot_collector = snapshot_collector or SnapshotCollector(self.runner, pattern)
        self.clock = clock
        self.report_file: Optional[Path] = None

    def _record(self, recorder: RunRecorder, check: Check, status: CheckStatus) -> None:
        detail = f" ({check.detail})" if check.detail else ''

        if status == CheckStatus.PASS:
            self.log.info("  ✓ %s%s", check.label, detail)
            recorder.record_pass()
        elif status == CheckStatus.FAIL and check.severity == Severity.HARD:
            self.log.error("  ✗ %s%s", check.label, detail)
            recorder.record_failure(check.label)
        else:
            self.log.warning("  ⚠ %s%s", check.label, detail)
            recorder.record_warning(check.label)

    def verify(self, environment: EnvironmentStore) -> RunResult:
        """
        Evaluate the full battery.

        Args:
            environment: Installation environment

        Returns:
            RunResult carrying check counts and failure labels
        """
        recorder = RunRecorder(clock=self.clock)
        checks = self.battery(environment)

        self.log.info("Running final system verification (%d checks)...", len(checks))
        for check in checks:
            self.log.info("Testing %s...", check.label)
            self._record(recorder, check, check.evaluate())

        return recorder.finalize()

    def _log_summary(self, result: RunResult) -> None:
        self.log.info("==========================================")
        self.log.info("Final Verification Summary")
        self.log.info("==========================================")
        self.log.info("Tests Passed: %d", result.checks_passed)
        self.log.info("Tests Failed: %d", result.checks_failed)
        if result.warning_labels:
            self.log.warning("Warnings: %s", ', '.join(result.warning_labels))

        if result.checks_failed == 0:
            self.log.info("✓✓✓ ALL TESTS PASSED ✓✓✓")
            self.log.info("CyberHygiene installation is complete and verified!")
        else:
            self.log.warning("⚠ SOME TESTS FAILED")
            for label in result.failure_labels:
                self.log.warning("  - %s", label)
            self.log.warning("Review and resolve failures before deploying to production")

    def apply(self, environment: EnvironmentStore) -> ModuleOutcome:
        result = self.verify(environment)
        self._log_summary(result)

        generator = ReportGenerator(environment, self.install_root)
        artifact = generator.render(result, self.snapshot_collector.collect())
        destination = report_path(self.install_root, environment.get('INSTALL_DATE'))

        try:
            self.report_file = generator.persist(artifact, destination)
        except ReportIOError as e:
            self.log.error("✗ %s", e)
            return ModuleOutcome.failed(str(e), verification=result)

        self.log.info("Full report: %s", self.report_file)
        return ModuleOutcome.success(verification=result)
