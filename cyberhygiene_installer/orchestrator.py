# Path and File Name : /home/cyberhygiene/installer/cyberhygiene_installer/orchestrator.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Main installer orchestrator - runs modules in priority order and aborts on first failure

"""
Installer Orchestrator

Executes the numbered module sequence strictly in ascending priority order.

FAIL-CLOSED RULES:
- Duplicate priorities are rejected at construction time
- Required variables are checked BEFORE a module's action is invoked
- The first Failed module aborts the run; every later module is recorded
  as Skipped and NEVER executed
- No retries, no rollback, no silent downgrade of a module failure
"""

import logging
from collections import Counter
from datetime import datetime
from typing import Callable, List, Sequence

from .environment import EnvironmentStore
from .errors import MissingConfig, ModuleFailure
from .modules.base import ProvisioningModule
from .results import ModuleOutcome, ModuleStatus, RunRecorder, RunResult, utc_now


logger = logging.getLogger(__name__)


class Orchestrator:
    """Runs provisioning modules sequentially."""

    def __init__(self, modules: Sequence[ProvisioningModule],
                 clock: Callable[[], datetime] = utc_now):
        duplicates = sorted(
            priority for priority, count in Counter(m.priority for m in modules).items()
            if count > 1
        )
        if duplicates:
            raise ValueError(f"duplicate module priorities: {duplicates}")

        self.modules: List[ProvisioningModule] = sorted(modules, key=lambda m: m.priority)
        self._clock = clock

    def _execute(self, module: ProvisioningModule, environment: EnvironmentStore) -> ModuleOutcome:
        """Invoke one module, converting every failure mode into a Failed outcome."""
        try:
            environment.require(module.required_keys)
            outcome = module.apply(environment)
        except MissingConfig as e:
            return ModuleOutcome.failed(str(e))
        except ModuleFailure as e:
            return ModuleOutcome.failed(e.reason)
        except Exception as e:
            module.log.exception("unexpected error")
            return ModuleOutcome.failed(f"unexpected error: {type(e).__name__}: {e}")

        # An action reports Success or Failed; Skipped is only assigned by the orchestrator
        if not isinstance(outcome, ModuleOutcome) or outcome.status == ModuleStatus.SKIPPED:
            return ModuleOutcome.failed(f"module returned invalid outcome: {outcome!r}")
        return outcome

    def run(self, environment: EnvironmentStore) -> RunResult:
        """
        Run every module in priority order.

        Args:
            environment: Read-only installation environment

        Returns:
            Finalized RunResult
        """
        recorder = RunRecorder(clock=self._clock)
        aborted_by = None

        logger.info("[INSTALL] Running %d module(s)", len(self.modules))

        for module in self.modules:
            if aborted_by is not None:
                recorder.record_module(
                    module.priority, module.name,
                    ModuleOutcome.skipped(f"aborted after {aborted_by} failed"),
                )
                logger.info("[INSTALL] - skipped [%d] %s", module.priority, module.name)
                continue

            logger.info("[INSTALL] [%d] %s: starting", module.priority, module.name)
            outcome = self._execute(module, environment)
            recorder.record_module(module.priority, module.name, outcome)

            if outcome.status == ModuleStatus.FAILED:
                logger.error("[INSTALL] ✗ [%d] %s failed: %s", module.priority, module.name, outcome.reason)
                aborted_by = module.name
            else:
                logger.info("[INSTALL] ✓ [%d] %s completed", module.priority, module.name)

        result = recorder.finalize()

        if aborted_by is not None:
            logger.error("[INSTALL] Installation aborted after module '%s'", aborted_by)

        return result


def run(modules: Sequence[ProvisioningModule], environment: EnvironmentStore) -> RunResult:
    """Convenience wrapper: Orchestrator(modules).run(environment)."""
    return Orchestrator(modules).run(environment)
