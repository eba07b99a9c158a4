# Path and File Name : /home/cyberhygiene/installer/cyberhygiene_installer/verification/checks.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Verification checks and the closed set of probe types they evaluate

"""
Verification Checks

A Check pairs a human label with a zero-argument probe and a severity:
- HARD: a Fail counts against verification
- SOFT: a Fail is logged as a warning only (resource headroom)

Probe types (closed set):
- ServiceActiveProbe     systemctl is-active
- ServiceEnabledProbe    systemctl is-enabled
- FileExistsProbe        all paths are regular files
- CommandOutputProbe     command exit status / expected output text
- ThresholdProbe         measured value strictly above a minimum
- CertificateValidProbe  X.509 certificate parses and is not expired
- KerberosAuthProbe      kinit round-trip with guaranteed ticket teardown

A probe that raises (tool missing, permission denied, timeout) is a Fail.
"""

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Optional, Sequence

from cryptography import x509

from ..host import HostRunner


logger = logging.getLogger(__name__)

PROBE_TIMEOUT = 30


class CheckStatus(Enum):
    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"


class Severity(Enum):
    HARD = "hard"
    SOFT = "soft"


class Probe:
    """Base class for probes. detail holds context for the log line."""

    detail = ''

    def __call__(self) -> CheckStatus:
        raise NotImplementedError

    @staticmethod
    def _status(ok: bool) -> CheckStatus:
        return CheckStatus.PASS if ok else CheckStatus.FAIL


class ServiceActiveProbe(Probe):

    def __init__(self, runner: HostRunner, service: str):
        self.runner = runner
        self.service = service

    def __call__(self) -> CheckStatus:
        result = self.runner.run(['systemctl', 'is-active', '--quiet', self.service],
                                 timeout=PROBE_TIMEOUT)
        return self._status(result.ok)


class ServiceEnabledProbe(Probe):

    def __init__(self, runner: HostRunner, service: str):
        self.runner = runner
        self.service = service

    def __call__(self) -> CheckStatus:
        result = self.runner.run(['systemctl', 'is-enabled', '--quiet', self.service],
                                 timeout=PROBE_TIMEOUT)
        return self._status(result.ok)


class FileExistsProbe(Probe):

    def __init__(self, paths: Sequence[str]):
        self.paths = [Path(p) for p in paths]

    def __call__(self) -> CheckStatus:
        missing = [str(p) for p in self.paths if not p.is_file()]
        self.detail = f"missing: {', '.join(missing)}" if missing else ''
        return self._status(not missing)


class CommandOutputProbe(Probe):
    """
    Pass when the command output contains `expected`, or, when no expected
    text is given, when the command exits 0.
    """

    def __init__(self, runner: HostRunner, argv: Sequence[str], expected: Optional[str] = None):
        self.runner = runner
        self.argv = list(argv)
        self.expected = expected

    def __call__(self) -> CheckStatus:
        result = self.runner.run(self.argv, timeout=PROBE_TIMEOUT)
        if self.expected is None:
            return self._status(result.ok)
        return self._status(self.expected in result.stdout)


class ThresholdProbe(Probe):
    """Pass when measure() is strictly greater than minimum."""

    def __init__(self, measure: Callable[[], float], minimum: float, unit: str = ''):
        self.measure = measure
        self.minimum = minimum
        self.unit = unit

    def __call__(self) -> CheckStatus:
        value = self.measure()
        self.detail = f"{value:.0f}{self.unit}"
        return self._status(value > self.minimum)


class CertificateValidProbe(Probe):
    """Equivalent of openssl x509 -checkend 0."""

    def __init__(self, path: str, now: Optional[Callable[[], datetime]] = None):
        self.path = Path(path)
        self.now = now or (lambda: datetime.now(timezone.utc))

    def __call__(self) -> CheckStatus:
        data = self.path.read_bytes()
        if b'-----BEGIN' in data:
            cert = x509.load_pem_x509_certificate(data)
        else:
            cert = x509.load_der_x509_certificate(data)

        expires = cert.not_valid_after_utc
        self.detail = f"expires {expires.isoformat()}"
        return self._status(self.now() < expires)


class KerberosAuthProbe(Probe):
    """
    kinit round-trip against the identity service.

    Uses a private credential cache so the operator's own tickets are never
    touched. The cache is ALWAYS destroyed (kdestroy + directory removal)
    whether authentication passed, failed or raised.
    """

    def __init__(self, runner: HostRunner, principal: str, password: str,
                 cache_root: Optional[str] = None):
        self.runner = runner
        self.principal = principal
        self.password = password
        self.cache_root = cache_root
        self.last_cache_dir: Optional[Path] = None

    def __call__(self) -> CheckStatus:
        cache_dir = Path(tempfile.mkdtemp(prefix='cyberhygiene_krb5_', dir=self.cache_root))
        self.last_cache_dir = cache_dir
        env: Dict[str, str] = dict(os.environ)
        env['KRB5CCNAME'] = f"FILE:{cache_dir / 'krb5cc'}"

        try:
            result = self.runner.run(['kinit', self.principal], input_text=f"{self.password}\n",
                                     env=env, timeout=PROBE_TIMEOUT)
            return self._status(result.ok)
        finally:
            self._teardown(env, cache_dir)

    def _teardown(self, env: Dict[str, str], cache_dir: Path) -> None:
        try:
            self.runner.run(['kdestroy'], env=env, timeout=PROBE_TIMEOUT)
        except Exception as e:
            logger.debug("kdestroy failed: %s", e)
        shutil.rmtree(cache_dir, ignore_errors=True)


@dataclass
class Check:
    """One verification probe with a label and severity."""
    label: str
    probe: Callable[[], CheckStatus]
    severity: Severity = Severity.HARD
    detail: str = ''

    def evaluate(self) -> CheckStatus:
        """
        Run the probe. Probe errors are reported as FAIL.

        Returns:
            CheckStatus (PASS / FAIL / WARN)
        """
        try:
            status = self.probe()
        except Exception as e:
            self.detail = f"probe error: {type(e).__name__}: {e}"
            return CheckStatus.FAIL

        self.detail = getattr(self.probe, 'detail', '') or ''
        if not isinstance(status, CheckStatus):
            self.detail = f"probe returned {status!r}"
            return CheckStatus.FAIL
        return status
