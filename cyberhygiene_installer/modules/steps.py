# Path and File Name : /home/cyberhygiene/installer/cyberhygiene_installer/modules/steps.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Idempotent apply steps (packages, config files, services, firewall, readiness) and the step-driven module

"""
Apply Steps

Closed set of idempotent actions a provisioning module is made of.
Each step is safe to re-run against an already-provisioned host:
- package installs and firewall port additions are no-ops when present
- config files are only written when their rendered content differs
- appended blocks are guarded by a marker line
- in-place replacements are skipped once the new text is present

Templates use ${VAR} placeholders resolved from the EnvironmentStore.
'$$' renders a literal '$'.
"""

import hashlib
import os
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from string import Template
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set

from ..environment import EnvironmentStore
from ..errors import MissingConfig, ModuleFailure
from ..host import HostRunner
from ..readiness import wait_until
from ..results import ModuleOutcome
from .base import ModuleLogAdapter, ProvisioningModule


# Placeholder -> environment variable it is derived from
DERIVED_KEYS = {
    'ADMIN_PASSWORD_SHA256': 'ADMIN_PASSWORD',
}


def template_keys(text: str) -> Set[str]:
    """Environment variables a template dereferences."""
    keys = set()
    for match in Template.pattern.finditer(text):
        name = match.group('named') or match.group('braced')
        if name:
            keys.add(DERIVED_KEYS.get(name, name))
    return keys


def template_context(environment: EnvironmentStore) -> Dict[str, str]:
    context = dict(environment)
    password = environment.get('ADMIN_PASSWORD', None)
    if password:
        context['ADMIN_PASSWORD_SHA256'] = hashlib.sha256(password.encode('utf-8')).hexdigest()
    return context


def render(text: str, environment: EnvironmentStore) -> str:
    """
    Render a template against the environment.

    Raises:
        MissingConfig: If a placeholder has no non-empty value
    """
    context = {k: v for k, v in template_context(environment).items() if v}
    missing = [key for key in template_keys(text) if key not in context]
    if missing:
        raise MissingConfig(missing)
    try:
        return Template(text).substitute(context)
    except KeyError as e:
        raise MissingConfig([str(e.args[0])])
    except ValueError as e:
        raise ModuleFailure(f"invalid template: {e}")


@dataclass
class StepContext:
    """Everything a step needs to act on the host."""
    environment: EnvironmentStore
    host: HostRunner
    log: ModuleLogAdapter
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], None] = time.sleep


class Step:
    """Base class for apply steps."""

    description = 'step'

    def required_keys(self) -> Set[str]:
        return set()

    def apply(self, ctx: StepContext) -> None:
        raise NotImplementedError


class ImportRepoKey(Step):
    """Import a package signing key (rpm --import)."""

    def __init__(self, url: str):
        self.url = url
        self.description = f"Importing repository key {url}"

    def apply(self, ctx: StepContext) -> None:
        ctx.host.check(['rpm', '--import', self.url])


class InstallPackages(Step):
    """Install packages with dnf."""

    def __init__(self, packages: Sequence[str]):
        self.packages = list(packages)
        self.description = f"Installing {', '.join(self.packages)}"

    def apply(self, ctx: StepContext) -> None:
        ctx.host.check(['dnf', 'install', '-y'] + self.packages)


class WriteFile(Step):
    """Render a template into a file; no write when content is unchanged."""

    def __init__(self, path: str, content: str, mode: int = 0o644):
        self.path = Path(path)
        self.content = content
        self.mode = mode
        self.description = f"Writing {self.path}"

    def required_keys(self) -> Set[str]:
        return template_keys(self.content)

    def apply(self, ctx: StepContext) -> None:
        rendered = render(self.content, ctx.environment)
        try:
            if self.path.is_file() and self.path.read_text(encoding='utf-8') == rendered:
                ctx.log.info("  %s unchanged", self.path)
            else:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.write_text(rendered, encoding='utf-8')
            os.chmod(self.path, self.mode)
        except OSError as e:
            raise ModuleFailure(f"cannot write {self.path}: {e}")


class EnsureBlock(Step):
    """Append a marker-delimited block unless the marker is already present."""

    def __init__(self, path: str, marker: str, content: str):
        self.path = Path(path)
        self.marker = marker
        self.content = content
        self.description = f"Ensuring configuration block in {self.path}"

    def required_keys(self) -> Set[str]:
        return template_keys(self.content)

    def apply(self, ctx: StepContext) -> None:
        rendered = render(self.content, ctx.environment)
        try:
            existing = self.path.read_text(encoding='utf-8') if self.path.is_file() else ''
            if self.marker in existing:
                ctx.log.info("  block already present in %s", self.path)
                return
            separator = '' if not existing or existing.endswith('\n') else '\n'
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'a', encoding='utf-8') as f:
                f.write(f"{separator}{self.marker}\n{rendered.rstrip()}\n")
        except OSError as e:
            raise ModuleFailure(f"cannot update {self.path}: {e}")


class ReplaceInFile(Step):
    """Replace text in an existing file (in place, like sed -i)."""

    def __init__(self, path: str, old: str, new: str):
        self.path = Path(path)
        self.old = old
        self.new = new
        self.description = f"Updating {self.path}"

    def apply(self, ctx: StepContext) -> None:
        try:
            text = self.path.read_text(encoding='utf-8')
        except OSError as e:
            raise ModuleFailure(f"cannot read {self.path}: {e}")

        if self.old in text:
            try:
                self.path.write_text(text.replace(self.old, self.new), encoding='utf-8')
            except OSError as e:
                raise ModuleFailure(f"cannot write {self.path}: {e}")
        elif self.new in text:
            ctx.log.info("  %s already updated", self.path)
        else:
            ctx.log.warning("  ⚠ pattern not found in %s", self.path)


class EnableServices(Step):
    """Reload systemd and enable + start services."""

    def __init__(self, services: Sequence[str]):
        self.services = list(services)
        self.description = f"Enabling {', '.join(self.services)}"

    def apply(self, ctx: StepContext) -> None:
        ctx.host.check(['systemctl', 'daemon-reload'])
        for service in self.services:
            ctx.host.check(['systemctl', 'enable', '--now', service])


class RestartService(Step):

    def __init__(self, service: str):
        self.service = service
        self.description = f"Restarting {service}"

    def apply(self, ctx: StepContext) -> None:
        ctx.host.check(['systemctl', 'restart', self.service])


class OpenFirewallPorts(Step):
    """Add permanent firewalld ports, then reload once."""

    def __init__(self, ports: Sequence[str]):
        self.ports = [str(p) for p in ports]
        self.description = f"Opening firewall ports {', '.join(self.ports)}"

    def apply(self, ctx: StepContext) -> None:
        for port in self.ports:
            ctx.host.check(['firewall-cmd', '--permanent', f'--add-port={port}'])
        ctx.host.check(['firewall-cmd', '--reload'])
        ctx.log.info("✓ Firewall configured")


class WaitForService(Step):
    """
    Poll systemctl is-active until the service is up or the deadline passes.

    required=False downgrades a timeout to a warning.
    """

    def __init__(self, service: str, timeout: float = 60, interval: float = 2,
                 required: bool = True):
        self.service = service
        self.timeout = timeout
        self.interval = interval
        self.required = required
        self.description = f"Waiting for {service} (up to {timeout:g}s)"

    def apply(self, ctx: StepContext) -> None:
        def is_active() -> bool:
            return ctx.host.run(['systemctl', 'is-active', '--quiet', self.service]).ok

        if wait_until(is_active, self.timeout, self.interval, clock=ctx.clock, sleep=ctx.sleep):
            ctx.log.info("✓ %s is running", self.service)
            return

        if not self.required:
            ctx.log.warning("⚠ %s not active after %gs; continuing", self.service, self.timeout)
            return

        try:
            status = ctx.host.run(['systemctl', 'status', '--no-pager', self.service])
            ctx.log.error("%s", status.stdout or status.stderr)
        except (OSError, subprocess.TimeoutExpired) as e:
            ctx.log.debug("systemctl status unavailable: %s", e)
        raise ModuleFailure(f"{self.service} failed to start within {self.timeout:g}s")


class RunCommand(Step):
    """Run a templated command. secret=True keeps its arguments out of the log."""

    def __init__(self, argv: Sequence[str], description: Optional[str] = None,
                 secret: bool = False):
        self.argv = list(argv)
        self.secret = secret
        self.description = description or f"Running {self.argv[0]}"

    def required_keys(self) -> Set[str]:
        keys: Set[str] = set()
        for arg in self.argv:
            keys |= template_keys(arg)
        return keys

    def apply(self, ctx: StepContext) -> None:
        argv = [render(arg, ctx.environment) for arg in self.argv]
        try:
            ctx.host.check(argv)
        except ModuleFailure:
            if self.secret:
                raise ModuleFailure(f"command failed: {self.argv[0]}") from None
            raise


class StepModule(ProvisioningModule):
    """Module made of an ordered list of apply steps."""

    def __init__(self, priority: int, name: str, steps: Sequence[Step],
                 tag: Optional[str] = None, requires: Iterable[str] = (),
                 services: Iterable[str] = (), description: str = '',
                 host: Optional[HostRunner] = None,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        self.steps: List[Step] = list(steps)
        keys = set(requires)
        for step in self.steps:
            keys |= step.required_keys()
        super().__init__(priority, name, tag=tag, required_keys=sorted(keys))
        self.services = list(services)
        self.description = description or name
        self.host = host or HostRunner()
        self.clock = clock
        self.sleep = sleep

    def apply(self, environment: EnvironmentStore) -> ModuleOutcome:
        self.log.info("Installing %s...", self.description)

        ctx = StepContext(
            environment=environment,
            host=self.host,
            log=self.log,
            clock=self.clock,
            sleep=self.sleep,
        )
        for step in self.steps:
            self.log.info("%s...", step.description)
            step.apply(ctx)

        self.log.info("✓ %s installed", self.description)
        return ModuleOutcome.success()
