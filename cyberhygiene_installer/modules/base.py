# Path and File Name : /home/cyberhygiene/installer/cyberhygiene_installer/modules/base.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Provisioning module contract and tagged module logging

"""
Provisioning Module Contract

A module is one numbered, idempotent unit of provisioning work. The
orchestrator calls apply(environment) exactly once per run and records
the returned ModuleOutcome.

Modules MAY downgrade an internal sub-step failure to a warning before
returning. Once a module returns Failed (or raises), no later module runs.
"""

import logging
from typing import Callable, Iterable, Optional, Tuple

from ..environment import EnvironmentStore
from ..results import ModuleOutcome


class ModuleLogAdapter(logging.LoggerAdapter):
    """Prefixes every record with the module tag, e.g. [30-GRAYLOG]."""

    def process(self, msg, kwargs):
        return f"[{self.extra['tag']}] {msg}", kwargs


def module_logger(tag: str) -> ModuleLogAdapter:
    return ModuleLogAdapter(logging.getLogger('cyberhygiene_installer.modules'), {'tag': tag})


class ProvisioningModule:
    """Base class for all modules run by the orchestrator."""

    def __init__(self, priority: int, name: str, tag: Optional[str] = None,
                 required_keys: Iterable[str] = ()):
        self.priority = priority
        self.name = name
        self.tag = tag or f"{priority:02d}-{name.upper()}"
        self.required_keys: Tuple[str, ...] = tuple(required_keys)
        self.log = module_logger(self.tag)

    def apply(self, environment: EnvironmentStore) -> ModuleOutcome:
        """
        Run install + configure + start + self-verify.

        Args:
            environment: Read-only installation environment

        Returns:
            ModuleOutcome (Success or Failed)

        Raises:
            ModuleFailure: Equivalent to returning Failed
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(priority={self.priority}, name={self.name!r})"


class CallableModule(ProvisioningModule):
    """Module whose action is a plain callable taking the environment."""

    def __init__(self, priority: int, name: str,
                 action: Callable[[EnvironmentStore], ModuleOutcome],
                 tag: Optional[str] = None, required_keys: Iterable[str] = ()):
        super().__init__(priority, name, tag=tag, required_keys=required_keys)
        self.action = action

    def apply(self, environment: EnvironmentStore) -> ModuleOutcome:
        return self.action(environment)
