# Path and File Name : /home/cyberhygiene/installer/cyberhygiene_installer/modules/catalog.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Loads and validates the YAML module catalog into step-driven provisioning modules

"""
Module Catalog Loader

Reads catalog.yaml (or an operator-supplied catalog), validates it against
CATALOG_SCHEMA and builds one StepModule per entry.

FAIL-CLOSED: a missing, unparsable or schema-invalid catalog aborts the
run before any module executes (CatalogError).
"""

import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import yaml
from jsonschema import Draft7Validator

from ..errors import CatalogError
from ..host import HostRunner
from .steps import (
    EnableServices,
    EnsureBlock,
    ImportRepoKey,
    InstallPackages,
    OpenFirewallPorts,
    ReplaceInFile,
    RestartService,
    RunCommand,
    Step,
    StepModule,
    WaitForService,
    WriteFile,
)


DEFAULT_CATALOG_PATH = Path(__file__).with_name('catalog.yaml')

_STRING_LIST = {'type': 'array', 'items': {'type': 'string', 'minLength': 1}, 'minItems': 1}

STEP_SCHEMA = {
    'type': 'object',
    'minProperties': 1,
    'maxProperties': 1,
    'additionalProperties': False,
    'properties': {
        'import_key': {'type': 'string', 'minLength': 1},
        'install': _STRING_LIST,
        'write_file': {
            'type': 'object',
            'required': ['path', 'content'],
            'additionalProperties': False,
            'properties': {
                'path': {'type': 'string', 'minLength': 1},
                'content': {'type': 'string'},
                'mode': {'type': 'string', 'pattern': '^0?[0-7]{3}$'},
            },
        },
        'ensure_block': {
            'type': 'object',
            'required': ['path', 'marker', 'content'],
            'additionalProperties': False,
            'properties': {
                'path': {'type': 'string', 'minLength': 1},
                'marker': {'type': 'string', 'minLength': 1},
                'content': {'type': 'string'},
            },
        },
        'replace': {
            'type': 'object',
            'required': ['path', 'old', 'new'],
            'additionalProperties': False,
            'properties': {
                'path': {'type': 'string', 'minLength': 1},
                'old': {'type': 'string', 'minLength': 1},
                'new': {'type': 'string'},
            },
        },
        'enable': _STRING_LIST,
        'restart': {'type': 'string', 'minLength': 1},
        'firewall': _STRING_LIST,
        'wait': {
            'type': 'object',
            'required': ['service'],
            'additionalProperties': False,
            'properties': {
                'service': {'type': 'string', 'minLength': 1},
                'timeout': {'type': 'number', 'exclusiveMinimum': 0},
                'interval': {'type': 'number', 'exclusiveMinimum': 0},
                'required': {'type': 'boolean'},
            },
        },
        'command': {
            'type': 'object',
            'required': ['argv'],
            'additionalProperties': False,
            'properties': {
                'argv': _STRING_LIST,
                'description': {'type': 'string'},
                'secret': {'type': 'boolean'},
            },
        },
    },
}

CATALOG_SCHEMA = {
    'type': 'object',
    'required': ['modules'],
    'properties': {
        'modules': {
            'type': 'array',
            'items': {
                'type': 'object',
                'required': ['priority', 'name', 'steps'],
                'additionalProperties': False,
                'properties': {
                    'priority': {'type': 'integer', 'minimum': 0, 'maximum': 98},
                    'name': {'type': 'string', 'minLength': 1},
                    'tag': {'type': 'string', 'minLength': 1},
                    'description': {'type': 'string'},
                    'requires': {'type': 'array', 'items': {'type': 'string'}},
                    'services': {'type': 'array', 'items': {'type': 'string'}},
                    'steps': {'type': 'array', 'items': STEP_SCHEMA},
                },
            },
        },
    },
}


def _build_step(step: Dict[str, Any]) -> Step:
    (kind, value), = step.items()

    if kind == 'import_key':
        return ImportRepoKey(value)
    if kind == 'install':
        return InstallPackages(value)
    if kind == 'write_file':
        return WriteFile(value['path'], value['content'], mode=int(value.get('mode', '0644'), 8))
    if kind == 'ensure_block':
        return EnsureBlock(value['path'], value['marker'], value['content'])
    if kind == 'replace':
        return ReplaceInFile(value['path'], value['old'], value['new'])
    if kind == 'enable':
        return EnableServices(value)
    if kind == 'restart':
        return RestartService(value)
    if kind == 'firewall':
        return OpenFirewallPorts(value)
    if kind == 'wait':
        return WaitForService(
            value['service'],
            timeout=value.get('timeout', 60),
            interval=value.get('interval', 2),
            required=value.get('required', True),
        )
    if kind == 'command':
        return RunCommand(value['argv'], description=value.get('description'),
                          secret=value.get('secret', False))

    raise CatalogError(f"unknown step type: {kind}")


def validate_catalog(data: Any) -> None:
    """
    Validate catalog data against CATALOG_SCHEMA.

    Raises:
        CatalogError: Listing every violation, plus duplicate priorities
    """
    errors = list(Draft7Validator(CATALOG_SCHEMA).iter_errors(data))
    if errors:
        details = '; '.join(
            f"{'/'.join(str(p) for p in error.path) or '<root>'}: {error.message}"
            for error in errors
        )
        raise CatalogError(f"invalid module catalog: {details}")

    priorities = [entry['priority'] for entry in data['modules']]
    duplicates = sorted({p for p in priorities if priorities.count(p) > 1})
    if duplicates:
        raise CatalogError(f"duplicate module priorities in catalog: {duplicates}")


def load_catalog(path: Optional[Union[str, Path]] = None,
                 host: Optional[HostRunner] = None,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep) -> List[StepModule]:
    """
    Load the module catalog.

    Args:
        path: Catalog YAML (default: packaged catalog.yaml)
        host: Command runner shared by all modules
        clock: Monotonic clock for readiness waits
        sleep: Sleep function for readiness waits

    Returns:
        StepModules in catalog order

    Raises:
        CatalogError: If the catalog is missing, unparsable or invalid
    """
    catalog_path = Path(path) if path else DEFAULT_CATALOG_PATH

    try:
        with open(catalog_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise CatalogError(f"cannot read module catalog {catalog_path}: {e}")
    except yaml.YAMLError as e:
        raise CatalogError(f"cannot parse module catalog {catalog_path}: {e}")

    validate_catalog(data)

    host = host or HostRunner()
    modules: List[StepModule] = []
    for entry in data['modules']:
        modules.append(StepModule(
            priority=entry['priority'],
            name=entry['name'],
            steps=[_build_step(step) for step in entry['steps']],
            tag=entry.get('tag'),
            requires=entry.get('requires', []),
            services=entry.get('services', []),
            description=entry.get('description', ''),
            host=host,
            clock=clock,
            sleep=sleep,
        ))
    return modules
