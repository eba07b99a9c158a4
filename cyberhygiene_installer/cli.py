# Path and File Name : /home/cyberhygiene/installer/cyberhygiene_installer/cli.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: CLI entry point - loads environment and catalog, runs modules and final verification, sets exit status

"""
CyberHygiene Installer - CLI Entry Point

Usage:
    cyberhygiene-install --env /root/cyberhygiene/install_vars.sh
    cyberhygiene-install --env install_vars.sh --verify-only
    cyberhygiene-install --env install_vars.sh --json-output result.json

Exit codes:
    0: Every module succeeded and every hard check passed
    1: A module failed, a hard check failed, or the report was not written
    2: Pre-flight error (environment or module catalog could not be loaded)
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .environment import load_environment
from .errors import CatalogError, ConfigLoadError
from .host import HostRunner
from .modules.catalog import load_catalog
from .orchestrator import Orchestrator
from .results import RunResult
from .verification.verifier import Verifier


logger = logging.getLogger('cyberhygiene_installer')

LOG_FORMAT = '[%(asctime)s] %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(log_file: Optional[Path] = None, verbose: bool = False) -> None:
    """Configure logging to console and, optionally, a file."""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers,
        force=True,
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog='cyberhygiene-install',
        description='CyberHygiene on-premises security stack installer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    cyberhygiene-install --env install_vars.sh                 # Provision + verify
    cyberhygiene-install --env install_vars.sh --verify-only   # Final verification only
        """
    )

    parser.add_argument(
        '--env', '-e',
        type=Path,
        required=True,
        help='Installation variables (install_vars.sh or YAML)'
    )

    parser.add_argument(
        '--install-root',
        type=Path,
        help='Directory receiving the verification report (default: directory of --env)'
    )

    parser.add_argument(
        '--catalog',
        type=Path,
        help='Module catalog YAML (default: packaged catalog)'
    )

    parser.add_argument(
        '--verify-only',
        action='store_true',
        help='Skip provisioning modules and run final verification only'
    )

    parser.add_argument(
        '--json-output',
        type=Path,
        help='Also write the machine-readable run result to this file'
    )

    parser.add_argument(
        '--log-file',
        type=Path,
        help='Also write the log to this file'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Debug logging'
    )

    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    return parser.parse_args(argv)


def log_summary(result: RunResult, report_file: Optional[Path]) -> None:
    logger.info("=" * 60)
    logger.info("CYBERHYGIENE INSTALLER SUMMARY")
    logger.info("=" * 60)
    for record in result.module_records:
        marker = {'success': '✓', 'failed': '✗', 'skipped': '⚠'}[record.outcome.status.value]
        reason = f" - {record.outcome.reason}" if record.outcome.reason else ''
        logger.info("%s [%d] %s: %s%s", marker, record.priority, record.name,
                    record.outcome.status.value, reason)
    logger.info("Checks: %d passed, %d failed, %d warning(s)",
                result.checks_passed, result.checks_failed, len(result.warning_labels))
    if report_file:
        logger.info("Full report: %s", report_file)
    logger.info("Result: %s", "SUCCESS" if result.succeeded else "FAILED")


def write_json(result: RunResult, path: Path) -> bool:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(result.to_dict(), f, indent=2)
    except OSError as e:
        logger.error("✗ Cannot write JSON result to %s: %s", path, e)
        return False
    logger.info("Run result written to: %s", path)
    return True


def run(args: argparse.Namespace) -> int:
    """Run the installer for parsed arguments. Returns the exit status."""
    host = HostRunner()

    try:
        environment = load_environment(args.env)
        catalog = load_catalog(args.catalog, host=host)
    except (ConfigLoadError, CatalogError) as e:
        logger.error("✗ Pre-flight failed: %s", e)
        logger.error("Installation aborted (fail-closed).")
        return 2

    install_root = args.install_root or args.env.resolve().parent
    services = [service for module in catalog for service in module.services]
    verifier = Verifier(install_root, services=services, runner=host)

    modules = [] if args.verify_only else list(catalog)
    try:
        orchestrator = Orchestrator(modules + [verifier])
    except ValueError as e:
        logger.error("✗ Invalid module sequence: %s", e)
        return 2

    logger.info("CyberHygiene installer %s (domain %s)", __version__, environment.get('DOMAIN'))
    result = orchestrator.run(environment)
    log_summary(result, verifier.report_file)

    if args.json_output and not write_json(result, args.json_output):
        return 1

    return result.exit_status


def main(argv: Optional[List[str]] = None) -> int:
    """Console script entry point."""
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)

    try:
        return run(args)
    except KeyboardInterrupt:
        logger.error("Installation cancelled by user.")
        return 1
