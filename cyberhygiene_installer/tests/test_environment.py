# Path and File Name : /home/cyberhygiene/installer/cyberhygiene_installer/tests/test_environment.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Tests for environment loading, validation and read-only access

"""
Test Suite for the Environment Store

Covers install_vars.sh parsing, YAML sources, fail-closed validation and
MissingConfig on access.
"""

import shutil
import sys
import tempfile
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from cyberhygiene_installer.environment import (
    EnvironmentStore,
    load_environment,
    parse_vars_file,
    parse_yaml_file,
)
from cyberhygiene_installer.errors import ConfigLoadError, MissingConfig

from installer_fakes import BASE_ENVIRONMENT, make_environment


VARS_FILE = """#!/bin/bash
# CyberHygiene installation variables
export DOMAIN="cyberhygiene.test"
export DC1_HOSTNAME="dc1.${DOMAIN}"
DC1_IP=192.168.1.10
ADMIN_PASSWORD='Pa$$word with space'
SSL_CERT_PATH="/etc/pki/tls/certs/${DC1_HOSTNAME}.crt"
SSL_KEY_PATH=/etc/pki/tls/private/dc1.key   # private key
TIMEZONE="America/New_York"
INSTALL_DATE=20261018
"""


class TestParseVarsFile(unittest.TestCase):
    """install_vars.sh parsing."""

    def test_assignments_quotes_and_references(self):
        values = parse_vars_file(VARS_FILE)

        self.assertEqual(values['DOMAIN'], 'cyberhygiene.test')
        self.assertEqual(values['DC1_HOSTNAME'], 'dc1.cyberhygiene.test')
        self.assertEqual(values['DC1_IP'], '192.168.1.10')
        self.assertEqual(values['SSL_CERT_PATH'], '/etc/pki/tls/certs/dc1.cyberhygiene.test.crt')
        self.assertEqual(values['SSL_KEY_PATH'], '/etc/pki/tls/private/dc1.key')

    def test_single_quoted_value_is_literal(self):
        values = parse_vars_file(VARS_FILE)
        self.assertEqual(values['ADMIN_PASSWORD'], 'Pa$$word with space')

    def test_single_quoted_substitution_text_is_literal(self):
        values = parse_vars_file("ADMIN_PASSWORD='ab`c$(d'\n")
        self.assertEqual(values['ADMIN_PASSWORD'], 'ab`c$(d')

    def test_hash_inside_word_is_not_comment(self):
        values = parse_vars_file('ADMIN_PASSWORD=Pa#ss42\nDOMAIN=a.test #comment\nDC1_IP=#1\n')

        self.assertEqual(values['ADMIN_PASSWORD'], 'Pa#ss42')
        self.assertEqual(values['DOMAIN'], 'a.test')
        self.assertEqual(values['DC1_IP'], '#1')

    def test_hash_inside_quotes_is_not_comment(self):
        values = parse_vars_file('ADMIN_PASSWORD="Pa #ss"  # admin\nTIMEZONE=\'UTC #x\'\n')

        self.assertEqual(values['ADMIN_PASSWORD'], 'Pa #ss')
        self.assertEqual(values['TIMEZONE'], 'UTC #x')

    def test_undefined_reference_rejected(self):
        with self.assertRaises(ConfigLoadError) as cm:
            parse_vars_file('DC1_HOSTNAME="dc1.${DOMAN}"\n')
        self.assertIn('DOMAN', str(cm.exception))

    def test_command_substitution_in_double_quotes_rejected(self):
        with self.assertRaises(ConfigLoadError):
            parse_vars_file('INSTALL_DATE="$(date +%Y%m%d)"\n')

    def test_command_substitution_rejected(self):
        with self.assertRaises(ConfigLoadError) as cm:
            parse_vars_file('INSTALL_DATE=$(date +%Y%m%d)\n')
        self.assertIn('INSTALL_DATE', str(cm.exception))

        with self.assertRaises(ConfigLoadError):
            parse_vars_file('INSTALL_DATE=`date`\n')

    def test_non_assignment_line_rejected(self):
        with self.assertRaises(ConfigLoadError) as cm:
            parse_vars_file('DOMAIN=example.test\necho hello\n')
        self.assertIn('line 2', str(cm.exception))

    def test_unquoted_whitespace_rejected(self):
        with self.assertRaises(ConfigLoadError):
            parse_vars_file('TIMEZONE=America New_York\n')

    def test_unbalanced_quote_rejected(self):
        with self.assertRaises(ConfigLoadError):
            parse_vars_file('DOMAIN="example.test\n')

    def test_empty_value(self):
        self.assertEqual(parse_vars_file('DOMAIN=\n'), {'DOMAIN': ''})


class TestLoadEnvironment(unittest.TestCase):
    """Fail-closed loading from disk."""

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp(prefix="environment_test_"))

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_load_vars_file(self):
        source = self.test_dir / "install_vars.sh"
        source.write_text(VARS_FILE)

        environment = load_environment(source)

        self.assertIsInstance(environment, EnvironmentStore)
        self.assertEqual(environment.get('DOMAIN'), 'cyberhygiene.test')
        self.assertEqual(environment.source, source)

    def test_load_yaml_file(self):
        source = self.test_dir / "install_vars.yaml"
        lines = [
            f"{key}: '{value}'" for key, value in BASE_ENVIRONMENT.items()
            if key != 'INSTALL_DATE'
        ]
        lines.append("INSTALL_DATE: 20261018")  # unquoted number is read as text
        source.write_text('\n'.join(lines) + '\n')

        environment = load_environment(source)

        self.assertEqual(environment.get('INSTALL_DATE'), '20261018')
        self.assertEqual(environment.get('TIMEZONE'), 'America/New_York')

    def test_yaml_values_kept_verbatim(self):
        values = parse_yaml_file('ADMIN_PASSWORD: 0123456\nDC1_HOSTNAME: 1_000\nTIMEZONE: yes\nEMPTY:\n')

        self.assertEqual(values, {
            'ADMIN_PASSWORD': '0123456',
            'DC1_HOSTNAME': '1_000',
            'TIMEZONE': 'yes',
            'EMPTY': '',
        })

    def test_yaml_explicit_non_string_rejected(self):
        with self.assertRaises(ConfigLoadError) as cm:
            parse_yaml_file('INSTALL_DATE: !!int 20261018\n')
        self.assertIn('INSTALL_DATE', str(cm.exception))

    def test_yaml_must_be_mapping(self):
        source = self.test_dir / "install_vars.yml"
        source.write_text("- DOMAIN\n- DC1_IP\n")

        with self.assertRaises(ConfigLoadError):
            load_environment(source)

    def test_missing_source(self):
        with self.assertRaises(ConfigLoadError) as cm:
            load_environment(self.test_dir / "absent.sh")
        self.assertIn('not found', str(cm.exception))

    def test_missing_required_keys_listed(self):
        source = self.test_dir / "install_vars.sh"
        source.write_text('DOMAIN=cyberhygiene.test\nDC1_IP=192.168.1.10\n')

        with self.assertRaises(ConfigLoadError) as cm:
            load_environment(source)

        message = str(cm.exception)
        self.assertIn('DC1_HOSTNAME', message)
        self.assertIn('ADMIN_PASSWORD', message)
        self.assertIn('INSTALL_DATE', message)

    def test_empty_required_key_rejected(self):
        source = self.test_dir / "install_vars.sh"
        text = VARS_FILE.replace('TIMEZONE="America/New_York"', 'TIMEZONE=""')
        source.write_text(text)

        with self.assertRaises(ConfigLoadError):
            load_environment(source)


class TestEnvironmentStore(unittest.TestCase):
    """Read-only access."""

    def test_get_present(self):
        environment = make_environment()
        self.assertEqual(environment.get('DC1_IP'), '192.168.1.10')

    def test_get_absent_raises_missing_config(self):
        environment = make_environment()
        with self.assertRaises(MissingConfig) as cm:
            environment.get('GRAYLOG_ROOT_PASSWORD')
        self.assertEqual(cm.exception.names, ['GRAYLOG_ROOT_PASSWORD'])

    def test_get_empty_raises_missing_config(self):
        environment = make_environment(ADMIN_EMAIL='')
        with self.assertRaises(MissingConfig):
            environment.get('ADMIN_EMAIL')

    def test_get_default(self):
        environment = make_environment()
        self.assertIsNone(environment.get('UNSET_KEY', None))

    def test_require_names_every_missing_key(self):
        environment = make_environment(ADMIN_EMAIL=None)
        with self.assertRaises(MissingConfig) as cm:
            environment.require(['DOMAIN', 'ADMIN_EMAIL', 'ZZ_EXTRA'])
        self.assertEqual(cm.exception.names, ['ADMIN_EMAIL', 'ZZ_EXTRA'])

    def test_store_is_read_only(self):
        environment = make_environment()
        with self.assertRaises(TypeError):
            environment['DOMAIN'] = 'other.test'
        with self.assertRaises(TypeError):
            environment._values['DOMAIN'] = 'other.test'

    def test_source_mapping_changes_do_not_leak(self):
        values = dict(BASE_ENVIRONMENT)
        environment = EnvironmentStore(values)
        values['DOMAIN'] = 'changed.test'
        self.assertEqual(environment.get('DOMAIN'), 'cyberhygiene.test')

    def test_redacted_masks_secrets(self):
        environment = make_environment()
        redacted = environment.redacted()

        self.assertEqual(redacted['ADMIN_PASSWORD'], '********')
        self.assertEqual(redacted['GRAYLOG_PASSWORD_SECRET'], '********')
        self.assertEqual(redacted['DOMAIN'], 'cyberhygiene.test')
        self.assertNotIn('S3cret', repr(environment))


if __name__ == '__main__':
    unittest.main()
