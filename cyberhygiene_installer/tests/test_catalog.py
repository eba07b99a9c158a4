# Path and File Name : /home/cyberhygiene/installer/cyberhygiene_installer/tests/test_catalog.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Tests for the packaged module catalog and catalog validation

import shutil
import sys
import tempfile
import unittest
from pathlib import Path

import yaml

sys.path.insert(0, str(Path(__file__).parent.parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from cyberhygiene_installer.errors import CatalogError
from cyberhygiene_installer.modules.catalog import load_catalog
from cyberhygiene_installer.modules.steps import RunCommand, WaitForService, WriteFile
from cyberhygiene_installer.orchestrator import Orchestrator
from cyberhygiene_installer.results import ModuleStatus

from installer_fakes import FakeClock, FakeRunner, make_environment


class TestPackagedCatalog(unittest.TestCase):
    """The catalog shipped with the installer."""

    def setUp(self):
        self.runner = FakeRunner()
        self.modules = load_catalog(host=self.runner)
        self.by_name = {m.name: m for m in self.modules}

    def test_modules_and_priorities(self):
        self.assertEqual([(m.priority, m.name) for m in self.modules],
                         [(30, 'graylog'), (60, 'wazuh')])
        self.assertEqual(self.by_name['graylog'].tag, '30-GRAYLOG')
        self.assertEqual(self.by_name['wazuh'].tag, '60-WAZUH')

    def test_graylog_required_keys(self):
        keys = set(self.by_name['graylog'].required_keys)
        for key in ('GRAYLOG_PASSWORD_SECRET', 'ADMIN_PASSWORD', 'ADMIN_EMAIL', 'TIMEZONE', 'DC1_IP', 'DOMAIN'):
            self.assertIn(key, keys)
        self.assertNotIn('HOSTNAME', keys)

    def test_graylog_server_conf_is_owner_only(self):
        conf = [s for s in self.by_name['graylog'].steps
                if isinstance(s, WriteFile) and s.path.name == 'server.conf']
        self.assertEqual(len(conf), 1)
        self.assertEqual(conf[0].mode, 0o600)

    def test_wazuh_keystore_password_is_secret(self):
        commands = [s for s in self.by_name['wazuh'].steps if isinstance(s, RunCommand)]
        secret = [c for c in commands if 'password' in c.argv]
        self.assertEqual(len(secret), 1)
        self.assertTrue(secret[0].secret)

    def test_services_declared_for_verification(self):
        self.assertIn('graylog-server', self.by_name['graylog'].services)
        self.assertIn('wazuh-manager', self.by_name['wazuh'].services)

    def test_readiness_waits_replace_fixed_sleeps(self):
        waits = [s for s in self.by_name['graylog'].steps if isinstance(s, WaitForService)]
        self.assertEqual([(w.service, w.required) for w in waits],
                         [('elasticsearch', False), ('graylog-server', True)])

    def test_missing_secret_fails_module_before_any_command(self):
        environment = make_environment(GRAYLOG_PASSWORD_SECRET=None)

        result = Orchestrator(self.modules).run(environment)

        graylog, wazuh = result.module_records
        self.assertEqual(graylog.outcome.status, ModuleStatus.FAILED)
        self.assertIn('GRAYLOG_PASSWORD_SECRET', graylog.outcome.reason)
        self.assertEqual(wazuh.outcome.status, ModuleStatus.SKIPPED)
        self.assertEqual(self.runner.commands, [])


class TestCatalogValidation(unittest.TestCase):
    """Invalid catalogs abort before any module runs."""

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp(prefix="catalog_test_"))

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def write(self, data) -> Path:
        path = self.test_dir / "catalog.yaml"
        with open(path, 'w') as f:
            yaml.safe_dump(data, f)
        return path

    def test_custom_catalog(self):
        path = self.write({'modules': [{
            'priority': 10,
            'name': 'freeipa',
            'steps': [
                {'install': ['ipa-server', 'ipa-server-dns']},
                {'wait': {'service': 'ipa', 'timeout': 300}},
            ],
        }]})

        modules = load_catalog(path, host=FakeRunner(), clock=FakeClock())

        self.assertEqual(len(modules), 1)
        self.assertEqual(modules[0].tag, '10-FREEIPA')
        self.assertEqual(len(modules[0].steps), 2)

    def test_unknown_step_type(self):
        path = self.write({'modules': [{
            'priority': 10, 'name': 'x', 'steps': [{'reboot': True}],
        }]})
        with self.assertRaises(CatalogError):
            load_catalog(path)

    def test_step_with_two_actions(self):
        path = self.write({'modules': [{
            'priority': 10, 'name': 'x',
            'steps': [{'install': ['a'], 'enable': ['a']}],
        }]})
        with self.assertRaises(CatalogError):
            load_catalog(path)

    def test_priority_reserved_for_verification(self):
        path = self.write({'modules': [{'priority': 99, 'name': 'x', 'steps': []}]})
        with self.assertRaises(CatalogError):
            load_catalog(path)

    def test_duplicate_priorities(self):
        path = self.write({'modules': [
            {'priority': 30, 'name': 'graylog', 'steps': []},
            {'priority': 30, 'name': 'other', 'steps': []},
        ]})
        with self.assertRaises(CatalogError) as cm:
            load_catalog(path)
        self.assertIn('30', str(cm.exception))

    def test_invalid_file_mode(self):
        path = self.write({'modules': [{
            'priority': 10, 'name': 'x',
            'steps': [{'write_file': {'path': '/tmp/x', 'content': '', 'mode': '0999'}}],
        }]})
        with self.assertRaises(CatalogError):
            load_catalog(path)

    def test_missing_catalog(self):
        with self.assertRaises(CatalogError):
            load_catalog(self.test_dir / "absent.yaml")

    def test_unparsable_catalog(self):
        path = self.test_dir / "catalog.yaml"
        path.write_text("modules: [unclosed\n")
        with self.assertRaises(CatalogError):
            load_catalog(path)


if __name__ == '__main__':
    unittest.main()
