import json
import os
import shutil
import tempfile
import unittest
from unittest import mock

from modules.budget.config import ConfigLoader

VALID_CONFIG = {
    "kontrak": {"nama": "Kontrak Uji", "nilai_kontrak": 1000000, "mata_uang": "IDR"},
    "ai": {"model": "gemini-2.0-flash", "endpoint": "https://example.test/models", "timeout": 5},
}


class TestConfigLoader(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.config_path = os.path.join(self.temp_dir, 'budget.json')
        self._write(VALID_CONFIG)

        self.env = mock.patch.dict(os.environ)
        self.env.start()
        os.environ.pop('CONTRACT_VALUE_IDR', None)

    def tearDown(self):
        self.env.stop()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write(self, data):
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(data, f)

    def test_load(self):
        config = ConfigLoader(self.config_path)
        self.assertEqual(config.get_contract_value(), 1000000)
        self.assertEqual(config.get_ai_settings()['timeout'], 5)
        self.assertEqual(config.get_allowed_extensions(), ['xlsx', 'xlsm', 'csv'])
        self.assertEqual(config.summary()['nama_kontrak'], 'Kontrak Uji')

    def test_env_override(self):
        config = ConfigLoader(self.config_path)
        os.environ['CONTRACT_VALUE_IDR'] = 'Rp 2.500.000'
        self.assertEqual(config.get_contract_value(), 2500000)

        os.environ['CONTRACT_VALUE_IDR'] = 'abc'
        self.assertEqual(config.get_contract_value(), 1000000)

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            ConfigLoader(os.path.join(self.temp_dir, 'missing.json'))

    def test_invalid_json(self):
        with open(self.config_path, 'w', encoding='utf-8') as f:
            f.write('{not json')
        with self.assertRaises(ValueError):
            ConfigLoader(self.config_path)

    def test_invalid_structure(self):
        self._write({"kontrak": VALID_CONFIG["kontrak"]})
        with self.assertRaises(ValueError):
            ConfigLoader(self.config_path)

        bad = json.loads(json.dumps(VALID_CONFIG))
        bad['kontrak']['nilai_kontrak'] = -1
        self._write(bad)
        with self.assertRaises(ValueError):
            ConfigLoader(self.config_path)

    def test_save_config(self):
        config = ConfigLoader(self.config_path)

        data = config.as_dict()
        data['kontrak']['nilai_kontrak'] = 5000
        self.assertTrue(config.save_config(data))
        self.assertEqual(config.get_contract_value(), 5000)

        with open(self.config_path, encoding='utf-8') as f:
            self.assertEqual(json.load(f)['kontrak']['nilai_kontrak'], 5000)

    def test_save_invalid_config_keeps_file(self):
        config = ConfigLoader(self.config_path)
        self.assertFalse(config.save_config({"kontrak": {}}))
        self.assertEqual(config.get_contract_value(), 1000000)

    def test_reload(self):
        config = ConfigLoader(self.config_path)
        self.assertTrue(config.reload())


if __name__ == '__main__':
    unittest.main()
