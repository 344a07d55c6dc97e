import os
import json
import shutil
import tempfile
import unittest
from unittest.mock import patch

from src.core import config_manager

class TestConfigManager(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()
        self.config_file = os.path.join(self.tmp_dir, "config.json")
        self.patchers = [
            patch('src.core.config_manager.DATA_DIR', self.tmp_dir),
            patch('src.core.config_manager.CONFIG_FILE', self.config_file),
        ]
        for p in self.patchers:
            p.start()

    def tearDown(self):
        for p in self.patchers:
            p.stop()
        shutil.rmtree(self.tmp_dir)

    def test_defaults_without_file(self):
        config = config_manager.load_config()
        self.assertEqual(config, config_manager.DEFAULT_CONFIG)
        self.assertIsNot(config, config_manager.DEFAULT_CONFIG)

    def test_saved_values_override_defaults(self):
        config_manager.save_config({"model": "other-model", "request_timeout": 30})

        config = config_manager.load_config()
        self.assertEqual(config["model"], "other-model")
        self.assertEqual(config["request_timeout"], 30)
        self.assertEqual(config["max_tokens"], config_manager.DEFAULT_CONFIG["max_tokens"])

    def test_corrupt_file_falls_back_to_defaults(self):
        with open(self.config_file, 'w', encoding='utf-8') as f:
            f.write("{not json")

        with self.assertLogs('src.core.config_manager', level='ERROR'):
            config = config_manager.load_config()
        self.assertEqual(config, config_manager.DEFAULT_CONFIG)

    def test_non_object_file_is_ignored(self):
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(["model"], f)

        with self.assertLogs('src.core.config_manager', level='ERROR'):
            config = config_manager.load_config()
        self.assertEqual(config, config_manager.DEFAULT_CONFIG)

    def test_api_key_from_environment(self):
        with patch.dict(os.environ, {config_manager.API_KEY_ENV: " sk-test \n"}):
            self.assertEqual(config_manager.get_api_key(), "sk-test")
        with patch.dict(os.environ, {config_manager.API_KEY_ENV: "   "}):
            self.assertIsNone(config_manager.get_api_key())

if __name__ == '__main__':
    unittest.main()
